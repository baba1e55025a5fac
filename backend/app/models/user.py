from sqlalchemy import Column, String, Boolean, DateTime, Index
from sqlalchemy.sql import func
from app.db.base_class import Base
import uuid

class User(Base):
    """Comprador. Tabla del directorio externo; aquí solo se lee."""
    __tablename__ = "users"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=True)
    email = Column(String, unique=True, index=True, nullable=False)
    image = Column(String, nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index('idx_user_name', 'name'),
    )

    @property
    def display_name(self):
        return self.name or "Usuario"
