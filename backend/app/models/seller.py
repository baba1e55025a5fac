from sqlalchemy import Column, String, Boolean, DateTime, Index
from sqlalchemy.sql import func
from app.db.base_class import Base
import uuid

class Seller(Base):
    """Tienda. Tabla del directorio externo; aquí solo se lee."""
    __tablename__ = "sellers"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    shop_name = Column(String, nullable=True)
    shop_owner_name = Column(String, nullable=True)
    email = Column(String, unique=True, index=True, nullable=False)
    image = Column(String, nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index('idx_seller_shop_name', 'shop_name'),
    )

    @property
    def display_name(self):
        return self.shop_name or "La tienda"
