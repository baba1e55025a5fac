from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey, Index, CheckConstraint
from app.db.base_class import Base
from app.core.utils import utcnow
import uuid

SENDER_TYPES = ("user", "seller")

class Message(Base):
    __tablename__ = "messages"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    # El par (user_id, seller_id) identifica la conversación
    user_id = Column(String, ForeignKey("users.id"), nullable=False)
    seller_id = Column(String, ForeignKey("sellers.id"), nullable=False)
    sender_type = Column(String(16), nullable=False)
    body = Column(Text, nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)
    # Marca de tiempo con microsegundos asignada al insertar; ordena la conversación
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    # Solo cambia cuando is_read pasa a True
    updated_at = Column(DateTime(timezone=True), nullable=True)

    # Índices para optimizar búsqueda de conversaciones
    __table_args__ = (
        CheckConstraint("sender_type IN ('user', 'seller')", name="ck_message_sender_type"),
        Index('idx_message_user_seller', 'user_id', 'seller_id'),
        Index('idx_message_seller_unread', 'seller_id', 'sender_type', 'is_read'),
        Index('idx_message_user_unread', 'user_id', 'sender_type', 'is_read'),
        Index('idx_message_created_at', 'created_at'),
    )

    @property
    def recipient_type(self):
        return "seller" if self.sender_type == "user" else "user"
