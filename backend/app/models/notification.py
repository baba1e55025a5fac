from sqlalchemy import Column, String, Text, Boolean, DateTime, Index
from app.db.base_class import Base
from app.core.utils import utcnow
import uuid

NOTIFICATION_TYPES = ("message", "order", "product", "system")

class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String, primary_key=True, index=True, default=lambda: str(uuid.uuid4()))
    recipient_id = Column(String, nullable=False)
    recipient_type = Column(String(16), nullable=False)  # user, seller
    type = Column(String(32), nullable=False, default="message")
    title = Column(String, nullable=False)
    body = Column(Text, nullable=False)
    # Referencia débil a la entidad de origen (p. ej. el id del mensaje), sin FK
    related_id = Column(String, nullable=True)
    related_type = Column(String(32), nullable=True)
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (
        Index('idx_notification_recipient_read', 'recipient_id', 'recipient_type', 'is_read'),
        Index('idx_notification_created_at', 'created_at'),
    )
