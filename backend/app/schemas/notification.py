from pydantic import BaseModel
from typing import Literal, Optional
from datetime import datetime

class NotificationResponse(BaseModel):
    id: str
    recipient_id: str
    recipient_type: Literal["user", "seller"]
    type: str
    title: str
    body: str
    related_id: Optional[str] = None
    related_type: Optional[str] = None
    is_read: bool
    created_at: datetime

    class Config:
        from_attributes = True

class UnreadCount(BaseModel):
    count: int
