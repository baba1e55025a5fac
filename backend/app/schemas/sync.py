from pydantic import BaseModel
from typing import List
from datetime import datetime

from app.schemas.message import ConversationSummary

class SyncSnapshot(BaseModel):
    """Estado agregado que el cliente vuelve a pedir en cada intervalo de polling"""
    server_time: datetime
    poll_interval_seconds: int
    changed: bool
    unread_messages: int
    unread_notifications: int
    conversations: List[ConversationSummary]
