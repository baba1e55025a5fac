from pydantic import BaseModel, validator
from typing import List, Literal, Optional
from datetime import datetime

class MessageCreate(BaseModel):
    counterpart_id: str
    body: str

    @validator("body")
    def strip_body(cls, v):
        # Un cuerpo vacío lo rechaza el servicio con validation_error
        return v.strip()

class MessageResponse(BaseModel):
    id: str
    user_id: str
    seller_id: str
    sender_type: Literal["user", "seller"]
    body: str
    is_read: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class CounterpartInfo(BaseModel):
    """Datos de presentación de la otra parte de la conversación"""
    id: str
    kind: Literal["user", "seller"]
    display_name: str
    email: Optional[str] = None
    image: Optional[str] = None
    shop_owner_name: Optional[str] = None

class ConversationDetail(BaseModel):
    counterpart: CounterpartInfo
    messages: List[MessageResponse]

class ConversationSummary(BaseModel):
    counterpart: CounterpartInfo
    last_message: str
    last_message_type: Literal["user", "seller"]
    last_message_time: datetime
    unread_count: int

class ReadStateUpdate(BaseModel):
    updated: int
