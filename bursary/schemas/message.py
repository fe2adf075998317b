from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime

from bursary.models.enums import UserRole


class MessageCreate(BaseModel):
    sender_id: int
    sender_role: UserRole
    receiver_id: int
    content: str = Field(min_length=1, max_length=5000)

    @field_validator("content")
    def content_not_blank(cls, v: str):
        if not v.strip():
            raise ValueError("content must not be blank")
        return v


class MessageRead(BaseModel):
    id: int
    conversation_id: int
    sender_id: int
    sender_role: str
    receiver_id: int
    receiver_role: str
    content: str
    is_read: bool
    sent_at: datetime

    class Config:
        from_attributes = True


class ConversationRead(BaseModel):
    id: int
    student_id: int
    admin_id: int
    counterpart_id: int
    counterpart_name: str
    created_at: datetime
    last_message_at: Optional[datetime] = None
    unread_count: int = 0


class MarkReadRequest(BaseModel):
    reader_id: int
    reader_role: UserRole
