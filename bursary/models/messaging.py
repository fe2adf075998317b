# bursary/models/messaging.py

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import Integer, String, Text, Boolean, ForeignKey, UniqueConstraint
from datetime import datetime
from typing import Optional


class Conversation(SQLModel, table=True):
    """One thread per (student, admin) pair."""

    __tablename__ = "conversations"
    __table_args__ = (
        UniqueConstraint("student_id", "admin_id", name="uq_conversation_pair"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    student_id: int = Field(
        sa_column=Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    )
    admin_id: int = Field(
        sa_column=Column(Integer, ForeignKey("admins.id", ondelete="CASCADE"), nullable=False, index=True)
    )

    created_at: datetime = Field(default_factory=datetime.utcnow)
    last_message_at: Optional[datetime] = Field(default=None)


class Message(SQLModel, table=True):
    __tablename__ = "messages"

    id: Optional[int] = Field(default=None, primary_key=True)

    conversation_id: int = Field(
        sa_column=Column(Integer, ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False, index=True)
    )

    sender_id: int = Field(sa_column=Column(Integer, nullable=False))
    sender_role: str = Field(sa_column=Column(String, nullable=False))
    receiver_id: int = Field(sa_column=Column(Integer, nullable=False))
    receiver_role: str = Field(sa_column=Column(String, nullable=False))

    content: str = Field(sa_column=Column(Text, nullable=False))
    is_read: bool = Field(default=False, sa_column=Column(Boolean, nullable=False, default=False))

    sent_at: datetime = Field(default_factory=datetime.utcnow)
