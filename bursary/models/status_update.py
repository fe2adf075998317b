# bursary/models/status_update.py

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import Integer, String, Text, Boolean, DateTime, ForeignKey
from datetime import datetime
from typing import Optional


class StatusUpdate(SQLModel, table=True):
    """Append-only history of an application's lifecycle."""

    __tablename__ = "status_updates"

    id: Optional[int] = Field(default=None, primary_key=True)

    application_id: int = Field(
        sa_column=Column(Integer, ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True)
    )

    status: str = Field(sa_column=Column(String, nullable=False))

    updated_by: int = Field(sa_column=Column(Integer, nullable=False))
    updated_by_role: str = Field(sa_column=Column(String, nullable=False))

    remarks: Optional[str] = Field(
        default=None, sa_column=Column(Text, nullable=True)
    )

    is_visible_to_student: bool = Field(
        default=True, sa_column=Column(Boolean, nullable=False, default=True)
    )

    action_type: Optional[str] = Field(
        default=None, sa_column=Column(String, nullable=True)
    )

    attachment_url: Optional[str] = Field(
        default=None, sa_column=Column(String, nullable=True)
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime, nullable=False, index=True)
    )
