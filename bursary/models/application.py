# bursary/models/application.py

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import Integer, String, DateTime, ForeignKey, UniqueConstraint
from datetime import datetime
from typing import Optional

from bursary.models.enums import ApplicationStatus


class Application(SQLModel, table=True):
    __tablename__ = "applications"
    __table_args__ = (
        UniqueConstraint("student_id", "bursary_id", name="uq_application_student_bursary"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    student_id: int = Field(
        sa_column=Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    )

    bursary_id: int = Field(
        sa_column=Column(Integer, ForeignKey("bursaries.id"), nullable=False, index=True)
    )

    application_date: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime, nullable=False)
    )

    # Mirrors the status of the latest status_updates row
    current_status: str = Field(
        default=ApplicationStatus.Submitted.value,
        sa_column=Column(String, nullable=False)
    )
