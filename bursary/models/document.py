from sqlmodel import SQLModel, Field, Column
from sqlalchemy import Integer, String, ForeignKey
from datetime import datetime
from typing import Optional


class Document(SQLModel, table=True):
    __tablename__ = "documents"

    id: Optional[int] = Field(default=None, primary_key=True)

    application_id: int = Field(
        sa_column=Column(Integer, ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True)
    )
    student_id: int = Field(
        sa_column=Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    )

    document_type: str = Field(sa_column=Column(String, nullable=False))
    file_name: str = Field(sa_column=Column(String, nullable=False))
    file_url: str = Field(sa_column=Column(String, nullable=False))

    uploaded_at: datetime = Field(default_factory=datetime.utcnow)
