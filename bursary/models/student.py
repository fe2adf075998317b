from sqlmodel import SQLModel, Field, Column
from sqlalchemy import String
from datetime import datetime
from typing import Optional


class Student(SQLModel, table=True):
    __tablename__ = "students"

    id: Optional[int] = Field(default=None, primary_key=True)

    full_name: str = Field(
        sa_column=Column(String, nullable=False)
    )

    email: str = Field(
        sa_column=Column(String, nullable=False, unique=True, index=True)
    )

    password_hash: str = Field(
        sa_column=Column(String, nullable=False)
    )

    # Optional profile fields
    phone: Optional[str] = Field(
        default=None, sa_column=Column(String, nullable=True)
    )
    institution: Optional[str] = Field(
        default=None, sa_column=Column(String, nullable=True)
    )
    course: Optional[str] = Field(
        default=None, sa_column=Column(String, nullable=True)
    )
    year_of_study: Optional[int] = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)
