from sqlmodel import SQLModel, Field, Column
from sqlalchemy import String, Text, Numeric, Integer, ForeignKey
from datetime import date, datetime
from decimal import Decimal
from typing import Optional


class Bursary(SQLModel, table=True):
    __tablename__ = "bursaries"

    id: Optional[int] = Field(default=None, primary_key=True)

    title: str = Field(sa_column=Column(String, nullable=False))

    description: Optional[str] = Field(
        default=None, sa_column=Column(Text, nullable=True)
    )
    provider: Optional[str] = Field(
        default=None, sa_column=Column(String, nullable=True)
    )
    amount: Optional[Decimal] = Field(
        default=None, sa_column=Column(Numeric(12, 2), nullable=True)
    )
    deadline: Optional[date] = Field(default=None)
    eligibility: Optional[str] = Field(
        default=None, sa_column=Column(Text, nullable=True)
    )

    created_by: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("admins.id", ondelete="SET NULL"), nullable=True)
    )

    created_at: datetime = Field(default_factory=datetime.utcnow)
