from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime
from decimal import Decimal


class BursaryCreate(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    provider: Optional[str] = None
    amount: Optional[Decimal] = Field(default=None, ge=0)
    deadline: Optional[date] = None
    eligibility: Optional[str] = None
    created_by: Optional[int] = None


class BursaryUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    provider: Optional[str] = None
    amount: Optional[Decimal] = Field(default=None, ge=0)
    deadline: Optional[date] = None
    eligibility: Optional[str] = None


class BursaryRead(BaseModel):
    id: int
    title: str
    description: Optional[str] = None
    provider: Optional[str] = None
    amount: Optional[Decimal] = None
    deadline: Optional[date] = None
    eligibility: Optional[str] = None
    created_by: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True
