# bursary/schemas/student.py
from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime


# ------------------------------------------------------------
# STUDENT REGISTRATION (Public)
# ------------------------------------------------------------
class StudentRegister(BaseModel):
    full_name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)

    phone: Optional[str] = None
    institution: Optional[str] = None
    course: Optional[str] = None
    year_of_study: Optional[int] = None


# ------------------------------------------------------------
# STUDENT READ RESPONSE
# ------------------------------------------------------------
class StudentRead(BaseModel):
    id: int
    full_name: str
    email: EmailStr

    phone: Optional[str] = None
    institution: Optional[str] = None
    course: Optional[str] = None
    year_of_study: Optional[int] = None

    created_at: datetime

    class Config:
        from_attributes = True
