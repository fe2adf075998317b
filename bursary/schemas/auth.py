from pydantic import BaseModel, EmailStr, Field
from datetime import datetime

from bursary.models.enums import UserRole


# -------------------------------------------------------------------
# LOGIN REQUEST (students and admins)
# -------------------------------------------------------------------
class LoginRequest(BaseModel):
    email: EmailStr
    password: str


# -------------------------------------------------------------------
# ADMIN REGISTRATION
# -------------------------------------------------------------------
class AdminRegister(BaseModel):
    full_name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=6)


class AdminRead(BaseModel):
    id: int
    full_name: str
    email: EmailStr
    created_at: datetime

    class Config:
        from_attributes = True


# -------------------------------------------------------------------
# TOKEN RESPONSE
# -------------------------------------------------------------------
class TokenWithUser(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    role: UserRole
    user: dict
