# bursary/schemas/application.py

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime

from bursary.models.enums import UserRole


# ============================================================
# STUDENT → submit / withdraw
# ============================================================
class ApplicationRequest(BaseModel):
    student_id: int
    bursary_id: int


# ============================================================
# STATUS TRANSITION (admin or student)
# ============================================================
class StatusUpdateCreate(BaseModel):
    application_id: int
    status: str = Field(min_length=1)
    updated_by: int
    updated_by_role: UserRole

    remarks: Optional[str] = None
    is_visible_to_student: bool = True
    action_type: Optional[str] = None
    attachment_url: Optional[str] = None

    @field_validator("status")
    def status_not_blank(cls, v: str):
        v = v.strip()
        if not v:
            raise ValueError("status must not be blank")
        # Labels end up in email headers
        if not v.isprintable():
            raise ValueError("status must not contain line breaks or control characters")
        return v


class StatusUpdateRead(BaseModel):
    id: int
    application_id: int
    status: str
    updated_by: int
    updated_by_role: str
    remarks: Optional[str] = None
    is_visible_to_student: bool
    action_type: Optional[str] = None
    attachment_url: Optional[str] = None
    updated_at: datetime

    class Config:
        from_attributes = True


# ============================================================
# RESPONSES
# ============================================================
class LifecycleResponse(BaseModel):
    message: str
    application_id: Optional[int] = None
    current_status: Optional[str] = None
    status_update_id: Optional[int] = None
    notification: str = "queued"


class StudentApplicationRead(BaseModel):
    application_id: int
    bursary_id: int
    bursary_title: str
    application_date: datetime
    current_status: str
    status_history: List[StatusUpdateRead] = []


class AdminApplicationRead(StudentApplicationRead):
    student_id: int
    student_name: str
    student_email: str
