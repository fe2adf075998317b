# bursary/api/endpoints/students.py

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from bursary.api.deps import get_db_session, require_student
from bursary.core.rate_limiter import limiter, login_limit
from bursary.models.enums import UserRole
from bursary.models.student import Student
from bursary.schemas.auth import LoginRequest, TokenWithUser
from bursary.schemas.student import StudentRead, StudentRegister
from bursary.services.auth_service import (
    authenticate_student,
    create_login_response,
    get_student_by_id,
    list_students,
    register_student,
)

router = APIRouter(
    prefix="/students",
    tags=["Students"]
)


# ------------------------------------------------------------
# STUDENT SELF-REGISTRATION (PUBLIC)
# ------------------------------------------------------------
@router.post("/register", response_model=StudentRead, status_code=status.HTTP_201_CREATED)
async def register(
    data: StudentRegister,
    session: AsyncSession = Depends(get_db_session),
):
    student = await register_student(session, data)
    return StudentRead.model_validate(student)


# ------------------------------------------------------------
# STUDENT LOGIN
# ------------------------------------------------------------
@router.post("/login", response_model=TokenWithUser)
@limiter.limit(login_limit)
async def login(
    request: Request,
    data: LoginRequest,
    session: AsyncSession = Depends(get_db_session),
):
    student = await authenticate_student(session, data.email, data.password)
    if not student:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    return create_login_response(student, UserRole.Student)


# ------------------------------------------------------------
# GET "MY PROFILE"
# ------------------------------------------------------------
@router.get("/me", response_model=StudentRead)
async def me(current_student: Student = Depends(require_student)):
    return StudentRead.model_validate(current_student)


@router.get("", response_model=List[StudentRead])
async def all_students(session: AsyncSession = Depends(get_db_session)):
    return await list_students(session)


@router.get("/{student_id}", response_model=StudentRead)
async def one_student(student_id: int, session: AsyncSession = Depends(get_db_session)):
    student = await get_student_by_id(session, student_id)
    if not student:
        raise HTTPException(status_code=404, detail="Student not found")
    return student
