# bursary/services/auth_service.py

from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from loguru import logger

from bursary.core.config import settings
from bursary.core.exceptions import ConflictError
from bursary.core.security import hash_password, verify_password, create_access_token
from bursary.models.admin import Admin
from bursary.models.enums import UserRole
from bursary.models.student import Student
from bursary.schemas.auth import AdminRead, TokenWithUser
from bursary.schemas.student import StudentRead, StudentRegister


# ============================================================================
# STUDENTS
# ============================================================================
async def get_student_by_email(session: AsyncSession, email: str) -> Student | None:
    result = await session.execute(select(Student).where(Student.email == email))
    return result.scalar_one_or_none()


async def get_student_by_id(session: AsyncSession, student_id: int) -> Student | None:
    return await session.get(Student, student_id)


async def list_students(session: AsyncSession) -> list[Student]:
    result = await session.execute(select(Student).order_by(Student.id))
    return result.scalars().all()


async def register_student(session: AsyncSession, data: StudentRegister) -> Student:
    email = data.email.lower()
    if await get_student_by_email(session, email):
        raise ConflictError("A student with this email already exists")

    student = Student(
        full_name=data.full_name.strip(),
        email=email,
        password_hash=hash_password(data.password),
        phone=data.phone,
        institution=data.institution,
        course=data.course,
        year_of_study=data.year_of_study,
    )
    session.add(student)

    try:
        await session.commit()
        await session.refresh(student)
    except IntegrityError:
        await session.rollback()
        raise ConflictError("A student with this email already exists")

    logger.info(f"Registered student {student.id}")
    return student


async def authenticate_student(session: AsyncSession, email: str, password: str) -> Student | None:
    student = await get_student_by_email(session, email.lower())
    if not student or not verify_password(password, student.password_hash):
        return None
    return student


# ============================================================================
# ADMINS
# ============================================================================
async def get_admin_by_email(session: AsyncSession, email: str) -> Admin | None:
    result = await session.execute(select(Admin).where(Admin.email == email))
    return result.scalar_one_or_none()


async def get_admin_by_id(session: AsyncSession, admin_id: int) -> Admin | None:
    return await session.get(Admin, admin_id)


async def list_admins(session: AsyncSession) -> list[Admin]:
    result = await session.execute(select(Admin).order_by(Admin.id))
    return result.scalars().all()


async def create_admin(session: AsyncSession, full_name: str, email: str, password: str) -> Admin:
    email = email.lower()
    if await get_admin_by_email(session, email):
        raise ConflictError("An admin with this email already exists")

    admin = Admin(
        full_name=full_name.strip(),
        email=email,
        password_hash=hash_password(password),
    )
    session.add(admin)

    try:
        await session.commit()
        await session.refresh(admin)
    except IntegrityError:
        await session.rollback()
        raise ConflictError("An admin with this email already exists")

    logger.info(f"Registered admin {admin.id}")
    return admin


async def authenticate_admin(session: AsyncSession, email: str, password: str) -> Admin | None:
    admin = await get_admin_by_email(session, email.lower())
    if not admin or not verify_password(password, admin.password_hash):
        return None
    return admin


# ============================================================================
# LOGIN RESPONSE
# ============================================================================
def create_login_response(account: Student | Admin, role: UserRole) -> TokenWithUser:
    token = create_access_token(account.id, role)

    if role == UserRole.Student:
        user = StudentRead.model_validate(account).model_dump(mode="json")
    else:
        user = AdminRead.model_validate(account).model_dump(mode="json")

    return TokenWithUser(
        access_token=token,
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        role=role,
        user=user,
    )
