# bursary/api/endpoints/admins.py

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from bursary.api.deps import get_db_session, require_admin
from bursary.core.rate_limiter import limiter, login_limit
from bursary.models.admin import Admin
from bursary.models.enums import UserRole
from bursary.schemas.auth import AdminRead, AdminRegister, LoginRequest, TokenWithUser
from bursary.services.auth_service import (
    authenticate_admin,
    create_admin,
    create_login_response,
    list_admins,
)

router = APIRouter(prefix="/admins", tags=["Admins"])


# -------------------------------------------------------------------
# REGISTER ADMIN
# -------------------------------------------------------------------
@router.post("/register", response_model=AdminRead, status_code=status.HTTP_201_CREATED)
async def register(
    data: AdminRegister,
    session: AsyncSession = Depends(get_db_session),
):
    return await create_admin(session, data.full_name, data.email, data.password)


# -------------------------------------------------------------------
# LOGIN
# -------------------------------------------------------------------
@router.post("/login", response_model=TokenWithUser)
@limiter.limit(login_limit)
async def login(
    request: Request,
    payload: LoginRequest,
    session: AsyncSession = Depends(get_db_session),
):
    admin = await authenticate_admin(session, payload.email, payload.password)
    if not admin:
        raise HTTPException(status_code=401, detail="Invalid credentials")

    return create_login_response(admin, UserRole.Admin)


@router.get("/me", response_model=AdminRead)
async def me(current_admin: Admin = Depends(require_admin)):
    return current_admin


@router.get("", response_model=List[AdminRead])
async def all_admins(session: AsyncSession = Depends(get_db_session)):
    return await list_admins(session)
