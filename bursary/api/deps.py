# bursary/api/deps.py

from typing import AsyncGenerator, Optional, Tuple

from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from bursary.core.database import get_session
from bursary.core.security import decode_access_token
from bursary.models.admin import Admin
from bursary.models.enums import UserRole
from bursary.models.student import Student


# ------------------------------------------------------------
# HTTP Bearer Authentication
# ------------------------------------------------------------
bearer_scheme = HTTPBearer(auto_error=True)
optional_bearer = HTTPBearer(auto_error=False)


# ------------------------------------------------------------
# DB Session
# ------------------------------------------------------------
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_session():
        yield session


def role_required(role: UserRole):
    """Enforces that the bearer token belongs to an existing account of `role`."""

    model = Student if role == UserRole.Student else Admin

    async def checker(
        credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
        session: AsyncSession = Depends(get_db_session),
    ):
        account_id, token_role = decode_access_token(credentials.credentials)

        if token_role != role:
            raise HTTPException(status_code=403, detail=f"Access denied for role '{token_role.value}'")

        account = await session.get(model, account_id)
        if not account:
            raise HTTPException(401, "Account not found")

        return account

    return checker


async def optional_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_bearer),
) -> Optional[Tuple[int, UserRole]]:
    """(account_id, role) when a bearer token is sent, None for anonymous calls."""
    if credentials is None:
        return None
    return decode_access_token(credentials.credentials)


# ------------------------------------------------------------
# Exposed dependencies for routers
# ------------------------------------------------------------
require_student = role_required(UserRole.Student)
require_admin = role_required(UserRole.Admin)
