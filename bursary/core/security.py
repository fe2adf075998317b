# bursary/core/security.py
import hashlib
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

import jwt
from passlib.context import CryptContext

from bursary.core.config import settings
from bursary.core.exceptions import AuthenticationError
from bursary.models.enums import UserRole

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
ALGORITHM = "HS256"
TOKEN_ISSUER = "bursary-portal"

# bcrypt ignores everything past this many bytes
BCRYPT_MAX_BYTES = 72


# ----------------------------------------------------------------
# PASSWORDS
# ----------------------------------------------------------------
def _bcrypt_input(password: str) -> str:
    raw = password.encode("utf-8")
    if len(raw) <= BCRYPT_MAX_BYTES:
        return password
    # 64 hex chars, so every byte of a long passphrase still counts
    return hashlib.sha256(raw).hexdigest()


def hash_password(password: str) -> str:
    return pwd_context.hash(_bcrypt_input(password))


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(_bcrypt_input(plain_password), hashed_password)


# ----------------------------------------------------------------
# ACCESS TOKENS
# ----------------------------------------------------------------
def create_access_token(
    account_id: int,
    role: UserRole,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Signed token naming one student or admin account."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))

    claims = {
        "sub": str(account_id),
        "role": role.value,
        "iss": TOKEN_ISSUER,
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=ALGORITHM)


def decode_access_token(token: str) -> Tuple[int, UserRole]:
    """
    Returns (account_id, role). Expired, forged or malformed tokens raise
    AuthenticationError.
    """
    try:
        claims = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[ALGORITHM],
            issuer=TOKEN_ISSUER,
            options={"require": ["sub", "role", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Session expired, please log in again")
    except jwt.PyJWTError:
        raise AuthenticationError("Could not validate credentials")

    try:
        return int(claims["sub"]), UserRole(claims["role"])
    except ValueError:
        raise AuthenticationError("Invalid token payload")
