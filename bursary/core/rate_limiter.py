# bursary/core/rate_limiter.py
from typing import Optional

from loguru import logger
from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from bursary.core.config import settings


def client_ip(request: Request) -> str:
    """Originating client address; the portal runs behind a reverse proxy in prod."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.headers.get("X-Real-IP") or get_remote_address(request)


def login_limit() -> str:
    # Read per request so tests and deployments can tune it through env
    return settings.LOGIN_RATE_LIMIT


def build_limiter(storage_uri: Optional[str] = None) -> Limiter:
    """
    Shared counters when a storage URI is configured (several workers),
    in-process counters otherwise or when the storage backend is unusable.
    """
    if not storage_uri:
        logger.info("RATE_LIMIT_STORAGE_URI not set. Login attempts are counted in memory.")
        return Limiter(key_func=client_ip)

    try:
        limiter = Limiter(key_func=client_ip, storage_uri=storage_uri, strategy="fixed-window")
    except Exception as e:
        logger.error(f"Rate limit storage '{storage_uri.split('://', 1)[0]}' unusable, falling back to memory: {e}")
        return Limiter(key_func=client_ip)

    logger.info("Login attempts are counted in shared storage")
    return limiter


limiter = build_limiter(settings.RATE_LIMIT_STORAGE_URI)
