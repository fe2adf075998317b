# bursary/main.py

import sys
import time

import psutil
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from bursary.core.config import settings
from bursary.core.database import AsyncSessionLocal, init_db, ping_database
from bursary.core.exceptions import BursaryError
from bursary.core.rate_limiter import limiter
from bursary.core.storage import ensure_upload_dir
from bursary.services.auth_service import create_admin, get_admin_by_email
from bursary.services.email_service import EmailNotifier

# Routers
from bursary.api.endpoints import (
    admins as admins_router,
    applications as applications_router,
    bursaries as bursaries_router,
    documents as documents_router,
    messages as messages_router,
    status_updates as status_router,
    students as students_router,
)

# ------------------------------------------------------------
# LOGURU CONFIGURATION
# ------------------------------------------------------------
logger.remove()
logger.add(
    sys.stdout,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
           "<level>{level}</level> | "
           "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
           "<level>{message}</level>",
    colorize=True,
    backtrace=True,
    diagnose=settings.ENV != "prod",
)

# ------------------------------------------------------------
# FASTAPI APP INIT
# ------------------------------------------------------------
app = FastAPI(
    title="Bursary Portal Backend",
    version="1.0.0",
    description="Bursary applications, status tracking and student/admin messaging.",
)

START_TIME = time.time()

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


# ------------------------------------------------------------
# ERROR RESPONSES  ->  {"message": ..., "error": ...}
# ------------------------------------------------------------
@app.exception_handler(BursaryError)
async def bursary_error_handler(request: Request, exc: BursaryError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "error": exc.error or exc.__class__.__name__},
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    fields = [
        {"field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"), "message": err.get("msg")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"message": "Missing or invalid fields", "error": fields},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail), "error": exc.__class__.__name__},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    # Driver errors are logged in full and never echoed to the caller
    logger.opt(exception=exc).error(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={"message": "Internal server error", "error": "InternalError"},
    )


# ------------------------------------------------------------
# CORS CONFIGURATION
# ------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

# ------------------------------------------------------------
# UPLOADED DOCUMENTS
# ------------------------------------------------------------
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")

# ------------------------------------------------------------
# REGISTER ROUTERS
# ------------------------------------------------------------
app.include_router(students_router.router)
app.include_router(admins_router.router)
app.include_router(bursaries_router.router)
app.include_router(applications_router.router)
app.include_router(status_router.router)
app.include_router(documents_router.router)
app.include_router(messages_router.router)


# ------------------------------------------------------------
# APPLICATION STARTUP EVENTS
# ------------------------------------------------------------
@app.on_event("startup")
async def on_startup():
    logger.info("Starting Bursary Portal Backend...")

    ensure_upload_dir()

    # Process-wide notifier, shared by every request
    app.state.notifier = EmailNotifier(settings)

    try:
        await ping_database()
        logger.success("Database connection established.")
    except Exception:
        logger.exception("Database connection failed.")
        return

    try:
        await init_db()
        logger.success("Database tables ready.")
    except Exception as e:
        logger.warning(f"Table initialization encountered an issue: {e}")

    if not settings.SUPER_ADMIN_EMAIL or not settings.SUPER_ADMIN_PASSWORD:
        logger.info("No bootstrap admin configured.")
    else:
        try:
            async with AsyncSessionLocal() as session:
                existing = await get_admin_by_email(session, settings.SUPER_ADMIN_EMAIL.lower())
                if not existing:
                    logger.info(f"Seeding bootstrap admin: {settings.SUPER_ADMIN_EMAIL}")
                    await create_admin(
                        session,
                        full_name=settings.SUPER_ADMIN_NAME or "Bursary Administrator",
                        email=settings.SUPER_ADMIN_EMAIL,
                        password=settings.SUPER_ADMIN_PASSWORD,
                    )
                else:
                    logger.info("Bootstrap admin already exists. Skipping.")
        except Exception:
            logger.exception("Bootstrap admin seeding failed.")

    logger.success("Backend startup completed.")


# ------------------------------------------------------------
# HEALTH / SANITY
# ------------------------------------------------------------
@app.get("/", tags=["System"])
async def root():
    return {
        "status": "ok",
        "service": "Bursary Portal Backend",
        "version": app.version,
        "message": "API is running",
    }


@app.get("/api/test", tags=["System"], response_class=PlainTextResponse)
async def router_check():
    return "Router file is working"


@app.get("/api/metrics", tags=["System"])
async def metrics():
    uptime_seconds = int(time.time() - START_TIME)
    cpu_usage = psutil.cpu_percent(interval=None)
    ram_usage = psutil.virtual_memory().percent

    db_start = time.time()
    try:
        await ping_database()
        db_status = "Connected"
        db_latency = round((time.time() - db_start) * 1000, 2)
    except Exception as e:
        logger.warning(f"Metrics DB ping failed: {e}")
        db_status = "Error"
        db_latency = 0

    return {
        "status": "Online",
        "version": app.version,
        "cpu": cpu_usage,
        "ram": ram_usage,
        "uptime": uptime_seconds,
        "database": db_status,
        "db_latency": db_latency,
    }
