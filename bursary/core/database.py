# bursary/core/database.py

import ssl
from typing import AsyncGenerator

from loguru import logger
from sqlmodel import SQLModel
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine
)
from sqlalchemy.pool import NullPool
from sqlalchemy import event, text

from bursary.core.config import settings

DATABASE_URL = settings.DATABASE_URL
IS_SQLITE = DATABASE_URL.startswith("sqlite")


# ----------------------------------------------------
# SSL for managed Postgres
# ----------------------------------------------------
def make_ssl():
    ctx = ssl.create_default_context()
    if not settings.DB_SSL_VERIFY:
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
    return ctx


def _connect_args() -> dict:
    if IS_SQLITE:
        return {"check_same_thread": False}
    if DATABASE_URL.startswith("postgresql+asyncpg") and settings.ENV == "prod":
        return {
            "ssl": make_ssl(),
            "statement_cache_size": 0,  # pgbouncer in transaction mode
        }
    return {}


logger.info("Configuring database engine ({})", DATABASE_URL.split("://", 1)[0])


# ----------------------------------------------------
# Engine (NO POOLING → external pooler handles it)
# ----------------------------------------------------
engine = create_async_engine(
    DATABASE_URL,
    echo=False,
    future=True,
    connect_args=_connect_args(),
    pool_pre_ping=True,
    poolclass=NullPool,
)


if IS_SQLITE:
    # SQLite only honours ON DELETE CASCADE with this pragma set per connection
    @event.listens_for(engine.sync_engine, "connect")
    def _enable_sqlite_fk(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# ----------------------------------------------------
# Sessions
# ----------------------------------------------------
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session


# ----------------------------------------------------
# Create / drop tables
# ----------------------------------------------------
async def init_db():
    # Register every table on the metadata
    from bursary.models import (  # noqa: F401
        admin, application, bursary, document, messaging, status_update, student
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def drop_db():
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)


async def ping_database():
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
