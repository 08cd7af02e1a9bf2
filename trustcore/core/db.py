from datetime import datetime, timezone
from typing import AsyncGenerator

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from trustcore.core.config import settings

engine = create_async_engine(settings.async_database_url, echo=settings.SQL_ECHO)

# expire_on_commit=False so handlers can keep reading rows after commit
# without triggering lazy IO outside the greenlet.
SessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

Base = declarative_base()

async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with SessionLocal() as session:
        yield session

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def as_utc(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; everything we store is UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)

# SQLSTATE for unique_violation (PostgreSQL / asyncpg)
_PG_UNIQUE_VIOLATION = "23505"
# SQLITE_CONSTRAINT_PRIMARYKEY, SQLITE_CONSTRAINT_UNIQUE
_SQLITE_UNIQUE_CODES = {1555, 2067}

def is_unique_violation(exc: IntegrityError) -> bool:
    """Tell a uniqueness conflict apart from other integrity failures
    using the driver's error code, not the message text."""
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code is not None:
        return code == _PG_UNIQUE_VIOLATION
    return getattr(orig, "sqlite_errorcode", None) in _SQLITE_UNIQUE_CODES
