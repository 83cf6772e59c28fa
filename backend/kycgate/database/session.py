"""
database/session.py

Initializes the SQLAlchemy asynchronous engine and session factory.
Provides an AsyncGenerator for database session dependency injection,
schema creation, and translation of connectivity failures into TransientError.
"""

import logging
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from kycgate.core.config import settings
from kycgate.core.exceptions import TransientError
from kycgate.database.base import Base

logger = logging.getLogger(__name__)

# -----------------------------------------------------
# SQLAlchemy Async Engine Initialization
# -----------------------------------------------------
engine = create_async_engine(
    settings.db_url,
    echo=False,  # Set to True for SQL debugging output
)

# -----------------------------------------------------
# Session Factory for Async Database Access
# -----------------------------------------------------
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False,  # Prevents auto-expiration of ORM objects after commit
)


# -----------------------------------------------------
# Dependency: Get Async DB Session
# -----------------------------------------------------
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency function for FastAPI endpoints to provide an async DB session.
    Yields a single session per request, rolls back on exceptions, and closes cleanly.
    """
    async with AsyncSessionLocal() as db:
        try:
            yield db
        except Exception:
            await db.rollback()
            raise


# -----------------------------------------------------
# Schema Creation
# -----------------------------------------------------
async def init_db(bind: AsyncEngine | None = None) -> None:
    """Create all tables registered on the declarative base."""
    from kycgate.database import models  # noqa: F401  (registers every model)

    target = bind or engine
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("[DB] Schema created or already present.")


# -----------------------------------------------------
# Connectivity Error Translation
# -----------------------------------------------------
@asynccontextmanager
async def transient_guard(db: AsyncSession, action: str) -> AsyncIterator[None]:
    """
    Re-raise backend connectivity failures as TransientError.

    Callers must treat the result as "no data available", never as an empty result.
    """
    try:
        yield
    except (OperationalError, InterfaceError, OSError) as e:
        logger.error(f"[DB] Backend unavailable while {action}: {e}")
        try:
            await db.rollback()
        except SQLAlchemyError as rollback_error:
            logger.error(f"[DB] Rollback after failure also failed: {rollback_error}")
        raise TransientError(f"Verification backend unavailable while {action}.") from e
