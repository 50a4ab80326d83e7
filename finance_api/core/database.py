# finance_api/core/database.py
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from .config import settings
import logging
from datetime import datetime, timezone
from typing import AsyncGenerator

logger = logging.getLogger(__name__)

# Engine configuration
engine_kwargs = {
    "echo": settings.DB_ECHO,
    "future": True,
}

if settings.is_sqlite:
    # aiosqlite connections are not shared across threads by the driver
    engine_kwargs["connect_args"] = {"check_same_thread": False}
else:
    engine_kwargs.update({
        "pool_size": 5,
        "max_overflow": 5,
        "pool_timeout": 30,       # Seconds to wait for a free connection
        "pool_pre_ping": True,    # Check connection before using
        "pool_recycle": 300,      # Recycle connections after 5 minutes
    })


def enable_sqlite_foreign_keys(async_engine: AsyncEngine) -> None:
    """SQLite ships with foreign keys off; cascades and restrictions need them on."""

    @event.listens_for(async_engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


# Create the async engine
engine = create_async_engine(
    settings.DATABASE_URL,
    **engine_kwargs
)

if settings.is_sqlite:
    enable_sqlite_foreign_keys(engine)
    logger.info("🔧 Configured engine for SQLite (foreign keys enabled)")

# AsyncSession factory using async_sessionmaker
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    expire_on_commit=False,
    class_=AsyncSession,
)

# Base class for all models
Base = declarative_base()


def utcnow() -> datetime:
    # DateTime columns hold naive UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)

# Dependency to get DB session with proper exception handling
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    session = AsyncSessionLocal()
    try:
        yield session
    except Exception as e:
        logger.error(f"Database session error: {str(e)}")
        await session.rollback()
        raise
    finally:
        # Always close the session
        await session.close()
        logger.debug("Database session closed")
