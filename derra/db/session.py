"""
Database session management.

WHY: Async database sessions are required for FastAPI's async/await pattern.
The engine is created once per process; each request that uses the
database storage backend opens its own session.
"""

from typing import Any, Dict

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from derra.core.config import settings
from derra.models import Base


def engine_options(url: str) -> Dict[str, Any]:
    """
    Connection-pool options for a database URL.

    SQLite (used for local runs) does not take a sized pool; server
    databases get pre-ping plus a bounded pool.
    """
    if url.startswith("sqlite"):
        return {"echo": settings.DEBUG}
    return {
        "echo": settings.DEBUG,
        "pool_pre_ping": True,
        "pool_size": 10,
        "max_overflow": 20,
    }


def unicode_lower(value: Any) -> Any:
    return value.lower() if isinstance(value, str) else value


def use_unicode_lower(bind: AsyncEngine) -> None:
    """
    Replace SQLite's built-in lower(), which only folds ASCII letters,
    with str.lower on every new connection. Other dialects are left alone.
    """
    if bind.dialect.name != "sqlite":
        return

    @event.listens_for(bind.sync_engine, "connect")
    def register_lower(dbapi_connection, connection_record):
        dbapi_connection.create_function("lower", 1, unicode_lower)


engine = create_async_engine(
    settings.async_database_url,
    **engine_options(settings.async_database_url),
)
use_unicode_lower(engine)

# expire_on_commit=False keeps returned records readable after each
# storage operation commits
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def create_tables(bind: AsyncEngine = engine) -> None:
    """Create every table registered on Base.metadata if missing."""
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
