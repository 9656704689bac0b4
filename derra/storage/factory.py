"""
Storage backend selection.

WHAT: Maps the STORAGE_BACKEND setting onto a provider: an async context
manager factory that yields a Storage for one unit of work (a request,
a seeding run).

WHY: The choice is made once at startup. Services never know which
backend they are talking to.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, AsyncContextManager

from derra.core.exceptions import ValidationError
from derra.storage.interface import Storage
from derra.storage.memory import MemoryStorage

logger = logging.getLogger(__name__)

StorageProvider = Callable[[], AsyncContextManager[Storage]]


def memory_provider(storage: MemoryStorage) -> StorageProvider:
    """Provider that hands out one process-wide in-memory store."""

    @asynccontextmanager
    async def provide() -> AsyncIterator[Storage]:
        yield storage

    return provide


def database_provider(session_factory) -> StorageProvider:
    """
    Provider that opens a session per unit of work.

    Uncommitted work is rolled back when the unit of work raises.
    """
    from derra.storage.database import DatabaseStorage

    @asynccontextmanager
    async def provide() -> AsyncIterator[Storage]:
        async with session_factory() as session:
            try:
                yield DatabaseStorage(session)
            except Exception:
                await session.rollback()
                raise

    return provide


def create_storage_provider(backend: str) -> StorageProvider:
    """
    Build the provider for a configured backend name.

    Args:
        backend: "memory" or "database"

    Returns:
        Zero-argument callable returning an async context manager over a Storage

    Raises:
        ValidationError: If the backend name is unknown
    """
    if backend == "memory":
        logger.info("Using in-memory storage")
        return memory_provider(MemoryStorage())

    if backend == "database":
        from derra.db.session import AsyncSessionLocal

        logger.info("Using database storage")
        return database_provider(AsyncSessionLocal)

    raise ValidationError(f"Unknown storage backend: {backend}", backend=backend)
