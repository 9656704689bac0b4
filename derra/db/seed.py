"""
Default category seeding.

Run directly with ``python -m derra.db.seed`` to seed the configured
database, or automatically at application startup when
SEED_DEFAULT_CATEGORIES is enabled.
"""

import asyncio
import logging
from typing import List

from derra.core.config import settings
from derra.core.logging_config import setup_logging
from derra.models import Category
from derra.storage.factory import create_storage_provider
from derra.storage.interface import Storage

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    ("Retail", "ri-store-2-line"),
    ("Food & Dining", "ri-restaurant-line"),
    ("Professional", "ri-briefcase-4-line"),
    ("Healthcare", "ri-heart-pulse-line"),
    ("Home Services", "ri-home-4-line"),
    ("Education", "ri-graduation-cap-line"),
]


async def seed_default_categories(storage: Storage) -> List[Category]:
    """
    Create the default categories when the store has none.

    Args:
        storage: Any storage backend

    Returns:
        The categories created (empty when categories already existed)
    """
    if await storage.get_categories():
        logger.debug("Categories already present, skipping seed")
        return []

    created = []
    for name, icon in DEFAULT_CATEGORIES:
        created.append(await storage.create_category(name=name, icon=icon))
    logger.info("Seeded %d default categories", len(created))
    return created


async def main() -> None:
    if settings.STORAGE_BACKEND == "database":
        from derra.db.session import create_tables

        await create_tables()

    provider = create_storage_provider(settings.STORAGE_BACKEND)
    async with provider() as storage:
        await seed_default_categories(storage)


if __name__ == "__main__":
    setup_logging(settings.LOG_LEVEL)
    asyncio.run(main())
