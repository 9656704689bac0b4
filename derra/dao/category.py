"""Category Data Access Object."""

from typing import Dict

from sqlalchemy.ext.asyncio import AsyncSession

from derra.dao.base import BaseDAO
from derra.models.category import Category


class CategoryDAO(BaseDAO[Category]):
    """Data Access Object for Category model."""

    def __init__(self, session: AsyncSession):
        super().__init__(Category, session)

    async def shift_counts(self, deltas: Dict[int, int]) -> None:
        """
        Apply business_count deltas keyed by category id.

        Args:
            deltas: Output of derra.storage.counters.category_count_deltas
        """
        for category_id, delta in deltas.items():
            await self.increment(category_id, "business_count", delta)
