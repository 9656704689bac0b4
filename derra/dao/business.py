"""
Business Data Access Object.

WHY: Holds the listing queries (featured, trending, recent, search) as
SQL so that large directories are filtered and sorted by the database.
Every listing except get_all and get_by_owner only sees active
businesses.
"""

from typing import List

from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from derra.dao.base import BaseDAO
from derra.models.business import Business


def like_pattern(term: str) -> str:
    """Substring LIKE pattern with the wildcard characters of term escaped."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class BusinessDAO(BaseDAO[Business]):
    """Data Access Object for Business model."""

    def __init__(self, session: AsyncSession):
        super().__init__(Business, session)

    def active(self):
        return self.select().where(Business.is_active.is_(True))

    async def get_by_owner(self, owner_id: int) -> List[Business]:
        return await self.get_all(owner_id=owner_id)

    async def get_featured(self, limit: int) -> List[Business]:
        """Random sample of active, paid businesses."""
        query = self.active().where(Business.is_paid.is_(True)).order_by(func.random()).limit(limit)
        return await self.scalars(query)

    async def get_trending(self, limit: int) -> List[Business]:
        query = self.active().order_by(Business.like_count.desc(), Business.id).limit(limit)
        return await self.scalars(query)

    async def get_recent(self, limit: int) -> List[Business]:
        query = self.active().order_by(Business.created_at.desc(), Business.id.desc()).limit(limit)
        return await self.scalars(query)

    async def get_by_category(self, category_id: int) -> List[Business]:
        query = self.active().where(Business.category_id == category_id).order_by(Business.id)
        return await self.scalars(query)

    async def search(self, term: str) -> List[Business]:
        """
        Case-insensitive substring search over name, description, city
        and state.

        Args:
            term: Raw search text (LIKE wildcards are matched literally)

        Returns:
            Matching active businesses in id order
        """
        # Both sides go through lower(), the same fold the memory backend uses
        pattern = like_pattern(term.lower())
        query = (
            self.active()
            .where(
                or_(
                    *(
                        func.lower(column).like(pattern, escape="\\")
                        for column in (
                            Business.name,
                            Business.description,
                            Business.city,
                            Business.state,
                        )
                    )
                )
            )
            .order_by(Business.id)
        )
        return await self.scalars(query)
