"""
Like and comment Data Access Objects.

WHY: Likes and comments are the child rows behind the like_count,
comment_count and rating caches on Business.
"""

from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from derra.dao.base import BaseDAO
from derra.models.business import BusinessComment, BusinessLike


class BusinessLikeDAO(BaseDAO[BusinessLike]):
    """Data Access Object for BusinessLike model."""

    def __init__(self, session: AsyncSession):
        super().__init__(BusinessLike, session)

    async def get_by_user_and_business(
        self, user_id: int, business_id: int
    ) -> Optional[BusinessLike]:
        result = await self.session.execute(
            self.select()
            .where(BusinessLike.user_id == user_id, BusinessLike.business_id == business_id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def delete_by_user_and_business(self, user_id: int, business_id: int) -> bool:
        """
        Remove the like of user_id on business_id.

        Returns:
            True if a row was deleted, False if not found
        """
        result = await self.session.execute(
            delete(BusinessLike).where(
                BusinessLike.user_id == user_id,
                BusinessLike.business_id == business_id,
            )
        )
        return result.rowcount > 0


class BusinessCommentDAO(BaseDAO[BusinessComment]):
    """Data Access Object for BusinessComment model."""

    def __init__(self, session: AsyncSession):
        super().__init__(BusinessComment, session)

    async def get_by_business(self, business_id: int) -> List[BusinessComment]:
        """Comments on a business, newest first."""
        query = (
            self.select()
            .where(BusinessComment.business_id == business_id)
            .order_by(BusinessComment.created_at.desc(), BusinessComment.id.desc())
        )
        return await self.scalars(query)

    async def get_ratings(self, business_id: int) -> List[Optional[int]]:
        result = await self.session.execute(
            select(BusinessComment.rating).where(BusinessComment.business_id == business_id)
        )
        return list(result.scalars().all())
