"""
Engagement Service.

WHAT: Likes and comments on businesses.

WHY: The one-like-per-user rule is enforced here with an existence
check before insert. Storage trusts the caller and does not re-check.
"""

from typing import List, Optional

from derra.core.exceptions import ResourceAlreadyExistsError, ResourceNotFoundError
from derra.models import BusinessComment, BusinessLike, User
from derra.services.access import get_business_or_404, require_actor
from derra.storage.interface import Storage


class EngagementService:
    def __init__(self, storage: Storage):
        self.storage = storage

    async def like(self, actor: Optional[User], business_id: int) -> BusinessLike:
        """
        Like a business once.

        Raises:
            AuthenticationError: If nobody is logged in
            ResourceNotFoundError: If the business does not exist
            ResourceAlreadyExistsError: If the actor already likes it
        """
        actor = require_actor(actor)
        await get_business_or_404(self.storage, business_id)

        if await self.storage.get_like_by_user_and_business(actor.id, business_id):
            raise ResourceAlreadyExistsError("Business already liked by user")

        return await self.storage.create_business_like(business_id=business_id, user_id=actor.id)

    async def unlike(self, actor: Optional[User], business_id: int) -> None:
        actor = require_actor(actor)
        await get_business_or_404(self.storage, business_id)

        if not await self.storage.delete_business_like(actor.id, business_id):
            raise ResourceNotFoundError("Like not found")

    async def likes(self, business_id: int) -> List[BusinessLike]:
        await get_business_or_404(self.storage, business_id)
        return await self.storage.get_likes_by_business_id(business_id)

    async def comments(self, business_id: int) -> List[BusinessComment]:
        """Comments on a business, newest first."""
        await get_business_or_404(self.storage, business_id)
        return await self.storage.get_comments_by_business_id(business_id)

    async def add_comment(
        self,
        actor: Optional[User],
        business_id: int,
        content: str,
        rating: Optional[int] = None,
    ) -> BusinessComment:
        actor = require_actor(actor)
        await get_business_or_404(self.storage, business_id)
        return await self.storage.create_business_comment(
            business_id=business_id,
            user_id=actor.id,
            content=content,
            rating=rating,
        )
