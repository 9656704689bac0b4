"""
Business Service.

WHAT: Listing queries and owner-only CRUD for businesses.

WHY: Authorization lives here, not in storage:
- create forces owner_id to the actor
- update/delete require the actor to own the business
- per-user listings are visible to that user only

HOW: Validates references (category) before writing, then delegates to
the storage backend, which keeps the category counts in step.
"""

import logging
from typing import Any, Dict, List, Optional

from derra.core.exceptions import ValidationError
from derra.models import Business, User
from derra.services.access import get_business_or_404, require_actor, require_owner, require_self
from derra.storage.interface import Storage

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = {"name", "description", "category_id", "city", "state", "is_active"}


class BusinessService:
    """Business listing operations."""

    def __init__(self, storage: Storage):
        self.storage = storage

    # =========================================================================
    # Queries
    # =========================================================================

    async def list_active(self) -> List[Business]:
        return await self.storage.get_businesses({"is_active": True})

    async def featured(self, limit: int = 4) -> List[Business]:
        return await self.storage.get_featured_businesses(limit)

    async def trending(self, limit: int = 4) -> List[Business]:
        return await self.storage.get_trending_businesses(limit)

    async def recent(self, limit: int = 4) -> List[Business]:
        return await self.storage.get_recent_businesses(limit)

    async def by_category(self, category_id: int) -> List[Business]:
        return await self.storage.get_businesses_by_category(category_id)

    async def search(self, query: Optional[str]) -> List[Business]:
        """
        Raises:
            ValidationError: If the query is missing or blank
        """
        if not query or not query.strip():
            raise ValidationError("Search query is required")
        return await self.storage.search_businesses(query.strip())

    async def get(self, business_id: int) -> Business:
        """Fetch one business; soft-deleted businesses are still returned."""
        return await get_business_or_404(self.storage, business_id)

    async def owned_by(self, actor: Optional[User], user_id: int) -> List[Business]:
        require_self(actor, user_id)
        return await self.storage.get_businesses_by_owner_id(user_id)

    async def liked_by(self, actor: Optional[User], user_id: int) -> List[Business]:
        """Businesses the user has liked, in business id order."""
        require_self(actor, user_id)
        likes = await self.storage.get_likes_by_user_id(user_id)

        businesses = []
        for like in likes:
            business = await self.storage.get_business_by_id(like.business_id)
            if business is not None:
                businesses.append(business)
        return sorted(businesses, key=lambda b: b.id)

    # =========================================================================
    # Mutations
    # =========================================================================

    async def _require_category(self, category_id: int) -> None:
        if await self.storage.get_category_by_id(category_id) is None:
            raise ValidationError("Category not found", category_id=category_id)

    async def create(self, actor: Optional[User], fields: Dict[str, Any]) -> Business:
        """
        List a new business owned by the actor.

        Args:
            actor: Authenticated user (becomes the owner)
            fields: Validated owner-editable fields

        Raises:
            AuthenticationError: If nobody is logged in
            ValidationError: If the category does not exist
        """
        actor = require_actor(actor)
        await self._require_category(fields["category_id"])

        business = await self.storage.create_business(**{**fields, "owner_id": actor.id})
        logger.info("User %s listed business %s", actor.id, business.id)
        return business

    async def update(
        self, actor: Optional[User], business_id: int, changes: Dict[str, Any]
    ) -> Business:
        """
        Raises:
            ResourceNotFoundError: If the business does not exist
            AuthorizationError: If the actor is not the owner
            ValidationError: If a new category does not exist
        """
        business = await get_business_or_404(self.storage, business_id)
        require_owner(actor, business)

        # Required columns cannot be cleared; a null there means "unchanged"
        changes = {
            k: v for k, v in changes.items() if v is not None or k not in REQUIRED_FIELDS
        }

        if changes.get("category_id") is not None:
            await self._require_category(changes["category_id"])

        updated = await self.storage.update_business(business_id, **changes)
        if updated is None:
            # Disappeared between the read and the write
            return await get_business_or_404(self.storage, business_id)
        return updated

    async def delete(self, actor: Optional[User], business_id: int) -> None:
        """Soft-delete a business the actor owns."""
        business = await get_business_or_404(self.storage, business_id)
        actor = require_owner(actor, business)

        await self.storage.delete_business(business_id)
        logger.info("User %s deleted business %s", actor.id, business_id)
