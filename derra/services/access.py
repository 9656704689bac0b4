"""
Actor and ownership checks shared by the services.

WHY: Every mutating operation starts with the same two questions (is
anyone logged in, and do they own the target), so the answers raise the
same exceptions everywhere.
"""

from typing import Optional

from derra.core.exceptions import AuthenticationError, AuthorizationError, ResourceNotFoundError
from derra.models import Business, User
from derra.storage.interface import Storage


def require_actor(actor: Optional[User]) -> User:
    """
    Return the request's actor or raise when nobody is authenticated.

    Raises:
        AuthenticationError: If actor is None
    """
    if actor is None:
        raise AuthenticationError()
    return actor


def require_self(actor: Optional[User], user_id: int) -> User:
    """Allow only the user whose id is in the path (no admin override)."""
    actor = require_actor(actor)
    if actor.id != user_id:
        raise AuthorizationError()
    return actor


def require_owner(actor: Optional[User], business: Business) -> User:
    actor = require_actor(actor)
    if business.owner_id != actor.id:
        raise AuthorizationError()
    return actor


async def get_business_or_404(storage: Storage, business_id: int) -> Business:
    business = await storage.get_business_by_id(business_id)
    if business is None:
        raise ResourceNotFoundError("Business not found", business_id=business_id)
    return business
