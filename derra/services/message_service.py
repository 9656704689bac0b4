"""
Message Service.

WHAT: Conversations between customers and business owners.

WHY: A conversation is scoped to one business and always has the owner
on one side. Customers may only write to the owner; the owner may write
to anyone who contacted the business.

HOW: Storage creates the receiver's notification together with the
message, so this service never writes notifications itself.
"""

import logging
from typing import List, Optional

from derra.core.exceptions import AuthorizationError, ResourceNotFoundError, ValidationError
from derra.models import Message, User
from derra.services.access import get_business_or_404, require_actor, require_owner
from derra.storage.interface import Storage

logger = logging.getLogger(__name__)


class MessageService:
    """Service for business-scoped messaging."""

    def __init__(self, storage: Storage):
        self.storage = storage

    async def inbox(self, actor: Optional[User]) -> List[Message]:
        """Every message the actor sent or received."""
        actor = require_actor(actor)
        return await self.storage.get_messages_by_user_id(actor.id)

    async def for_business(self, actor: Optional[User], business_id: int) -> List[Message]:
        """All messages about a business. Owner only."""
        business = await get_business_or_404(self.storage, business_id)
        require_owner(actor, business)
        return await self.storage.get_messages_by_business_id(business_id)

    async def conversation(
        self, actor: Optional[User], business_id: int, other_user_id: int
    ) -> List[Message]:
        """
        Messages between the actor and another user about a business,
        oldest first.

        The owner may open a conversation with anyone; anyone else only
        with the owner.

        Raises:
            ResourceNotFoundError: If the business does not exist
            AuthorizationError: If neither side of the conversation is the owner
        """
        actor = require_actor(actor)
        business = await get_business_or_404(self.storage, business_id)

        if actor.id != business.owner_id and other_user_id != business.owner_id:
            raise AuthorizationError()

        return await self.storage.get_messages_between_users(actor.id, other_user_id, business_id)

    async def send(
        self,
        actor: Optional[User],
        receiver_id: int,
        business_id: int,
        content: str,
    ) -> Message:
        """
        Send a message about a business.

        Raises:
            ResourceNotFoundError: If the business or receiver does not exist
            ValidationError: If a customer writes to someone other than the owner
        """
        actor = require_actor(actor)
        business = await get_business_or_404(self.storage, business_id)

        if actor.id != business.owner_id and receiver_id != business.owner_id:
            raise ValidationError("Invalid recipient", receiver_id=receiver_id)

        if await self.storage.get_user(receiver_id) is None:
            raise ResourceNotFoundError("User not found", user_id=receiver_id)

        message = await self.storage.create_message(
            sender_id=actor.id,
            receiver_id=receiver_id,
            business_id=business_id,
            content=content,
        )
        logger.debug("Message %s sent from %s to %s", message.id, actor.id, receiver_id)
        return message

    async def mark_read(self, actor: Optional[User], message_id: int) -> Message:
        """Only the receiver may mark a message read."""
        actor = require_actor(actor)
        message = await self.storage.get_message_by_id(message_id)
        if message is None:
            raise ResourceNotFoundError("Message not found", message_id=message_id)
        if message.receiver_id != actor.id:
            raise AuthorizationError()

        return await self.storage.mark_message_as_read(message_id)
