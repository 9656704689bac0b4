"""
Message and notification Data Access Objects.

WHY: Conversations are read oldest first (chat order), notifications
newest first (inbox order).
"""

from typing import List

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from derra.dao.base import BaseDAO
from derra.models.message import Message, Notification


class MessageDAO(BaseDAO[Message]):
    """Data Access Object for Message model."""

    def __init__(self, session: AsyncSession):
        super().__init__(Message, session)

    async def get_by_user(self, user_id: int) -> List[Message]:
        """Every message the user sent or received."""
        query = (
            self.select()
            .where(or_(Message.sender_id == user_id, Message.receiver_id == user_id))
            .order_by(Message.id)
        )
        return await self.scalars(query)

    async def get_conversation(
        self, user_id: int, other_user_id: int, business_id: int
    ) -> List[Message]:
        """
        Messages exchanged between two users about one business.

        Args:
            user_id: One participant
            other_user_id: The other participant
            business_id: Business the conversation is about

        Returns:
            Messages in either direction, oldest first
        """
        query = (
            self.select()
            .where(
                Message.business_id == business_id,
                or_(
                    and_(Message.sender_id == user_id, Message.receiver_id == other_user_id),
                    and_(Message.sender_id == other_user_id, Message.receiver_id == user_id),
                ),
            )
            .order_by(Message.created_at, Message.id)
        )
        return await self.scalars(query)


class NotificationDAO(BaseDAO[Notification]):
    """Data Access Object for Notification model."""

    def __init__(self, session: AsyncSession):
        super().__init__(Notification, session)

    async def get_by_user(self, user_id: int) -> List[Notification]:
        query = (
            self.select()
            .where(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
        )
        return await self.scalars(query)

    async def count_unread(self, user_id: int) -> int:
        result = await self.session.execute(
            select(func.count(Notification.id)).where(
                Notification.user_id == user_id,
                Notification.is_read.is_(False),
            )
        )
        return result.scalar_one()

    async def mark_all_read(self, user_id: int) -> None:
        await self.session.execute(
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True)
            .execution_options(synchronize_session=False)
        )
