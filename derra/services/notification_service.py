"""Notification Service."""

from typing import List, Optional

from derra.core.exceptions import AuthorizationError, ResourceNotFoundError
from derra.models import Notification, User
from derra.services.access import require_actor
from derra.storage.interface import Storage


class NotificationService:
    """Per-user notification inbox."""

    def __init__(self, storage: Storage):
        self.storage = storage

    async def list_for(self, actor: Optional[User]) -> List[Notification]:
        actor = require_actor(actor)
        return await self.storage.get_notifications_by_user_id(actor.id)

    async def unread_count(self, actor: Optional[User]) -> int:
        actor = require_actor(actor)
        return await self.storage.get_unread_notifications_count(actor.id)

    async def mark_read(self, actor: Optional[User], notification_id: int) -> Notification:
        actor = require_actor(actor)
        notification = await self.storage.get_notification_by_id(notification_id)
        if notification is None:
            raise ResourceNotFoundError("Notification not found", notification_id=notification_id)
        if notification.user_id != actor.id:
            raise AuthorizationError()

        return await self.storage.mark_notification_as_read(notification_id)

    async def mark_all_read(self, actor: Optional[User]) -> bool:
        actor = require_actor(actor)
        return await self.storage.mark_all_notifications_as_read(actor.id)
