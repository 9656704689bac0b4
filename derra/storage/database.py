"""
Relational storage backend.

WHAT: Implementation of the Storage capability over an AsyncSession,
composed from the entity DAOs.

HOW:
- Each mutating method is one transaction: the child row and every
  aggregate it affects are written, then committed together. If
  anything raises, the session provider rolls the transaction back.
- Counter changes are issued as SQL-side increments, so concurrent
  likes on the same business are never lost.
- Expected absence returns None/False; SQLAlchemy errors propagate.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from derra.dao import (
    BusinessCommentDAO,
    BusinessDAO,
    BusinessLikeDAO,
    CategoryDAO,
    MessageDAO,
    NotificationDAO,
    SubscriptionDAO,
    UserDAO,
)
from derra.models import (
    Business,
    BusinessComment,
    BusinessLike,
    BusinessStatus,
    Category,
    Message,
    NEW_MESSAGE_NOTIFICATION,
    Notification,
    NotificationType,
    Subscription,
    SubscriptionStatus,
    User,
)
from derra.storage.counters import (
    category_count_deltas,
    rounded_mean,
    subscription_business_updates,
)

logger = logging.getLogger(__name__)


class DatabaseStorage:
    """Storage capability backed by SQLAlchemy."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.users = UserDAO(session)
        self.categories = CategoryDAO(session)
        self.businesses = BusinessDAO(session)
        self.likes = BusinessLikeDAO(session)
        self.comments = BusinessCommentDAO(session)
        self.subscriptions = SubscriptionDAO(session)
        self.messages = MessageDAO(session)
        self.notifications = NotificationDAO(session)

    async def _commit(self) -> None:
        await self.session.commit()

    # =========================================================================
    # Users
    # =========================================================================

    async def get_user(self, id: int) -> Optional[User]:
        return await self.users.get_by_id(id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        return await self.users.get_by_username(username)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        return await self.users.get_by_email(email)

    async def create_user(
        self,
        username: str,
        email: str,
        password: str,
        name: Optional[str] = None,
        avatar: Optional[str] = None,
    ) -> User:
        user = await self.users.create(
            username=username, email=email, password=password, name=name, avatar=avatar
        )
        await self._commit()
        return user

    async def update_user(self, id: int, **changes: Any) -> Optional[User]:
        user = await self.users.update(id, **changes)
        if user is not None:
            await self._commit()
        return user

    # =========================================================================
    # Categories
    # =========================================================================

    async def get_categories(self) -> List[Category]:
        return await self.categories.get_all()

    async def get_category_by_id(self, id: int) -> Optional[Category]:
        return await self.categories.get_by_id(id)

    async def create_category(self, name: str, icon: str) -> Category:
        category = await self.categories.create(name=name, icon=icon, business_count=0)
        await self._commit()
        return category

    async def update_category_count(self, id: int, count: int) -> Optional[Category]:
        category = await self.categories.update(id, business_count=count)
        if category is not None:
            await self._commit()
        return category

    # =========================================================================
    # Businesses
    # =========================================================================

    async def get_businesses(self, filters: Optional[Dict[str, Any]] = None) -> List[Business]:
        return await self.businesses.get_all(**(filters or {}))

    async def get_business_by_id(self, id: int) -> Optional[Business]:
        return await self.businesses.get_by_id(id)

    async def get_businesses_by_owner_id(self, owner_id: int) -> List[Business]:
        return await self.businesses.get_by_owner(owner_id)

    async def get_featured_businesses(self, limit: int = 4) -> List[Business]:
        return await self.businesses.get_featured(limit)

    async def get_trending_businesses(self, limit: int = 4) -> List[Business]:
        return await self.businesses.get_trending(limit)

    async def get_recent_businesses(self, limit: int = 4) -> List[Business]:
        return await self.businesses.get_recent(limit)

    async def get_businesses_by_category(self, category_id: int) -> List[Business]:
        return await self.businesses.get_by_category(category_id)

    async def search_businesses(self, query: str) -> List[Business]:
        return await self.businesses.search(query)

    async def create_business(self, **fields: Any) -> Business:
        now = datetime.utcnow()
        values = {k: v for k, v in fields.items() if hasattr(Business, k)}
        values.update(
            like_count=0,
            comment_count=0,
            rating=0,
            is_verified=False,
            is_active=True,
            is_paid=False,
            status=BusinessStatus.PENDING,
            subscription_id=None,
            subscription_expires_at=None,
            created_at=now,
            updated_at=now,
        )
        values.pop("id", None)

        business = await self.businesses.create(**values)
        await self.categories.shift_counts(
            category_count_deltas(None, (business.category_id, True))
        )
        await self._commit()
        logger.debug("Created business %s in category %s", business.id, business.category_id)
        return business

    async def update_business(self, id: int, **changes: Any) -> Optional[Business]:
        business = await self.businesses.get_by_id(id)
        if business is None:
            return None

        before = (business.category_id, business.is_active)
        business = await self.businesses.update(id, **{**changes, "updated_at": datetime.utcnow()})

        await self.categories.shift_counts(
            category_count_deltas(before, (business.category_id, business.is_active))
        )
        await self._commit()
        return business

    async def delete_business(self, id: int) -> bool:
        business = await self.businesses.get_by_id(id)
        if business is None:
            return False

        before = (business.category_id, business.is_active)
        await self.businesses.update(id, is_active=False)
        await self.categories.shift_counts(
            category_count_deltas(before, (business.category_id, False))
        )
        await self._commit()
        logger.info("Business %s soft-deleted", id)
        return True

    # =========================================================================
    # Likes
    # =========================================================================

    async def get_likes_by_business_id(self, business_id: int) -> List[BusinessLike]:
        return await self.likes.get_all(business_id=business_id)

    async def get_likes_by_user_id(self, user_id: int) -> List[BusinessLike]:
        return await self.likes.get_all(user_id=user_id)

    async def get_like_by_user_and_business(
        self, user_id: int, business_id: int
    ) -> Optional[BusinessLike]:
        return await self.likes.get_by_user_and_business(user_id, business_id)

    async def create_business_like(self, business_id: int, user_id: int) -> BusinessLike:
        like = await self.likes.create(business_id=business_id, user_id=user_id)
        await self.businesses.increment(business_id, "like_count", 1)
        await self._commit()
        return like

    async def delete_business_like(self, user_id: int, business_id: int) -> bool:
        deleted = await self.likes.delete_by_user_and_business(user_id, business_id)
        if not deleted:
            return False

        await self.businesses.increment(business_id, "like_count", -1)
        await self._commit()
        return True

    # =========================================================================
    # Comments
    # =========================================================================

    async def get_comments_by_business_id(self, business_id: int) -> List[BusinessComment]:
        return await self.comments.get_by_business(business_id)

    async def create_business_comment(
        self,
        business_id: int,
        user_id: int,
        content: str,
        rating: Optional[int] = None,
    ) -> BusinessComment:
        comment = await self.comments.create(
            business_id=business_id, user_id=user_id, content=content, rating=rating
        )
        await self.businesses.increment(business_id, "comment_count", 1)

        if rating is not None:
            mean = rounded_mean(await self.comments.get_ratings(business_id))
            await self.businesses.update(business_id, rating=mean)

        await self._commit()
        return comment

    # =========================================================================
    # Subscriptions
    # =========================================================================

    async def get_subscription_by_id(self, id: int) -> Optional[Subscription]:
        return await self.subscriptions.get_by_id(id)

    async def get_subscription_by_business_id(self, business_id: int) -> Optional[Subscription]:
        return await self.subscriptions.get_by_business(business_id)

    async def get_subscriptions_by_order_id(self, order_id: str) -> List[Subscription]:
        return await self.subscriptions.get_by_order_id(order_id)

    async def create_subscription(
        self,
        business_id: int,
        user_id: int,
        price_id: str,
        status: Any = SubscriptionStatus.PENDING,
        external_order_id: Optional[str] = None,
        current_period_start: Optional[datetime] = None,
        current_period_end: Optional[datetime] = None,
    ) -> Subscription:
        subscription = await self.subscriptions.create(
            business_id=business_id,
            user_id=user_id,
            price_id=price_id,
            status=SubscriptionStatus(status),
            external_order_id=external_order_id,
            current_period_start=current_period_start,
            current_period_end=current_period_end,
        )
        await self._sync_business_with(subscription, None)
        await self._commit()
        return subscription

    async def update_subscription(self, id: int, **changes: Any) -> Optional[Subscription]:
        if "status" in changes:
            changes["status"] = SubscriptionStatus(changes["status"])

        subscription = await self.subscriptions.update(id, **changes)
        if subscription is None:
            return None

        await self._sync_business_with(subscription, changes)
        await self._commit()
        return subscription

    async def _sync_business_with(
        self, subscription: Subscription, changes: Optional[Dict[str, Any]]
    ) -> None:
        updates = subscription_business_updates(subscription, changes)
        if updates:
            business = await self.businesses.update(subscription.business_id, **updates)
            if business is not None:
                logger.info(
                    "Business %s synced with subscription %s (%s)",
                    business.id,
                    subscription.id,
                    subscription.status.value,
                )

    # =========================================================================
    # Messages
    # =========================================================================

    async def get_message_by_id(self, id: int) -> Optional[Message]:
        return await self.messages.get_by_id(id)

    async def get_messages_by_business_id(self, business_id: int) -> List[Message]:
        return await self.messages.get_all(business_id=business_id)

    async def get_messages_by_user_id(self, user_id: int) -> List[Message]:
        return await self.messages.get_by_user(user_id)

    async def get_messages_between_users(
        self, user_id: int, other_user_id: int, business_id: int
    ) -> List[Message]:
        return await self.messages.get_conversation(user_id, other_user_id, business_id)

    async def create_message(
        self, sender_id: int, receiver_id: int, business_id: int, content: str
    ) -> Message:
        message = await self.messages.create(
            sender_id=sender_id,
            receiver_id=receiver_id,
            business_id=business_id,
            content=content,
            is_read=False,
        )
        await self.notifications.create(
            user_id=receiver_id,
            type=NotificationType.MESSAGE,
            content=NEW_MESSAGE_NOTIFICATION,
            related_id=message.id,
            is_read=False,
        )
        await self._commit()
        return message

    async def mark_message_as_read(self, id: int) -> Optional[Message]:
        message = await self.messages.update(id, is_read=True)
        if message is not None:
            await self._commit()
        return message

    # =========================================================================
    # Notifications
    # =========================================================================

    async def get_notification_by_id(self, id: int) -> Optional[Notification]:
        return await self.notifications.get_by_id(id)

    async def get_notifications_by_user_id(self, user_id: int) -> List[Notification]:
        return await self.notifications.get_by_user(user_id)

    async def get_unread_notifications_count(self, user_id: int) -> int:
        return await self.notifications.count_unread(user_id)

    async def create_notification(
        self,
        user_id: int,
        type: str,
        content: str,
        related_id: Optional[int] = None,
    ) -> Notification:
        notification = await self.notifications.create(
            user_id=user_id, type=type, content=content, related_id=related_id, is_read=False
        )
        await self._commit()
        return notification

    async def mark_notification_as_read(self, id: int) -> Optional[Notification]:
        notification = await self.notifications.update(id, is_read=True)
        if notification is not None:
            await self._commit()
        return notification

    async def mark_all_notifications_as_read(self, user_id: int) -> bool:
        await self.notifications.mark_all_read(user_id)
        await self._commit()
        return True
