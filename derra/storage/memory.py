"""
In-memory storage backend.

WHAT: Dict-backed implementation of the Storage capability with one
incrementing integer id sequence per entity kind.

WHY: Lets the API run (and the test-suite exercise the full contract)
without a database. State lives for the life of the process.

HOW: Records are transient model instances (never attached to a
session). Each method runs to completion without awaiting anything, so
two mutations never interleave on the event loop.
"""

import itertools
import logging
import random
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional

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
    floored,
    rounded_mean,
    subscription_business_updates,
)

logger = logging.getLogger(__name__)


# Columns a partial update may never overwrite
IMMUTABLE_FIELDS = {"id", "created_at"}


def _apply(record: Any, changes: Dict[str, Any]) -> None:
    for field, value in changes.items():
        if field in IMMUTABLE_FIELDS or not hasattr(type(record), field):
            continue
        setattr(record, field, value)


class MemoryStorage:
    """Storage capability backed by per-kind dictionaries."""

    def __init__(self) -> None:
        self._users: Dict[int, User] = {}
        self._categories: Dict[int, Category] = {}
        self._businesses: Dict[int, Business] = {}
        self._likes: Dict[int, BusinessLike] = {}
        self._comments: Dict[int, BusinessComment] = {}
        self._subscriptions: Dict[int, Subscription] = {}
        self._messages: Dict[int, Message] = {}
        self._notifications: Dict[int, Notification] = {}
        self._ids: Dict[str, Iterator[int]] = {}

    def _next_id(self, kind: str) -> int:
        if kind not in self._ids:
            self._ids[kind] = itertools.count(1)
        return next(self._ids[kind])

    # =========================================================================
    # Users
    # =========================================================================

    async def get_user(self, id: int) -> Optional[User]:
        return self._users.get(id)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        return next((u for u in self._users.values() if u.username == username), None)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self._users.values() if u.email == email), None)

    async def create_user(
        self,
        username: str,
        email: str,
        password: str,
        name: Optional[str] = None,
        avatar: Optional[str] = None,
    ) -> User:
        user = User(
            id=self._next_id("user"),
            username=username,
            email=email,
            password=password,
            name=name,
            avatar=avatar,
            created_at=datetime.utcnow(),
        )
        self._users[user.id] = user
        return user

    async def update_user(self, id: int, **changes: Any) -> Optional[User]:
        user = self._users.get(id)
        if user is None:
            return None
        _apply(user, changes)
        return user

    # =========================================================================
    # Categories
    # =========================================================================

    async def get_categories(self) -> List[Category]:
        return list(self._categories.values())

    async def get_category_by_id(self, id: int) -> Optional[Category]:
        return self._categories.get(id)

    async def create_category(self, name: str, icon: str) -> Category:
        category = Category(id=self._next_id("category"), name=name, icon=icon, business_count=0)
        self._categories[category.id] = category
        return category

    async def update_category_count(self, id: int, count: int) -> Optional[Category]:
        category = self._categories.get(id)
        if category is None:
            return None
        category.business_count = count
        return category

    def _shift_category_counts(self, deltas: Dict[int, int]) -> None:
        for category_id, delta in deltas.items():
            category = self._categories.get(category_id)
            if category is not None:
                category.business_count = floored(category.business_count, delta)

    # =========================================================================
    # Businesses
    # =========================================================================

    def _active(self) -> List[Business]:
        return [b for b in self._businesses.values() if b.is_active]

    async def get_businesses(self, filters: Optional[Dict[str, Any]] = None) -> List[Business]:
        businesses = list(self._businesses.values())
        if filters:
            criteria = {k: v for k, v in filters.items() if hasattr(Business, k)}
            businesses = [
                b for b in businesses if all(getattr(b, k) == v for k, v in criteria.items())
            ]
        return businesses

    async def get_business_by_id(self, id: int) -> Optional[Business]:
        return self._businesses.get(id)

    async def get_businesses_by_owner_id(self, owner_id: int) -> List[Business]:
        return [b for b in self._businesses.values() if b.owner_id == owner_id]

    async def get_featured_businesses(self, limit: int = 4) -> List[Business]:
        featured = [b for b in self._active() if b.is_paid]
        random.shuffle(featured)
        return featured[:limit]

    async def get_trending_businesses(self, limit: int = 4) -> List[Business]:
        # sorted() is stable, so equal like counts keep insertion order
        return sorted(self._active(), key=lambda b: -(b.like_count or 0))[:limit]

    async def get_recent_businesses(self, limit: int = 4) -> List[Business]:
        return sorted(self._active(), key=lambda b: (b.created_at, b.id), reverse=True)[:limit]

    async def get_businesses_by_category(self, category_id: int) -> List[Business]:
        return [b for b in self._active() if b.category_id == category_id]

    async def search_businesses(self, query: str) -> List[Business]:
        needle = query.lower()
        return [
            b
            for b in self._active()
            if any(
                needle in (value or "").lower()
                for value in (b.name, b.description, b.city, b.state)
            )
        ]

    async def create_business(self, **fields: Any) -> Business:
        now = datetime.utcnow()
        business = Business()
        _apply(business, fields)
        _apply(
            business,
            {
                "like_count": 0,
                "comment_count": 0,
                "rating": 0,
                "is_verified": False,
                "is_active": True,
                "is_paid": False,
                "status": BusinessStatus.PENDING,
                "subscription_id": None,
                "subscription_expires_at": None,
                "updated_at": now,
            },
        )
        business.id = self._next_id("business")
        business.created_at = now
        self._businesses[business.id] = business

        self._shift_category_counts(category_count_deltas(None, (business.category_id, True)))
        logger.debug("Created business %s in category %s", business.id, business.category_id)
        return business

    async def update_business(self, id: int, **changes: Any) -> Optional[Business]:
        business = self._businesses.get(id)
        if business is None:
            return None

        before = (business.category_id, business.is_active)
        _apply(business, changes)
        business.updated_at = datetime.utcnow()

        self._shift_category_counts(
            category_count_deltas(before, (business.category_id, business.is_active))
        )
        return business

    async def delete_business(self, id: int) -> bool:
        business = self._businesses.get(id)
        if business is None:
            return False

        before = (business.category_id, business.is_active)
        business.is_active = False
        self._shift_category_counts(category_count_deltas(before, (business.category_id, False)))
        logger.info("Business %s soft-deleted", id)
        return True

    # =========================================================================
    # Likes
    # =========================================================================

    async def get_likes_by_business_id(self, business_id: int) -> List[BusinessLike]:
        return [like for like in self._likes.values() if like.business_id == business_id]

    async def get_likes_by_user_id(self, user_id: int) -> List[BusinessLike]:
        return [like for like in self._likes.values() if like.user_id == user_id]

    async def get_like_by_user_and_business(
        self, user_id: int, business_id: int
    ) -> Optional[BusinessLike]:
        return next(
            (
                like
                for like in self._likes.values()
                if like.user_id == user_id and like.business_id == business_id
            ),
            None,
        )

    async def create_business_like(self, business_id: int, user_id: int) -> BusinessLike:
        like = BusinessLike(
            id=self._next_id("like"),
            business_id=business_id,
            user_id=user_id,
            created_at=datetime.utcnow(),
        )
        self._likes[like.id] = like

        business = self._businesses.get(business_id)
        if business is not None:
            business.like_count = floored(business.like_count, 1)
        return like

    async def delete_business_like(self, user_id: int, business_id: int) -> bool:
        like = await self.get_like_by_user_and_business(user_id, business_id)
        if like is None:
            return False

        del self._likes[like.id]
        business = self._businesses.get(business_id)
        if business is not None:
            business.like_count = floored(business.like_count, -1)
        return True

    # =========================================================================
    # Comments
    # =========================================================================

    async def get_comments_by_business_id(self, business_id: int) -> List[BusinessComment]:
        comments = [c for c in self._comments.values() if c.business_id == business_id]
        return sorted(comments, key=lambda c: (c.created_at, c.id), reverse=True)

    async def create_business_comment(
        self,
        business_id: int,
        user_id: int,
        content: str,
        rating: Optional[int] = None,
    ) -> BusinessComment:
        comment = BusinessComment(
            id=self._next_id("comment"),
            business_id=business_id,
            user_id=user_id,
            content=content,
            rating=rating,
            created_at=datetime.utcnow(),
        )
        self._comments[comment.id] = comment

        business = self._businesses.get(business_id)
        if business is not None:
            business.comment_count = floored(business.comment_count, 1)
            if rating is not None:
                business.rating = rounded_mean(
                    c.rating for c in self._comments.values() if c.business_id == business_id
                )
        return comment

    # =========================================================================
    # Subscriptions
    # =========================================================================

    async def get_subscription_by_id(self, id: int) -> Optional[Subscription]:
        return self._subscriptions.get(id)

    async def get_subscription_by_business_id(self, business_id: int) -> Optional[Subscription]:
        return next(
            (s for s in self._subscriptions.values() if s.business_id == business_id), None
        )

    async def get_subscriptions_by_order_id(self, order_id: str) -> List[Subscription]:
        return [s for s in self._subscriptions.values() if s.external_order_id == order_id]

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
        subscription = Subscription(
            id=self._next_id("subscription"),
            business_id=business_id,
            user_id=user_id,
            price_id=price_id,
            status=SubscriptionStatus(status),
            external_order_id=external_order_id,
            current_period_start=current_period_start,
            current_period_end=current_period_end,
            created_at=datetime.utcnow(),
        )
        self._subscriptions[subscription.id] = subscription

        await self._sync_business_with(subscription, None)
        return subscription

    async def update_subscription(self, id: int, **changes: Any) -> Optional[Subscription]:
        subscription = self._subscriptions.get(id)
        if subscription is None:
            return None

        if "status" in changes:
            changes["status"] = SubscriptionStatus(changes["status"])
        _apply(subscription, changes)

        await self._sync_business_with(subscription, changes)
        return subscription

    async def _sync_business_with(
        self, subscription: Subscription, changes: Optional[Dict[str, Any]]
    ) -> None:
        updates = subscription_business_updates(subscription, changes)
        business = self._businesses.get(subscription.business_id)
        if business is not None and updates:
            _apply(business, updates)
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
        return self._messages.get(id)

    async def get_messages_by_business_id(self, business_id: int) -> List[Message]:
        return [m for m in self._messages.values() if m.business_id == business_id]

    async def get_messages_by_user_id(self, user_id: int) -> List[Message]:
        return [
            m for m in self._messages.values() if user_id in (m.sender_id, m.receiver_id)
        ]

    async def get_messages_between_users(
        self, user_id: int, other_user_id: int, business_id: int
    ) -> List[Message]:
        pair = {user_id, other_user_id}
        conversation = [
            m
            for m in self._messages.values()
            if m.business_id == business_id
            and {m.sender_id, m.receiver_id} == pair
        ]
        return sorted(conversation, key=lambda m: (m.created_at, m.id))

    async def create_message(
        self, sender_id: int, receiver_id: int, business_id: int, content: str
    ) -> Message:
        message = Message(
            id=self._next_id("message"),
            sender_id=sender_id,
            receiver_id=receiver_id,
            business_id=business_id,
            content=content,
            is_read=False,
            created_at=datetime.utcnow(),
        )
        self._messages[message.id] = message

        await self.create_notification(
            user_id=receiver_id,
            type=NotificationType.MESSAGE,
            content=NEW_MESSAGE_NOTIFICATION,
            related_id=message.id,
        )
        return message

    async def mark_message_as_read(self, id: int) -> Optional[Message]:
        message = self._messages.get(id)
        if message is None:
            return None
        message.is_read = True
        return message

    # =========================================================================
    # Notifications
    # =========================================================================

    async def get_notification_by_id(self, id: int) -> Optional[Notification]:
        return self._notifications.get(id)

    async def get_notifications_by_user_id(self, user_id: int) -> List[Notification]:
        notifications = [n for n in self._notifications.values() if n.user_id == user_id]
        return sorted(notifications, key=lambda n: (n.created_at, n.id), reverse=True)

    async def get_unread_notifications_count(self, user_id: int) -> int:
        return sum(
            1 for n in self._notifications.values() if n.user_id == user_id and not n.is_read
        )

    async def create_notification(
        self,
        user_id: int,
        type: str,
        content: str,
        related_id: Optional[int] = None,
    ) -> Notification:
        notification = Notification(
            id=self._next_id("notification"),
            user_id=user_id,
            type=type,
            content=content,
            related_id=related_id,
            is_read=False,
            created_at=datetime.utcnow(),
        )
        self._notifications[notification.id] = notification
        return notification

    async def mark_notification_as_read(self, id: int) -> Optional[Notification]:
        notification = self._notifications.get(id)
        if notification is None:
            return None
        notification.is_read = True
        return notification

    async def mark_all_notifications_as_read(self, user_id: int) -> bool:
        for notification in self._notifications.values():
            if notification.user_id == user_id and not notification.is_read:
                notification.is_read = True
        return True
