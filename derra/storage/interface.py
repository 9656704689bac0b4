"""
Storage capability.

WHAT: The one interface the services are written against. Two variants
implement it structurally (no common base class): MemoryStorage and
DatabaseStorage. create_storage_provider() picks one at startup.

CONTRACT:
- Lookups return the record or None; boolean operations return False for
  an absent target. Expected absence never raises.
- Only failures of the persistence medium raise.
- Every mutation that affects a cached aggregate updates that aggregate
  before returning (see derra.storage.counters).
- Records are the model instances from derra.models.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from derra.models import (
    Business,
    BusinessComment,
    BusinessLike,
    Category,
    Message,
    Notification,
    Subscription,
    User,
)


@runtime_checkable
class Storage(Protocol):
    """Persistence for the 8 entity kinds plus their derived counters."""

    # Users
    async def get_user(self, id: int) -> Optional[User]: ...

    async def get_user_by_username(self, username: str) -> Optional[User]: ...

    async def get_user_by_email(self, email: str) -> Optional[User]: ...

    async def create_user(
        self,
        username: str,
        email: str,
        password: str,
        name: Optional[str] = None,
        avatar: Optional[str] = None,
    ) -> User: ...

    async def update_user(self, id: int, **changes: Any) -> Optional[User]: ...

    # Categories
    async def get_categories(self) -> List[Category]: ...

    async def get_category_by_id(self, id: int) -> Optional[Category]: ...

    async def create_category(self, name: str, icon: str) -> Category: ...

    async def update_category_count(self, id: int, count: int) -> Optional[Category]: ...

    # Businesses
    async def get_businesses(self, filters: Optional[Dict[str, Any]] = None) -> List[Business]: ...

    async def get_business_by_id(self, id: int) -> Optional[Business]: ...

    async def get_businesses_by_owner_id(self, owner_id: int) -> List[Business]: ...

    async def get_featured_businesses(self, limit: int = 4) -> List[Business]: ...

    async def get_trending_businesses(self, limit: int = 4) -> List[Business]: ...

    async def get_recent_businesses(self, limit: int = 4) -> List[Business]: ...

    async def get_businesses_by_category(self, category_id: int) -> List[Business]: ...

    async def search_businesses(self, query: str) -> List[Business]: ...

    async def create_business(self, **fields: Any) -> Business: ...

    async def update_business(self, id: int, **changes: Any) -> Optional[Business]: ...

    async def delete_business(self, id: int) -> bool: ...

    # Likes
    async def get_likes_by_business_id(self, business_id: int) -> List[BusinessLike]: ...

    async def get_likes_by_user_id(self, user_id: int) -> List[BusinessLike]: ...

    async def get_like_by_user_and_business(
        self, user_id: int, business_id: int
    ) -> Optional[BusinessLike]: ...

    async def create_business_like(self, business_id: int, user_id: int) -> BusinessLike: ...

    async def delete_business_like(self, user_id: int, business_id: int) -> bool: ...

    # Comments
    async def get_comments_by_business_id(self, business_id: int) -> List[BusinessComment]: ...

    async def create_business_comment(
        self,
        business_id: int,
        user_id: int,
        content: str,
        rating: Optional[int] = None,
    ) -> BusinessComment: ...

    # Subscriptions
    async def get_subscription_by_id(self, id: int) -> Optional[Subscription]: ...

    async def get_subscription_by_business_id(self, business_id: int) -> Optional[Subscription]: ...

    async def get_subscriptions_by_order_id(self, order_id: str) -> List[Subscription]: ...

    async def create_subscription(
        self,
        business_id: int,
        user_id: int,
        price_id: str,
        status: Any = "pending",
        external_order_id: Optional[str] = None,
        current_period_start: Optional[datetime] = None,
        current_period_end: Optional[datetime] = None,
    ) -> Subscription: ...

    async def update_subscription(self, id: int, **changes: Any) -> Optional[Subscription]: ...

    # Messages
    async def get_message_by_id(self, id: int) -> Optional[Message]: ...

    async def get_messages_by_business_id(self, business_id: int) -> List[Message]: ...

    async def get_messages_by_user_id(self, user_id: int) -> List[Message]: ...

    async def get_messages_between_users(
        self, user_id: int, other_user_id: int, business_id: int
    ) -> List[Message]: ...

    async def create_message(
        self, sender_id: int, receiver_id: int, business_id: int, content: str
    ) -> Message: ...

    async def mark_message_as_read(self, id: int) -> Optional[Message]: ...

    # Notifications
    async def get_notification_by_id(self, id: int) -> Optional[Notification]: ...

    async def get_notifications_by_user_id(self, user_id: int) -> List[Notification]: ...

    async def get_unread_notifications_count(self, user_id: int) -> int: ...

    async def create_notification(
        self,
        user_id: int,
        type: str,
        content: str,
        related_id: Optional[int] = None,
    ) -> Notification: ...

    async def mark_notification_as_read(self, id: int) -> Optional[Notification]: ...

    async def mark_all_notifications_as_read(self, user_id: int) -> bool: ...
