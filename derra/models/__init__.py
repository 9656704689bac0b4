"""
Database models package.

WHY: Centralizing model imports ensures every table is registered on
Base.metadata before create_all runs, and gives one import point.
"""

from derra.models.base import Base, CreatedAtMixin, PrimaryKeyMixin, TimestampMixin
from derra.models.user import User
from derra.models.category import Category
from derra.models.business import Business, BusinessComment, BusinessLike, BusinessStatus
from derra.models.subscription import Subscription, SubscriptionStatus
from derra.models.message import (
    NEW_MESSAGE_NOTIFICATION,
    Message,
    Notification,
    NotificationType,
)

__all__ = [
    "Base",
    "CreatedAtMixin",
    "PrimaryKeyMixin",
    "TimestampMixin",
    "User",
    "Category",
    "Business",
    "BusinessComment",
    "BusinessLike",
    "BusinessStatus",
    "Subscription",
    "SubscriptionStatus",
    "Message",
    "Notification",
    "NotificationType",
    "NEW_MESSAGE_NOTIFICATION",
]
