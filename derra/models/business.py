"""
Business listing models.

WHAT: Business, BusinessLike and BusinessComment.

WHY: A business carries several denormalized values that the storage
layer keeps in sync with child rows:
- like_count    == number of BusinessLike rows
- comment_count == number of BusinessComment rows
- rating        == rounded mean of non-null comment ratings
- is_paid/status follow the state of its subscription

Businesses are never hard-deleted. Deleting one clears is_active.
"""

import enum

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)

from derra.models.base import Base, CreatedAtMixin, PrimaryKeyMixin, TimestampMixin


class BusinessStatus(str, enum.Enum):
    """
    Listing status.

    - PENDING: created, no paid subscription yet
    - ACTIVE: subscription activated
    - INACTIVE: subscription canceled
    """

    PENDING = "pending"
    ACTIVE = "active"
    INACTIVE = "inactive"


class Business(Base, PrimaryKeyMixin, TimestampMixin):
    """A business listed in the directory."""

    __tablename__ = "businesses"

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)

    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)

    # Address
    address = Column(String(255), nullable=True)
    city = Column(String(100), nullable=False)
    state = Column(String(100), nullable=False)
    zip_code = Column(String(20), nullable=True)

    # Contact
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    website = Column(String(1024), nullable=True)
    image = Column(String(1024), nullable=True)

    # Derived caches
    like_count = Column(Integer, default=0, nullable=False)
    comment_count = Column(Integer, default=0, nullable=False)
    rating = Column(Integer, default=0, nullable=False)

    # Flags
    is_verified = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    is_paid = Column(Boolean, default=False, nullable=False)
    status = Column(
        Enum(
            BusinessStatus,
            name="businessstatus",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        default=BusinessStatus.PENDING,
        nullable=False,
    )

    # Subscription back-reference (external order id of the paying subscription)
    subscription_id = Column(String(255), nullable=True)
    subscription_expires_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("ix_businesses_active_paid", "is_active", "is_paid"),
    )

    def __repr__(self) -> str:
        return f"<Business(id={self.id}, name={self.name}, status={self.status})>"


class BusinessLike(Base, PrimaryKeyMixin, CreatedAtMixin):
    """
    A user's like of a business.

    At most one row per (user_id, business_id); the orchestrator checks
    for an existing like before inserting.
    """

    __tablename__ = "business_likes"

    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)


class BusinessComment(Base, PrimaryKeyMixin, CreatedAtMixin):
    """A review comment with an optional 1..5 rating."""

    __tablename__ = "business_comments"

    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    rating = Column(Integer, nullable=True)
