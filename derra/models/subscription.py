"""
Subscription model for paid featured placement.

WHY: A subscription is the payment record behind a listing. Its status
drives the listing: activation marks the business paid and active,
cancellation marks it unpaid and inactive.

LIFECYCLE:
1. Owner starts checkout -> payment order created -> subscription PENDING
2. Payment verified/captured (or webhook received) -> ACTIVE
3. Canceled -> CANCELED
"""

import enum

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String

from derra.models.base import Base, CreatedAtMixin, PrimaryKeyMixin


class SubscriptionStatus(str, enum.Enum):
    """Subscription status values."""

    PENDING = "pending"
    ACTIVE = "active"
    CANCELED = "canceled"


class Subscription(Base, PrimaryKeyMixin, CreatedAtMixin):
    """Listing subscription paid by a business owner."""

    __tablename__ = "subscriptions"

    # One active subscription is expected per business; not enforced uniquely
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Payment provider order id
    external_order_id = Column(String(255), nullable=True, index=True)

    status = Column(
        Enum(
            SubscriptionStatus,
            name="subscriptionstatus",
            values_callable=lambda enum_cls: [member.value for member in enum_cls],
        ),
        default=SubscriptionStatus.PENDING,
        nullable=False,
    )
    price_id = Column(String(100), nullable=False)

    current_period_start = Column(DateTime, nullable=True)
    current_period_end = Column(DateTime, nullable=True)

    def __repr__(self) -> str:
        return f"<Subscription(id={self.id}, business_id={self.business_id}, status={self.status})>"
