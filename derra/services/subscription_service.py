"""
Subscription Service.

WHAT: Paid featured placement for business listings.

WHY: A listing is featured while it has an active subscription. The
flows that get it there:
1. Checkout: create a payment order, record a pending subscription
2. Verify: confirm the order with the provider (capturing it if only
   approved), then activate the subscription
3. Webhook: the provider reports a completed capture; activate every
   subscription recorded for that order
4. Demo activation: skip the provider entirely (only when enabled)

HOW: Activation goes through Storage.update_subscription, which forces
the business to is_paid=True / status=active in the same unit of work.
"""

import logging
import time
from datetime import datetime, timedelta
from typing import Optional, Protocol, Tuple

from derra.core.config import settings
from derra.core.exceptions import (
    AuthorizationError,
    BusinessRuleViolation,
    ResourceNotFoundError,
)
from derra.models import Subscription, SubscriptionStatus, User
from derra.services.access import get_business_or_404, require_actor, require_owner
from derra.services.paypal_client import PaymentOrder
from derra.storage.interface import Storage

logger = logging.getLogger(__name__)

# PayPal order statuses
ORDER_APPROVED = "APPROVED"
ORDER_COMPLETED = "COMPLETED"

CAPTURE_COMPLETED_EVENT = "PAYMENT.CAPTURE.COMPLETED"


class PaymentClient(Protocol):
    """The payment-provider calls the subscription flows depend on."""

    async def create_order(self, amount: str, currency: str) -> PaymentOrder: ...

    async def get_order(self, order_id: str) -> PaymentOrder: ...

    async def capture_order(self, order_id: str) -> PaymentOrder: ...


def billing_period(start: datetime) -> Tuple[datetime, datetime]:
    return start, start + timedelta(days=settings.SUBSCRIPTION_PERIOD_DAYS)


class SubscriptionService:
    """Subscription flows over any storage backend and payment client."""

    def __init__(self, storage: Storage, payments: Optional[PaymentClient] = None):
        self.storage = storage
        self.payments = payments

    def _payments(self) -> PaymentClient:
        if self.payments is None:
            raise BusinessRuleViolation("Payment provider is not available")
        return self.payments

    async def start_checkout(
        self, actor: Optional[User], business_id: int
    ) -> Tuple[Subscription, PaymentOrder]:
        """
        Create a payment order and a pending subscription for it.

        The listing keeps its current paid, status, subscription id and
        expiry values until the payment is verified.

        Raises:
            ResourceNotFoundError: If the business does not exist
            AuthorizationError: If the actor is not the owner
            BusinessRuleViolation: If the business already has an active subscription
            PaymentProviderError: If the order cannot be created
        """
        business = await get_business_or_404(self.storage, business_id)
        actor = require_owner(actor, business)

        existing = await self.storage.get_subscription_by_business_id(business_id)
        if existing is not None and existing.status == SubscriptionStatus.ACTIVE:
            raise BusinessRuleViolation("Business already has an active subscription")

        order = await self._payments().create_order(
            settings.SUBSCRIPTION_PRICE, settings.SUBSCRIPTION_CURRENCY
        )

        listing_state = {
            "is_paid": business.is_paid,
            "status": business.status,
            "subscription_id": business.subscription_id,
            "subscription_expires_at": business.subscription_expires_at,
        }
        start, end = billing_period(datetime.utcnow())
        subscription = await self.storage.create_subscription(
            business_id=business_id,
            user_id=actor.id,
            price_id=settings.SUBSCRIPTION_PRICE_ID,
            status=SubscriptionStatus.PENDING,
            external_order_id=order.order_id,
            current_period_start=start,
            current_period_end=end,
        )
        # Inserting a subscription marks the listing paid; undo that until verified
        await self.storage.update_business(business_id, **listing_state)

        logger.info(
            "Checkout started for business %s (order %s)", business_id, order.order_id
        )
        return subscription, order

    async def verify(self, actor: Optional[User], order_id: str) -> Subscription:
        """
        Confirm a payment and activate its subscription.

        Raises:
            BusinessRuleViolation: If the order is not approved/completed or capture fails
            ResourceNotFoundError: If no subscription was recorded for the order
            AuthorizationError: If none of those subscriptions belongs to the actor
        """
        actor = require_actor(actor)
        payments = self._payments()

        order = await payments.get_order(order_id)
        if order.status not in (ORDER_COMPLETED, ORDER_APPROVED):
            raise BusinessRuleViolation(f"Payment not completed. Status: {order.status}")

        subscriptions = await self.storage.get_subscriptions_by_order_id(order_id)
        if not subscriptions:
            raise ResourceNotFoundError("Subscription not found", order_id=order_id)

        subscription = next((s for s in subscriptions if s.user_id == actor.id), None)
        if subscription is None:
            raise AuthorizationError("Unauthorized access to subscription")

        business = await get_business_or_404(self.storage, subscription.business_id)
        require_owner(actor, business)

        if order.status == ORDER_APPROVED:
            capture = await payments.capture_order(order_id)
            if capture.status != ORDER_COMPLETED:
                raise BusinessRuleViolation(
                    f"Failed to capture payment. Status: {capture.status}"
                )

        activated = await self.storage.update_subscription(
            subscription.id,
            status=SubscriptionStatus.ACTIVE,
            current_period_end=subscription.current_period_end,
        )
        logger.info("Subscription %s activated for order %s", subscription.id, order_id)
        return activated

    async def activate_demo(self, actor: Optional[User], business_id: int) -> Subscription:
        """
        Activate a listing without payment.

        Raises:
            AuthorizationError: If demo activation is disabled or the actor is not the owner
            ResourceNotFoundError: If the business does not exist
        """
        actor = require_actor(actor)
        if not settings.SUBSCRIPTION_DEMO_MODE:
            raise AuthorizationError("Demo activation is disabled")

        business = await get_business_or_404(self.storage, business_id)
        require_owner(actor, business)

        order_id = f"demo-{int(time.time() * 1000)}"
        start, end = billing_period(datetime.utcnow())

        subscription = await self.storage.get_subscription_by_business_id(business_id)
        if subscription is not None:
            subscription = await self.storage.update_subscription(
                subscription.id,
                status=SubscriptionStatus.ACTIVE,
                current_period_start=start,
                current_period_end=end,
                external_order_id=order_id,
            )
        else:
            subscription = await self.storage.create_subscription(
                business_id=business_id,
                user_id=actor.id,
                price_id=settings.SUBSCRIPTION_PRICE_ID,
                status=SubscriptionStatus.ACTIVE,
                external_order_id=order_id,
                current_period_start=start,
                current_period_end=end,
            )

        await self.storage.update_business(business_id, is_active=True, is_paid=True)
        logger.info("Business %s activated in demo mode", business_id)
        return subscription

    async def handle_webhook(
        self, event_type: str, resource_id: Optional[str], order_id: Optional[str]
    ) -> int:
        """
        Apply a payment-provider event.

        Only completed captures that reference an order are acted upon;
        every other event is acknowledged and ignored.

        Returns:
            Number of subscriptions activated
        """
        logger.info("Payment webhook received: %s", event_type)
        if event_type != CAPTURE_COMPLETED_EVENT or not resource_id or not order_id:
            return 0

        activated = 0
        for subscription in await self.storage.get_subscriptions_by_order_id(order_id):
            await self.storage.update_subscription(
                subscription.id,
                status=SubscriptionStatus.ACTIVE,
                current_period_end=subscription.current_period_end,
            )
            await self.storage.update_business(
                subscription.business_id, is_active=True, is_paid=True
            )
            activated += 1
            logger.info(
                "Subscription %s for business %s activated by webhook",
                subscription.id,
                subscription.business_id,
            )
        return activated
