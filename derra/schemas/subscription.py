"""
Pydantic schemas for listing subscriptions and payment webhooks.

WHAT: Checkout starts a payment order and records a pending
subscription; verification confirms the order with the payment
provider and activates it.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from derra.models.subscription import SubscriptionStatus


class SubscriptionCreateRequest(BaseModel):
    business_id: int = Field(..., description="Business to feature")


class SubscriptionVerifyRequest(BaseModel):
    order_id: str = Field(..., min_length=1, description="Payment provider order id")


class DemoActivationRequest(BaseModel):
    business_id: int


class SubscriptionResponse(BaseModel):
    id: int
    business_id: int
    user_id: int
    external_order_id: Optional[str] = None
    status: SubscriptionStatus
    price_id: str
    current_period_start: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CheckoutResponse(BaseModel):
    """Where to send the owner to approve the payment."""

    subscription: SubscriptionResponse
    approval_url: str
    order_id: str


class VerifyResponse(BaseModel):
    message: str = "Payment verified and subscription activated"
    business_id: int


class DemoActivationResponse(BaseModel):
    subscription: SubscriptionResponse
    success: bool = True
    message: str = "Business activated in demo mode"


class PaymentWebhookEvent(BaseModel):
    """
    Payment provider webhook envelope.

    Only event_type and resource are read; anything else is ignored.
    """

    event_type: str
    resource: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(extra="allow")

    def order_id(self) -> Optional[str]:
        """Order id a capture event refers to, if present."""
        if not self.resource:
            return None
        related = (self.resource.get("supplementary_data") or {}).get("related_ids") or {}
        return related.get("order_id") or None
