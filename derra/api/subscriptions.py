"""
Subscription API endpoints.

WHAT: Checkout, payment verification, demo activation and the payment
provider webhook.

The webhook is unauthenticated and always answers 200 so the provider
does not retry events it cannot map to a subscription.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from derra.core.deps import get_current_user, get_storage
from derra.models import User
from derra.schemas.subscription import (
    CheckoutResponse,
    DemoActivationRequest,
    DemoActivationResponse,
    PaymentWebhookEvent,
    SubscriptionCreateRequest,
    SubscriptionResponse,
    SubscriptionVerifyRequest,
    VerifyResponse,
)
from derra.services.paypal_client import PayPalClient, get_payment_client
from derra.services.subscription_service import SubscriptionService
from derra.storage.interface import Storage

router = APIRouter(tags=["subscriptions"])


@router.post("/create-subscription", response_model=CheckoutResponse)
async def create_subscription(
    payload: SubscriptionCreateRequest,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    payments: PayPalClient = Depends(get_payment_client),
) -> CheckoutResponse:
    """Start checkout; the client redirects the owner to approval_url."""
    subscription, order = await SubscriptionService(storage, payments).start_checkout(
        current_user, payload.business_id
    )
    return CheckoutResponse(
        subscription=SubscriptionResponse.model_validate(subscription),
        approval_url=order.approval_url,
        order_id=order.order_id,
    )


@router.post("/subscription/verify", response_model=VerifyResponse)
async def verify_subscription(
    payload: SubscriptionVerifyRequest,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
    payments: PayPalClient = Depends(get_payment_client),
) -> VerifyResponse:
    subscription = await SubscriptionService(storage, payments).verify(
        current_user, payload.order_id
    )
    return VerifyResponse(business_id=subscription.business_id)


@router.post("/subscription/activate-demo", response_model=DemoActivationResponse)
async def activate_demo(
    payload: DemoActivationRequest,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> DemoActivationResponse:
    subscription = await SubscriptionService(storage).activate_demo(
        current_user, payload.business_id
    )
    return DemoActivationResponse(subscription=SubscriptionResponse.model_validate(subscription))


@router.post("/paypal-webhook", response_class=PlainTextResponse)
async def paypal_webhook(
    event: PaymentWebhookEvent,
    storage: Storage = Depends(get_storage),
) -> str:
    resource_id = event.resource.get("id") if event.resource else None
    await SubscriptionService(storage).handle_webhook(
        event.event_type, resource_id, event.order_id()
    )
    return "OK"
