"""
PayPal Orders API client.

WHAT: Async HTTP client for the three payment-provider calls the
subscription flows need: create an order, read its status, capture it.

WHY: The subscription service is written against this small interface
(create_order / get_order / capture_order), so tests substitute a fake
through the get_payment_client dependency and no real money moves.

HOW: Uses httpx for async HTTP with an OAuth2 client-credentials token
fetched per call. Transport errors and error statuses are wrapped in
PaymentProviderError (502).
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from derra.core.config import settings
from derra.core.exceptions import PaymentProviderError

logger = logging.getLogger(__name__)

# Default timeout for PayPal API calls (seconds)
DEFAULT_TIMEOUT = 30.0


@dataclass
class PaymentOrder:
    """
    The parts of a PayPal order the application reads.

    status is PayPal's order status (CREATED, APPROVED, COMPLETED, ...).
    approval_url is only present on freshly created orders.
    """

    order_id: str
    status: str
    approval_url: Optional[str] = None


class PayPalClient:
    """Async client for PayPal Orders v2."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        base_url: str = settings.PAYPAL_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            client_id: PayPal REST app client id
            client_secret: PayPal REST app secret
            base_url: API root (sandbox or live)
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self._client_id = client_id
        self._client_secret = client_secret
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        )

    async def _access_token(self, client: httpx.AsyncClient) -> str:
        response = await client.post(
            "/v1/oauth2/token",
            data={"grant_type": "client_credentials"},
            auth=(self._client_id, self._client_secret),
        )
        if response.status_code >= 400:
            raise PaymentProviderError(
                "PayPal authentication failed",
                provider_status=response.status_code,
            )
        return response.json()["access_token"]

    async def _request(
        self,
        method: str,
        endpoint: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Make an authenticated request to the Orders API.

        Args:
            method: HTTP method
            endpoint: API path (e.g. /v2/checkout/orders)
            data: JSON body

        Returns:
            Parsed JSON response

        Raises:
            PaymentProviderError: If the request fails or returns an error status
        """
        try:
            async with self._client() as client:
                token = await self._access_token(client)
                response = await client.request(
                    method,
                    endpoint,
                    json=data,
                    headers={
                        "Authorization": f"Bearer {token}",
                        "Content-Type": "application/json",
                        "Prefer": "return=representation",
                    },
                )
        except httpx.TimeoutException:
            raise PaymentProviderError("PayPal request timed out", endpoint=endpoint)
        except httpx.RequestError as e:
            raise PaymentProviderError(
                f"PayPal connection error: {str(e)}",
                endpoint=endpoint,
            )

        if response.status_code >= 400:
            logger.warning(
                "PayPal %s %s returned %s", method, endpoint, response.status_code
            )
            raise PaymentProviderError(
                f"PayPal API error: {self._parse_error_response(response)}",
                endpoint=endpoint,
                provider_status=response.status_code,
            )

        return response.json()

    def _parse_error_response(self, response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        return data.get("message") or data.get("error_description") or str(data)

    # =========================================================================
    # Orders
    # =========================================================================

    async def create_order(self, amount: str, currency: str) -> PaymentOrder:
        """
        Create a capture-intent order for one subscription period.

        Args:
            amount: Decimal amount as a string (e.g. "5.00")
            currency: ISO currency code

        Returns:
            The new order with its buyer approval URL

        Raises:
            PaymentProviderError: If PayPal rejects the order or omits the approval link
        """
        result = await self._request(
            "POST",
            "/v2/checkout/orders",
            {
                "intent": "CAPTURE",
                "purchase_units": [
                    {
                        "amount": {"currency_code": currency, "value": amount},
                        "description": settings.SUBSCRIPTION_DESCRIPTION,
                    }
                ],
                "application_context": {
                    "return_url": settings.PAYPAL_RETURN_URL,
                    "cancel_url": settings.PAYPAL_CANCEL_URL,
                },
            },
        )

        approval_url = next(
            (link["href"] for link in result.get("links", []) if link.get("rel") == "approve"),
            None,
        )
        if approval_url is None:
            raise PaymentProviderError(
                "Could not find approval URL in PayPal order response",
                order_id=result.get("id"),
            )

        return PaymentOrder(
            order_id=result["id"],
            status=result.get("status", "CREATED"),
            approval_url=approval_url,
        )

    async def get_order(self, order_id: str) -> PaymentOrder:
        result = await self._request("GET", f"/v2/checkout/orders/{order_id}")
        return PaymentOrder(order_id=result["id"], status=result["status"])

    async def capture_order(self, order_id: str) -> PaymentOrder:
        result = await self._request("POST", f"/v2/checkout/orders/{order_id}/capture", {})
        return PaymentOrder(order_id=result.get("id", order_id), status=result["status"])


def get_payment_client() -> PayPalClient:
    """
    FastAPI dependency returning the configured PayPal client.

    Raises:
        PaymentProviderError: If PayPal credentials are not configured
    """
    if not settings.paypal_configured:
        raise PaymentProviderError("Payment provider is not configured")
    return PayPalClient(
        client_id=settings.PAYPAL_CLIENT_ID,
        client_secret=settings.PAYPAL_CLIENT_SECRET,
        base_url=settings.PAYPAL_BASE_URL,
    )
