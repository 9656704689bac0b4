"""
Tests for the PayPal Orders client.

HOW: httpx.MockTransport answers the OAuth and Orders endpoints, so no
request leaves the process.
"""

import json

import httpx
import pytest

from derra.core.exceptions import PaymentProviderError
from derra.services.paypal_client import PayPalClient


def _transport(order_response, status_code=200, calls=None):
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        if request.url.path == "/v1/oauth2/token":
            return httpx.Response(200, json={"access_token": "paypal-token"})
        return httpx.Response(status_code, json=order_response)

    return httpx.MockTransport(handler)


def _client(transport) -> PayPalClient:
    return PayPalClient(
        client_id="client",
        client_secret="secret",
        base_url="https://paypal.test",
        transport=transport,
    )


class TestCreateOrder:
    @pytest.mark.asyncio
    async def test_returns_approval_url(self):
        calls = []
        transport = _transport(
            {
                "id": "ORDER-1",
                "status": "CREATED",
                "links": [
                    {"rel": "self", "href": "https://paypal.test/v2/checkout/orders/ORDER-1"},
                    {"rel": "approve", "href": "https://paypal.test/checkoutnow?token=ORDER-1"},
                ],
            },
            calls=calls,
        )

        order = await _client(transport).create_order("5.00", "USD")

        assert order.order_id == "ORDER-1"
        assert order.status == "CREATED"
        assert order.approval_url == "https://paypal.test/checkoutnow?token=ORDER-1"

        order_request = calls[-1]
        assert order_request.headers["Authorization"] == "Bearer paypal-token"
        body = json.loads(order_request.content)
        assert body["intent"] == "CAPTURE"
        assert body["purchase_units"][0]["amount"] == {"currency_code": "USD", "value": "5.00"}

    @pytest.mark.asyncio
    async def test_missing_approval_link(self):
        transport = _transport({"id": "ORDER-1", "status": "CREATED", "links": []})

        with pytest.raises(PaymentProviderError):
            await _client(transport).create_order("5.00", "USD")


class TestOrderStatus:
    @pytest.mark.asyncio
    async def test_get_order(self):
        transport = _transport({"id": "ORDER-1", "status": "APPROVED"})

        order = await _client(transport).get_order("ORDER-1")

        assert order.status == "APPROVED"

    @pytest.mark.asyncio
    async def test_capture_order(self):
        calls = []
        transport = _transport({"id": "ORDER-1", "status": "COMPLETED"}, calls=calls)

        order = await _client(transport).capture_order("ORDER-1")

        assert order.status == "COMPLETED"
        assert calls[-1].url.path == "/v2/checkout/orders/ORDER-1/capture"

    @pytest.mark.asyncio
    async def test_error_status_is_wrapped(self):
        transport = _transport({"message": "Order not found"}, status_code=404)

        with pytest.raises(PaymentProviderError) as exc_info:
            await _client(transport).get_order("ORDER-404")

        assert "Order not found" in exc_info.value.message
        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_connection_error_is_wrapped(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(PaymentProviderError):
            await _client(httpx.MockTransport(handler)).get_order("ORDER-1")

    @pytest.mark.asyncio
    async def test_failed_authentication(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(401, json={}))

        with pytest.raises(PaymentProviderError) as exc_info:
            await _client(transport).get_order("ORDER-1")

        assert exc_info.value.message == "PayPal authentication failed"
