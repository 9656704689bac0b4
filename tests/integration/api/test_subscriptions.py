"""
Integration tests for paid featured placement.

HOW: The payment provider is the FakePaymentClient injected through the
get_payment_client dependency override; tests move orders through
CREATED -> APPROVED/COMPLETED by hand.
"""

import pytest
from httpx import AsyncClient

from derra.core.config import settings
from tests.factories import create_business, create_category, register


async def _listing(client: AsyncClient):
    owner, headers = await register(client, "alice")
    category = await create_category(client, headers)
    business = await create_business(client, headers, category["id"])
    return owner, headers, business


class TestCheckoutAndVerify:
    @pytest.mark.asyncio
    async def test_checkout_then_verify(self, client: AsyncClient, payments):
        _, headers, business = await _listing(client)

        checkout = await client.post(
            "/api/create-subscription", json={"business_id": business["id"]}, headers=headers
        )
        assert checkout.status_code == 200
        order_id = checkout.json()["order_id"]
        assert checkout.json()["approval_url"].endswith(order_id)
        assert checkout.json()["subscription"]["status"] == "pending"
        assert (await client.get("/api/businesses/featured")).json() == []

        payments.approve(order_id)
        verify = await client.post(
            "/api/subscription/verify", json={"order_id": order_id}, headers=headers
        )

        assert verify.status_code == 200
        assert verify.json()["business_id"] == business["id"]
        assert payments.captured == [order_id]
        listing = (await client.get(f"/api/businesses/{business['id']}")).json()
        assert listing["is_paid"] is True
        assert listing["status"] == "active"
        assert listing["subscription_id"] == order_id
        featured = (await client.get("/api/businesses/featured")).json()
        assert [b["id"] for b in featured] == [business["id"]]

    @pytest.mark.asyncio
    async def test_verify_unpaid_order(self, client: AsyncClient):
        _, headers, business = await _listing(client)
        checkout = await client.post(
            "/api/create-subscription", json={"business_id": business["id"]}, headers=headers
        )

        response = await client.post(
            "/api/subscription/verify",
            json={"order_id": checkout.json()["order_id"]},
            headers=headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Payment not completed. Status: CREATED"

    @pytest.mark.asyncio
    async def test_checkout_by_non_owner(self, client: AsyncClient):
        _, _, business = await _listing(client)
        _, bob_headers = await register(client, "bob")

        response = await client.post(
            "/api/create-subscription", json={"business_id": business["id"]}, headers=bob_headers
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_unknown_order_is_a_provider_error(self, client: AsyncClient):
        _, headers, _ = await _listing(client)

        response = await client.post(
            "/api/subscription/verify", json={"order_id": "ORDER-404"}, headers=headers
        )

        assert response.status_code == 502


class TestWebhook:
    @pytest.mark.asyncio
    async def test_capture_completed(self, client: AsyncClient):
        _, headers, business = await _listing(client)
        checkout = await client.post(
            "/api/create-subscription", json={"business_id": business["id"]}, headers=headers
        )

        response = await client.post(
            "/api/paypal-webhook",
            json={
                "event_type": "PAYMENT.CAPTURE.COMPLETED",
                "resource": {
                    "id": "CAPTURE-1",
                    "supplementary_data": {
                        "related_ids": {"order_id": checkout.json()["order_id"]}
                    },
                },
            },
        )

        assert response.status_code == 200
        assert response.text == "OK"
        listing = (await client.get(f"/api/businesses/{business['id']}")).json()
        assert listing["is_paid"] is True

    @pytest.mark.asyncio
    async def test_other_events_are_acknowledged(self, client: AsyncClient):
        response = await client.post(
            "/api/paypal-webhook",
            json={"event_type": "BILLING.SUBSCRIPTION.CREATED", "resource": {"id": "I-1"}},
        )

        assert response.status_code == 200
        assert response.text == "OK"


class TestDemoActivation:
    @pytest.mark.asyncio
    async def test_disabled(self, client: AsyncClient, monkeypatch):
        monkeypatch.setattr(settings, "SUBSCRIPTION_DEMO_MODE", False)
        _, headers, business = await _listing(client)

        response = await client.post(
            "/api/subscription/activate-demo", json={"business_id": business["id"]}, headers=headers
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_enabled(self, client: AsyncClient, monkeypatch):
        monkeypatch.setattr(settings, "SUBSCRIPTION_DEMO_MODE", True)
        _, headers, business = await _listing(client)

        response = await client.post(
            "/api/subscription/activate-demo", json={"business_id": business["id"]}, headers=headers
        )

        assert response.status_code == 200
        assert response.json()["success"] is True
        assert response.json()["subscription"]["status"] == "active"


@pytest.mark.asyncio
async def test_listing_lifecycle(client: AsyncClient, payments):
    """
    A new owner lists a shop, gets a like and a review, pays for
    placement, and shows up as featured.
    """
    alice, alice_headers = await register(client, "alice")
    retail = await create_category(client, alice_headers, name="Retail")
    shop = await create_business(client, alice_headers, retail["id"], name="Alice's Goods")
    _, bob_headers = await register(client, "bob")

    like = await client.post(f"/api/businesses/{shop['id']}/like", headers=bob_headers)
    comment = await client.post(
        f"/api/businesses/{shop['id']}/comments",
        json={"content": "Lovely little shop", "rating": 4},
        headers=bob_headers,
    )
    assert like.status_code == 201
    assert comment.status_code == 201

    checkout = await client.post(
        "/api/create-subscription", json={"business_id": shop["id"]}, headers=alice_headers
    )
    order_id = checkout.json()["order_id"]
    payments.complete(order_id)
    verify = await client.post(
        "/api/subscription/verify", json={"order_id": order_id}, headers=alice_headers
    )
    assert verify.status_code == 200

    listing = (await client.get(f"/api/businesses/{shop['id']}")).json()
    assert listing["owner_id"] == alice["id"]
    assert listing["like_count"] == 1
    assert listing["comment_count"] == 1
    assert listing["rating"] == 4
    assert listing["is_paid"] is True

    featured = (await client.get("/api/businesses/featured")).json()
    assert shop["id"] in [b["id"] for b in featured]
    category = (await client.get(f"/api/categories/{retail['id']}")).json()
    assert category["business_count"] == 1
