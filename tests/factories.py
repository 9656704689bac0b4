"""
Test factories and fakes.

WHY: Tests build the same users, categories and businesses over and
over; keeping that here means a model change is fixed in one place.
"""

from typing import Any, Dict, List, Optional, Tuple

from httpx import AsyncClient

from derra.core.exceptions import PaymentProviderError
from derra.models import Business, Category, User
from derra.services.paypal_client import PaymentOrder
from derra.storage.interface import Storage


class FakePaymentClient:
    """
    In-process stand-in for PayPalClient.

    Orders start CREATED; tests move them along with approve()/complete().
    capture_status is what capture_order() reports.
    """

    def __init__(self):
        self.orders: Dict[str, str] = {}
        self.created: List[Tuple[str, str]] = []
        self.captured: List[str] = []
        self.capture_status = "COMPLETED"

    async def create_order(self, amount: str, currency: str) -> PaymentOrder:
        order_id = f"ORDER-{len(self.orders) + 1}"
        self.orders[order_id] = "CREATED"
        self.created.append((amount, currency))
        return PaymentOrder(
            order_id=order_id,
            status="CREATED",
            approval_url=f"https://paypal.test/checkoutnow?token={order_id}",
        )

    async def get_order(self, order_id: str) -> PaymentOrder:
        if order_id not in self.orders:
            raise PaymentProviderError("PayPal API error: order not found", order_id=order_id)
        return PaymentOrder(order_id=order_id, status=self.orders[order_id])

    async def capture_order(self, order_id: str) -> PaymentOrder:
        self.captured.append(order_id)
        self.orders[order_id] = self.capture_status
        return PaymentOrder(order_id=order_id, status=self.capture_status)

    def approve(self, order_id: str) -> None:
        self.orders[order_id] = "APPROVED"

    def complete(self, order_id: str) -> None:
        self.orders[order_id] = "COMPLETED"


# ============================================================================
# Storage-level factories
# ============================================================================


async def make_user(storage: Storage, username: str = "alice", **overrides: Any) -> User:
    fields = {
        "email": f"{username}@example.com",
        "password": "not-a-real-hash",
        "name": username.title(),
    }
    fields.update(overrides)
    return await storage.create_user(username=username, **fields)


async def make_category(
    storage: Storage, name: str = "Retail", icon: str = "ri-store-2-line"
) -> Category:
    return await storage.create_category(name=name, icon=icon)


async def make_business(
    storage: Storage,
    owner: User,
    category: Category,
    name: str = "Corner Shop",
    **overrides: Any,
) -> Business:
    fields = {
        "name": name,
        "description": f"{name} serves the neighbourhood",
        "owner_id": owner.id,
        "category_id": category.id,
        "city": "Springfield",
        "state": "IL",
    }
    fields.update(overrides)
    return await storage.create_business(**fields)


# ============================================================================
# API-level helpers
# ============================================================================


def auth_headers(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def register(
    client: AsyncClient, username: str, password: str = "secret123", name: Optional[str] = None
) -> Tuple[Dict[str, Any], Dict[str, str]]:
    """
    Register through the API.

    Returns:
        (user JSON, auth headers)
    """
    response = await client.post(
        "/api/register",
        json={
            "username": username,
            "email": f"{username}@example.com",
            "password": password,
            "name": name or username.title(),
        },
    )
    assert response.status_code == 201, response.text
    data = response.json()
    return data["user"], auth_headers(data["access_token"])


async def create_category(
    client: AsyncClient, headers: Dict[str, str], name: str = "Retail"
) -> Dict:
    response = await client.post(
        "/api/categories", json={"name": name, "icon": "ri-store-2-line"}, headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()


async def create_business(
    client: AsyncClient,
    headers: Dict[str, str],
    category_id: int,
    name: str = "Corner Shop",
    **overrides: Any,
) -> Dict:
    payload = {
        "name": name,
        "description": f"{name} serves the neighbourhood",
        "category_id": category_id,
        "city": "Springfield",
        "state": "IL",
    }
    payload.update(overrides)
    response = await client.post("/api/businesses", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()
