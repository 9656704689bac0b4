"""Subscription Data Access Object."""

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from derra.dao.base import BaseDAO
from derra.models.subscription import Subscription


class SubscriptionDAO(BaseDAO[Subscription]):
    """
    Data Access Object for Subscription model.

    Subscriptions are looked up by business (one per listing in practice)
    and by the payment provider order id during verification and webhooks.
    """

    def __init__(self, session: AsyncSession):
        super().__init__(Subscription, session)

    async def get_by_business(self, business_id: int) -> Optional[Subscription]:
        return await self.get_by_field("business_id", business_id)

    async def get_by_order_id(self, order_id: str) -> List[Subscription]:
        return await self.get_all(external_order_id=order_id)
