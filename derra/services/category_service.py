"""Category Service."""

from typing import List, Optional

from derra.core.exceptions import ResourceNotFoundError
from derra.models import Category, User
from derra.services.access import require_actor
from derra.storage.interface import Storage


class CategoryService:
    def __init__(self, storage: Storage):
        self.storage = storage

    async def list_categories(self) -> List[Category]:
        return await self.storage.get_categories()

    async def get_category(self, category_id: int) -> Category:
        category = await self.storage.get_category_by_id(category_id)
        if category is None:
            raise ResourceNotFoundError("Category not found", category_id=category_id)
        return category

    async def create_category(self, actor: Optional[User], name: str, icon: str) -> Category:
        """Any logged-in user may add a category; it starts with no businesses."""
        require_actor(actor)
        return await self.storage.create_category(name=name, icon=icon)
