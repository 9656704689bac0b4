"""
Tests for the DAO layer under the database backend.

WHY: DatabaseStorage relies on a few DAO guarantees that the storage
contract tests only see indirectly: floored SQL increments, escaped
LIKE patterns and strict field lookups.
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from derra.dao import BusinessDAO, CategoryDAO, UserDAO
from derra.dao.business import like_pattern


def test_like_pattern_escapes_wildcards():
    assert like_pattern("50%_off") == "%50\\%\\_off%"
    assert like_pattern("a\\b") == "%a\\\\b%"


class TestBaseDAO:
    @pytest.mark.asyncio
    async def test_create_and_get(self, db_session: AsyncSession):
        dao = UserDAO(db_session)

        user = await dao.create(username="alice", email="alice@example.com", password="x")

        assert user.id is not None
        assert (await dao.get_by_id(user.id)).username == "alice"
        assert await dao.get_by_id(999) is None

    @pytest.mark.asyncio
    async def test_get_by_field_rejects_unknown_field(self, db_session: AsyncSession):
        with pytest.raises(AttributeError):
            await UserDAO(db_session).get_by_field("shoe_size", 42)

    @pytest.mark.asyncio
    async def test_update_skips_protected_and_unknown_fields(self, db_session: AsyncSession):
        dao = UserDAO(db_session)
        user = await dao.create(username="alice", email="alice@example.com", password="x")
        user_id = user.id

        updated = await dao.update(user_id, created_at=None, name="Alice", shoe_size=42)

        assert updated.created_at is not None
        assert updated.name == "Alice"
        assert await dao.update(999, name="x") is None


class TestIncrements:
    @pytest.mark.asyncio
    async def test_increment_is_floored_at_zero(self, db_session: AsyncSession):
        dao = CategoryDAO(db_session)
        category = await dao.create(name="Retail", icon="ri-store-2-line", business_count=1)

        await dao.increment(category.id, "business_count", -1)
        await dao.increment(category.id, "business_count", -1)

        assert (await dao.get_by_id(category.id)).business_count == 0

    @pytest.mark.asyncio
    async def test_shift_counts(self, db_session: AsyncSession):
        dao = CategoryDAO(db_session)
        retail = await dao.create(name="Retail", icon="ri-store-2-line", business_count=2)
        food = await dao.create(name="Food", icon="ri-restaurant-line", business_count=0)

        await dao.shift_counts({retail.id: -1, food.id: 1})

        assert (await dao.get_by_id(retail.id)).business_count == 1
        assert (await dao.get_by_id(food.id)).business_count == 1


class TestBusinessSearch:
    @pytest.mark.asyncio
    async def test_underscore_is_literal(self, db_session: AsyncSession):
        users = UserDAO(db_session)
        categories = CategoryDAO(db_session)
        businesses = BusinessDAO(db_session)
        owner = await users.create(username="alice", email="alice@example.com", password="x")
        category = await categories.create(name="Retail", icon="ri-store-2-line", business_count=0)
        fields = {"owner_id": owner.id, "category_id": category.id, "city": "C", "state": "S"}
        snake = await businesses.create(name="snake_case", description="d", **fields)
        await businesses.create(name="snakeXcase", description="d", **fields)

        results = await businesses.search("e_c")

        assert [b.id for b in results] == [snake.id]
