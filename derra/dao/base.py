"""
Generic data access for the database storage backend.

WHY: The DAO pattern separates SQL from the storage contract. The
DatabaseStorage backend composes one DAO per entity kind and owns the
transaction; DAOs only add, flush and query.
"""

from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy import case, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from derra.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseDAO(Generic[ModelType]):
    """
    Single-model queries and writes shared by every entity DAO.

    Reads always repopulate instances already held by the session, since
    counter updates are issued as bulk UPDATE statements that bypass the
    identity map.

    Type Parameters:
        ModelType: The SQLAlchemy model class this DAO manages
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    def select(self) -> Select:
        """SELECT over the model that refreshes identity-mapped instances."""
        return select(self.model).execution_options(populate_existing=True)

    async def scalars(self, query: Select) -> List[ModelType]:
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def create(self, **kwargs: Any) -> ModelType:
        """
        Insert a row and return it with its generated id loaded.

        Nothing is committed; DatabaseStorage owns the transaction.
        """
        instance = self.model(**kwargs)
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def get_by_id(self, id: int) -> Optional[ModelType]:
        result = await self.session.execute(self.select().where(self.model.id == id))
        return result.scalar_one_or_none()

    async def get_all(self, **filters: Any) -> List[ModelType]:
        """
        Retrieve every record matching exact-value filters, in id order.

        Filters naming a field the model does not have are ignored.

        Args:
            **filters: Field name to value filters (e.g., owner_id=1)

        Returns:
            List of model instances matching the filters
        """
        query = self.select()

        for field, value in filters.items():
            if hasattr(self.model, field):
                query = query.where(getattr(self.model, field) == value)

        return await self.scalars(query.order_by(self.model.id))

    async def get_by_field(self, field_name: str, value: Any) -> Optional[ModelType]:
        """
        Lowest-id row whose field equals value, or None.

        Unlike get_all, an unknown field is a programming error and raises
        AttributeError.
        """
        if not hasattr(self.model, field_name):
            raise AttributeError(f"{self.model.__name__} has no field '{field_name}'")

        result = await self.session.execute(
            self.select()
            .where(getattr(self.model, field_name) == value)
            .order_by(self.model.id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def update(self, id: int, **kwargs: Any) -> Optional[ModelType]:
        """
        Merge a partial into an existing record.

        Keys that are not columns of the model, plus id and created_at,
        are ignored.

        Args:
            id: Primary key of the record to update
            **kwargs: Fields to update

        Returns:
            Updated model instance if found, None otherwise
        """
        instance = await self.get_by_id(id)
        if instance is None:
            return None

        for field, value in kwargs.items():
            if field in ("id", "created_at") or not hasattr(self.model, field):
                continue
            setattr(instance, field, value)

        await self.session.flush()
        return instance

    async def increment(self, id: int, field: str, delta: int) -> None:
        """
        Add delta to an integer column in SQL, flooring the result at zero.

        The arithmetic happens inside the UPDATE so concurrent increments
        of the same row do not lose updates.
        """
        column = getattr(self.model, field)
        await self.session.execute(
            update(self.model)
            .where(self.model.id == id)
            .values({field: case((column + delta < 0, 0), else_=column + delta)})
            .execution_options(synchronize_session=False)
        )
