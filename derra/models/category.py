"""Category model."""

from sqlalchemy import Column, Integer, String

from derra.models.base import Base, PrimaryKeyMixin


class Category(Base, PrimaryKeyMixin):
    """
    Business category.

    business_count is a cache of the number of active businesses in the
    category. Only the storage layer mutates it.
    """

    __tablename__ = "categories"

    name = Column(String(100), nullable=False)
    icon = Column(String(100), nullable=False)
    business_count = Column(Integer, default=0, nullable=False)

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name={self.name}, business_count={self.business_count})>"
