"""
Declarative base and the id/timestamp mixins shared by the entity models.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, DateTime
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Declarative base for the eight entity kinds.

    Instances are also the records handed out by the in-memory storage
    backend, which builds them transiently without a session.
    """

    pass


class PrimaryKeyMixin:
    """Integer primary key shared by every entity kind."""

    id = Column(Integer, primary_key=True, index=True)


class CreatedAtMixin:
    """Creation timestamp for append-only rows (likes, comments, messages)."""

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class TimestampMixin(CreatedAtMixin):
    """
    created_at plus updated_at, for rows that change after creation.

    updated_at is refreshed explicitly by the storage layer on every
    business update, so both backends agree on its value.
    """

    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)
