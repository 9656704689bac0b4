"""
User model.

WHY: Users own businesses, like and review them, and exchange messages.
The stored password is always a hash and is never serialized to clients.
"""

from sqlalchemy import Column, String

from derra.models.base import Base, CreatedAtMixin, PrimaryKeyMixin


class User(Base, PrimaryKeyMixin, CreatedAtMixin):
    """A registered account."""

    __tablename__ = "users"

    username = Column(String(100), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)

    # Hashed credential (bcrypt), never returned by the API
    password = Column(String(255), nullable=False)

    # Profile fields
    name = Column(String(255), nullable=True)
    avatar = Column(String(1024), nullable=True)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username})>"
