"""
User Data Access Object.

WHY: Username and email are the two unique lookup keys used by
registration and login; both are exact, case-sensitive matches.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from derra.dao.base import BaseDAO
from derra.models.user import User


class UserDAO(BaseDAO[User]):
    """Data Access Object for User model."""

    def __init__(self, session: AsyncSession):
        super().__init__(User, session)

    async def get_by_username(self, username: str) -> Optional[User]:
        return await self.get_by_field("username", username)

    async def get_by_email(self, email: str) -> Optional[User]:
        return await self.get_by_field("email", email)
