"""
User Service.

WHAT: Registration, credential checks and profile updates.

WHY: The storage layer does not enforce username/email uniqueness for
the in-memory backend, so the service checks before every insert or
email change and reports conflicts as ResourceAlreadyExistsError (400).
"""

import logging
from datetime import timedelta
from typing import Any, Dict, Optional, Tuple

from derra.core.auth import create_access_token, hash_password, verify_password
from derra.core.config import settings
from derra.core.exceptions import (
    AuthenticationError,
    ResourceAlreadyExistsError,
    ResourceNotFoundError,
)
from derra.models import User
from derra.services.access import require_actor
from derra.storage.interface import Storage

logger = logging.getLogger(__name__)


class UserService:
    """Account lifecycle over any storage backend."""

    def __init__(self, storage: Storage):
        self.storage = storage

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        name: Optional[str] = None,
        avatar: Optional[str] = None,
    ) -> User:
        """
        Create an account.

        Raises:
            ResourceAlreadyExistsError: If the username or email is taken
        """
        if await self.storage.get_user_by_username(username):
            raise ResourceAlreadyExistsError("Username already exists")
        if await self.storage.get_user_by_email(email):
            raise ResourceAlreadyExistsError("Email already exists")

        user = await self.storage.create_user(
            username=username,
            email=email,
            password=hash_password(password),
            name=name,
            avatar=avatar,
        )
        logger.info("Registered user %s (%s)", user.id, user.username)
        return user

    async def authenticate(self, username: str, password: str) -> User:
        """
        Check a username/password pair.

        The error does not say which half was wrong.

        Raises:
            AuthenticationError: If the credentials do not match a user
        """
        user = await self.storage.get_user_by_username(username)
        if user is None or not verify_password(password, user.password):
            raise AuthenticationError("Invalid credentials")
        return user

    def issue_token(self, user: User) -> Tuple[str, int]:
        """
        Returns:
            (access token, lifetime in seconds)
        """
        lifetime = timedelta(minutes=settings.JWT_EXPIRATION_MINUTES)
        token = create_access_token({"user_id": user.id}, expires_delta=lifetime)
        return token, int(lifetime.total_seconds())

    async def update_profile(self, actor: Optional[User], changes: Dict[str, Any]) -> User:
        """
        Apply name/avatar/email changes to the actor's own profile.

        Raises:
            AuthenticationError: If nobody is logged in
            ResourceAlreadyExistsError: If the new email belongs to another user
        """
        actor = require_actor(actor)

        # Email is required; a null there means "unchanged"
        changes = {k: v for k, v in changes.items() if v is not None or k != "email"}

        email = changes.get("email")
        if email is not None and email != actor.email:
            existing = await self.storage.get_user_by_email(email)
            if existing is not None and existing.id != actor.id:
                raise ResourceAlreadyExistsError("Email already exists")

        allowed = {k: v for k, v in changes.items() if k in ("name", "avatar", "email")}
        user = await self.storage.update_user(actor.id, **allowed)
        if user is None:
            raise ResourceNotFoundError("User not found", user_id=actor.id)
        return user
