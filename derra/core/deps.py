"""
FastAPI dependencies for storage access and authentication.

WHY: Route handlers receive the request's Storage and actor through
dependencies, so tests can override either one and every route resolves
them the same way.
"""

from typing import AsyncIterator, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from derra.core.auth import is_token_blacklisted, verify_token
from derra.core.exceptions import AuthenticationError
from derra.models import User
from derra.storage.interface import Storage

# HTTP Bearer token security scheme ("Authorization: Bearer <token>").
# auto_error is off so a missing header becomes our own 401 body.
security = HTTPBearer(auto_error=False)


async def get_storage(request: Request) -> AsyncIterator[Storage]:
    """
    Yield the Storage for this request.

    The backend was chosen once in create_app (app.state.storage_provider).
    """
    async with request.app.state.storage_provider() as storage:
        yield storage


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    if credentials is None:
        raise AuthenticationError()
    return credentials.credentials


async def get_current_user(
    token: str = Depends(get_bearer_token),
    storage: Storage = Depends(get_storage),
) -> User:
    """
    Get current authenticated user from JWT token.

    1. Verifies token signature and expiration
    2. Rejects tokens revoked by logout
    3. Loads the user through the storage backend

    Raises:
        AuthenticationError: If token is invalid, expired, revoked or the user is gone
    """
    payload = verify_token(token)

    if await is_token_blacklisted(token):
        raise AuthenticationError(
            message="Token has been revoked",
            reason="logged_out",
        )

    user_id = payload.get("user_id")
    if not user_id:
        raise AuthenticationError(message="Invalid token: missing user_id")

    user = await storage.get_user(user_id)
    if user is None:
        # User might have been removed after the token was issued
        raise AuthenticationError(message="User not found", user_id=user_id)

    return user

