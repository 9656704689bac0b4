"""
Authentication API endpoints.

1. Register - Create an account and return a JWT token
2. Login - Authenticate with username/password and return a JWT token
3. Logout - Blacklist the token to prevent further use
4. Me - Get the current user

Generic error messages on login prevent user enumeration.
"""

import logging

from fastapi import APIRouter, Depends, status

from derra.core.auth import blacklist_token
from derra.core.deps import get_bearer_token, get_current_user, get_storage
from derra.models import User
from derra.schemas.user import (
    AuthResponse,
    LoginRequest,
    LogoutResponse,
    RegisterRequest,
    UserResponse,
)
from derra.services.user_service import UserService
from derra.storage.interface import Storage

logger = logging.getLogger(__name__)

router = APIRouter(tags=["authentication"])


def _auth_response(service: UserService, user: User) -> AuthResponse:
    token, expires_in = service.issue_token(user)
    return AuthResponse(
        user=UserResponse.model_validate(user),
        access_token=token,
        expires_in=expires_in,
    )


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register user",
)
async def register(
    payload: RegisterRequest,
    storage: Storage = Depends(get_storage),
) -> AuthResponse:
    """
    Create an account and log it in.

    Raises:
        ResourceAlreadyExistsError (400): If the username or email is taken
    """
    service = UserService(storage)
    user = await service.register(
        username=payload.username,
        email=payload.email,
        password=payload.password,
        name=payload.name,
        avatar=payload.avatar,
    )
    return _auth_response(service, user)


@router.post("/login", response_model=AuthResponse, summary="Login user")
async def login(
    credentials: LoginRequest,
    storage: Storage = Depends(get_storage),
) -> AuthResponse:
    """
    Raises:
        AuthenticationError (401): If credentials are invalid
    """
    service = UserService(storage)
    user = await service.authenticate(credentials.username, credentials.password)
    logger.info("User %s logged in", user.id)
    return _auth_response(service, user)


@router.post("/logout", response_model=LogoutResponse, summary="Logout user")
async def logout(
    token: str = Depends(get_bearer_token),
    current_user: User = Depends(get_current_user),
) -> LogoutResponse:
    """Revoke the presented token until it would have expired anyway."""
    await blacklist_token(token, current_user.id)
    return LogoutResponse()


@router.get("/me", response_model=UserResponse, summary="Get current user")
async def me(current_user: User = Depends(get_current_user)) -> User:
    return current_user
