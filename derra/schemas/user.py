"""
Pydantic schemas for authentication and user profile endpoints.

WHY: Schemas define the request/response contracts. UserResponse is the
only way a User leaves the API, and it has no password field, so the
stored credential can never be serialized.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class RegisterRequest(BaseModel):
    """Registration payload."""

    username: str = Field(..., min_length=1, max_length=50, description="Unique username")
    email: EmailStr = Field(..., description="Unique email address")
    password: str = Field(..., min_length=6, max_length=100, description="Plain password")
    name: Optional[str] = Field(None, max_length=255, description="Display name")
    avatar: Optional[str] = Field(None, max_length=1024, description="Avatar image URL")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "username": "alice",
                "email": "alice@example.com",
                "password": "secret123",
                "name": "Alice Smith",
            }
        }
    )


class LoginRequest(BaseModel):
    """Login with username and password."""

    username: str = Field(..., min_length=1, description="Username")
    password: str = Field(..., min_length=1, description="Password")


class UserUpdateRequest(BaseModel):
    """
    Profile update.

    Only profile fields are editable; username and password are not.
    """

    name: Optional[str] = Field(None, max_length=255)
    avatar: Optional[str] = Field(None, max_length=1024)
    email: Optional[EmailStr] = None


class UserResponse(BaseModel):
    """Public view of a user (no password hash)."""

    id: int
    username: str
    email: str
    name: Optional[str] = None
    avatar: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    """Returned by register and login: the user plus a bearer token."""

    user: UserResponse
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Always 'bearer'")
    expires_in: int = Field(..., description="Token lifetime in seconds")


class LogoutResponse(BaseModel):
    """Logout response schema."""

    message: str = "Successfully logged out"
