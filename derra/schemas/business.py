"""
Pydantic schemas for businesses, likes and comments.

WHAT: Request models accept only owner-editable fields. The owner id,
the derived counters (likes, comments, rating) and the payment fields
are never client-supplied; the API forces or derives them.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from derra.models.business import BusinessStatus


class BusinessCreateRequest(BaseModel):
    """
    Request schema for listing a new business.

    WHY: Unknown fields (owner_id, like_count, is_paid ...) are ignored
    rather than rejected, so a client echoing a full record back does not
    fail, but it cannot set them either.
    """

    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    category_id: int = Field(..., description="Category ID")
    address: Optional[str] = Field(None, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    zip_code: Optional[str] = Field(None, max_length=20)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=255)
    website: Optional[str] = Field(None, max_length=1024)
    image: Optional[str] = Field(None, max_length=1024)


class BusinessUpdateRequest(BaseModel):
    """
    Partial update of a business.

    Only fields present in the request body are applied. Setting
    is_active back to true relists a deleted business.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1)
    category_id: Optional[int] = None
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, min_length=1, max_length=100)
    state: Optional[str] = Field(None, min_length=1, max_length=100)
    zip_code: Optional[str] = Field(None, max_length=20)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=255)
    website: Optional[str] = Field(None, max_length=1024)
    image: Optional[str] = Field(None, max_length=1024)
    is_active: Optional[bool] = None


class BusinessResponse(BaseModel):
    """Full business record as served to clients."""

    id: int
    name: str
    description: str
    owner_id: int
    category_id: int

    address: Optional[str] = None
    city: str
    state: str
    zip_code: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    image: Optional[str] = None

    like_count: int
    comment_count: int
    rating: int

    is_verified: bool
    is_active: bool
    is_paid: bool
    status: BusinessStatus

    subscription_id: Optional[str] = None
    subscription_expires_at: Optional[datetime] = None

    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LikeResponse(BaseModel):
    id: int
    business_id: int
    user_id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CommentCreateRequest(BaseModel):
    """A review with an optional 1..5 star rating."""

    content: str = Field(..., min_length=1, max_length=5000)
    rating: Optional[int] = Field(None, ge=1, le=5)


class CommentResponse(BaseModel):
    id: int
    business_id: int
    user_id: int
    content: str
    rating: Optional[int] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
