"""Pydantic schemas for categories."""

from pydantic import BaseModel, ConfigDict, Field


class CategoryCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    icon: str = Field(..., min_length=1, max_length=100, description="Icon class name")


class CategoryResponse(BaseModel):
    """
    A category with its count of active businesses.

    business_count is maintained by the storage layer and cannot be set
    through the API.
    """

    id: int
    name: str
    icon: str
    business_count: int

    model_config = ConfigDict(from_attributes=True)
