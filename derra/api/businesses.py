"""
Business API endpoints.

WHAT: Listing queries, owner CRUD, likes and comments.

Fixed paths (/featured, /search ...) are declared before /{business_id}
so they are not captured by the id route.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from derra.core.deps import get_current_user, get_storage
from derra.models import Business, BusinessComment, BusinessLike, User
from derra.schemas.business import (
    BusinessCreateRequest,
    BusinessResponse,
    BusinessUpdateRequest,
    CommentCreateRequest,
    CommentResponse,
    LikeResponse,
)
from derra.services.business_service import BusinessService
from derra.services.engagement_service import EngagementService
from derra.storage.interface import Storage

router = APIRouter(prefix="/businesses", tags=["businesses"])

LIMIT = Query(4, ge=1, le=100, description="Maximum number of businesses")


# ============================================================================
# Listings
# ============================================================================


@router.get("", response_model=List[BusinessResponse])
async def list_businesses(storage: Storage = Depends(get_storage)) -> List[Business]:
    """All active businesses."""
    return await BusinessService(storage).list_active()


@router.get("/featured", response_model=List[BusinessResponse])
async def featured_businesses(
    limit: int = LIMIT, storage: Storage = Depends(get_storage)
) -> List[Business]:
    """Paid, active businesses in no particular order."""
    return await BusinessService(storage).featured(limit)


@router.get("/trending", response_model=List[BusinessResponse])
async def trending_businesses(
    limit: int = LIMIT, storage: Storage = Depends(get_storage)
) -> List[Business]:
    return await BusinessService(storage).trending(limit)


@router.get("/recent", response_model=List[BusinessResponse])
async def recent_businesses(
    limit: int = LIMIT, storage: Storage = Depends(get_storage)
) -> List[Business]:
    return await BusinessService(storage).recent(limit)


@router.get("/search", response_model=List[BusinessResponse])
async def search_businesses(
    q: Optional[str] = Query(None, description="Text to look for"),
    storage: Storage = Depends(get_storage),
) -> List[Business]:
    return await BusinessService(storage).search(q)


@router.get("/category/{category_id}", response_model=List[BusinessResponse])
async def businesses_by_category(
    category_id: int, storage: Storage = Depends(get_storage)
) -> List[Business]:
    return await BusinessService(storage).by_category(category_id)


# ============================================================================
# CRUD
# ============================================================================


@router.get("/{business_id}", response_model=BusinessResponse)
async def get_business(business_id: int, storage: Storage = Depends(get_storage)) -> Business:
    return await BusinessService(storage).get(business_id)


@router.post("", response_model=BusinessResponse, status_code=status.HTTP_201_CREATED)
async def create_business(
    payload: BusinessCreateRequest,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> Business:
    """List a new business owned by the current user."""
    return await BusinessService(storage).create(current_user, payload.model_dump())


@router.put("/{business_id}", response_model=BusinessResponse)
async def update_business(
    business_id: int,
    payload: BusinessUpdateRequest,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> Business:
    return await BusinessService(storage).update(
        current_user, business_id, payload.model_dump(exclude_unset=True)
    )


@router.delete("/{business_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_business(
    business_id: int,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> Response:
    await BusinessService(storage).delete(current_user, business_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================================================================
# Likes
# ============================================================================


@router.post(
    "/{business_id}/like", response_model=LikeResponse, status_code=status.HTTP_201_CREATED
)
async def like_business(
    business_id: int,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> BusinessLike:
    return await EngagementService(storage).like(current_user, business_id)


@router.delete("/{business_id}/like", status_code=status.HTTP_204_NO_CONTENT)
async def unlike_business(
    business_id: int,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> Response:
    await EngagementService(storage).unlike(current_user, business_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{business_id}/likes", response_model=List[LikeResponse])
async def business_likes(
    business_id: int, storage: Storage = Depends(get_storage)
) -> List[BusinessLike]:
    return await EngagementService(storage).likes(business_id)


# ============================================================================
# Comments
# ============================================================================


@router.get("/{business_id}/comments", response_model=List[CommentResponse])
async def business_comments(
    business_id: int, storage: Storage = Depends(get_storage)
) -> List[BusinessComment]:
    """Comments, newest first."""
    return await EngagementService(storage).comments(business_id)


@router.post(
    "/{business_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    business_id: int,
    payload: CommentCreateRequest,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> BusinessComment:
    return await EngagementService(storage).add_comment(
        current_user, business_id, content=payload.content, rating=payload.rating
    )
