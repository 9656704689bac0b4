"""
User API endpoints.

Per-user listings are private: only the user themself may read them.
"""

from typing import List

from fastapi import APIRouter, Depends

from derra.core.deps import get_current_user, get_storage
from derra.models import Business, User
from derra.schemas.business import BusinessResponse
from derra.schemas.user import UserResponse, UserUpdateRequest
from derra.services.business_service import BusinessService
from derra.services.user_service import UserService
from derra.storage.interface import Storage

router = APIRouter(prefix="/users", tags=["users"])


@router.patch("/me", response_model=UserResponse)
async def update_me(
    payload: UserUpdateRequest,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> User:
    return await UserService(storage).update_profile(
        current_user, payload.model_dump(exclude_unset=True)
    )


@router.get("/{user_id}/businesses", response_model=List[BusinessResponse])
async def user_businesses(
    user_id: int,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> List[Business]:
    return await BusinessService(storage).owned_by(current_user, user_id)


@router.get("/{user_id}/likes", response_model=List[BusinessResponse])
async def user_likes(
    user_id: int,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> List[Business]:
    """The businesses the user has liked."""
    return await BusinessService(storage).liked_by(current_user, user_id)
