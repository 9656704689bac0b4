"""Category API endpoints."""

from typing import List

from fastapi import APIRouter, Depends, status

from derra.core.deps import get_current_user, get_storage
from derra.models import Category, User
from derra.schemas.category import CategoryCreateRequest, CategoryResponse
from derra.services.category_service import CategoryService
from derra.storage.interface import Storage

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=List[CategoryResponse])
async def list_categories(storage: Storage = Depends(get_storage)) -> List[Category]:
    return await CategoryService(storage).list_categories()


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(category_id: int, storage: Storage = Depends(get_storage)) -> Category:
    return await CategoryService(storage).get_category(category_id)


@router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: CategoryCreateRequest,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> Category:
    return await CategoryService(storage).create_category(
        current_user, name=payload.name, icon=payload.icon
    )
