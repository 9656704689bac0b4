"""Notification API endpoints."""

from typing import List

from fastapi import APIRouter, Depends

from derra.core.deps import get_current_user, get_storage
from derra.models import Notification, User
from derra.schemas.message import NotificationResponse, SuccessResponse, UnreadCountResponse
from derra.services.notification_service import NotificationService
from derra.storage.interface import Storage

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=List[NotificationResponse])
async def list_notifications(
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> List[Notification]:
    """Newest first."""
    return await NotificationService(storage).list_for(current_user)


@router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> UnreadCountResponse:
    count = await NotificationService(storage).unread_count(current_user)
    return UnreadCountResponse(count=count)


@router.patch("/mark-all-read", response_model=SuccessResponse)
async def mark_all_read(
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> SuccessResponse:
    success = await NotificationService(storage).mark_all_read(current_user)
    return SuccessResponse(success=success)


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
async def mark_read(
    notification_id: int,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> Notification:
    return await NotificationService(storage).mark_read(current_user, notification_id)
