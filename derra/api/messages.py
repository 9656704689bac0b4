"""Message API endpoints."""

from typing import List

from fastapi import APIRouter, Depends, status

from derra.core.deps import get_current_user, get_storage
from derra.models import Message, User
from derra.schemas.message import MessageCreateRequest, MessageResponse
from derra.services.message_service import MessageService
from derra.storage.interface import Storage

router = APIRouter(tags=["messages"])


@router.get("/messages", response_model=List[MessageResponse])
async def my_messages(
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> List[Message]:
    return await MessageService(storage).inbox(current_user)


@router.get("/businesses/{business_id}/messages", response_model=List[MessageResponse])
async def business_messages(
    business_id: int,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> List[Message]:
    return await MessageService(storage).for_business(current_user, business_id)


@router.get("/messages/{business_id}/{other_user_id}", response_model=List[MessageResponse])
async def conversation(
    business_id: int,
    other_user_id: int,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> List[Message]:
    """Conversation with another user about a business, oldest first."""
    return await MessageService(storage).conversation(current_user, business_id, other_user_id)


@router.post("/messages", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    payload: MessageCreateRequest,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> Message:
    return await MessageService(storage).send(
        current_user,
        receiver_id=payload.receiver_id,
        business_id=payload.business_id,
        content=payload.content,
    )


@router.patch("/messages/{message_id}/read", response_model=MessageResponse)
async def mark_message_read(
    message_id: int,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> Message:
    return await MessageService(storage).mark_read(current_user, message_id)
