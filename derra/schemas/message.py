"""
Pydantic schemas for messages and notifications.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class MessageCreateRequest(BaseModel):
    """
    Request schema for sending a message.

    The sender is always the authenticated user.
    """

    receiver_id: int = Field(..., description="Recipient user ID")
    business_id: int = Field(..., description="Business the conversation is about")
    content: str = Field(..., min_length=1, max_length=5000, description="Message content")


class MessageResponse(BaseModel):
    id: int
    sender_id: int
    receiver_id: int
    business_id: int
    content: str
    is_read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class NotificationResponse(BaseModel):
    id: int
    user_id: int
    type: str
    content: str
    related_id: Optional[int] = None
    is_read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UnreadCountResponse(BaseModel):
    count: int


class SuccessResponse(BaseModel):
    success: bool = True
