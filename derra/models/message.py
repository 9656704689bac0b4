"""
Message and notification models.

WHAT: Direct messages between a customer and a business owner, scoped to
one business, and the per-user notifications they produce.

WHY: Every stored message creates exactly one notification for its
receiver, so the inbox badge can be computed from notifications alone.
"""

from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, String, Text

from derra.models.base import Base, CreatedAtMixin, PrimaryKeyMixin


class NotificationType:
    """Known notification type values."""

    MESSAGE = "message"


NEW_MESSAGE_NOTIFICATION = "You have a new message regarding a business"


class Message(Base, PrimaryKeyMixin, CreatedAtMixin):
    """A message about a business."""

    __tablename__ = "messages"

    sender_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    receiver_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    business_id = Column(Integer, ForeignKey("businesses.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)

    __table_args__ = (
        Index("ix_messages_conversation", "business_id", "sender_id", "receiver_id"),
    )

    def __repr__(self) -> str:
        return f"<Message(id={self.id}, sender_id={self.sender_id}, receiver_id={self.receiver_id})>"


class Notification(Base, PrimaryKeyMixin, CreatedAtMixin):
    """A notification addressed to one user."""

    __tablename__ = "notifications"

    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String(50), nullable=False)
    content = Column(Text, nullable=False)
    # Id of the triggering entity (e.g. the message id)
    related_id = Column(Integer, nullable=True)
    is_read = Column(Boolean, default=False, nullable=False)

    __table_args__ = (
        Index("ix_notifications_user_unread", "user_id", "is_read"),
    )
