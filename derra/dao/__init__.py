"""Data Access Objects used by the database storage backend."""

from derra.dao.base import BaseDAO
from derra.dao.business import BusinessDAO
from derra.dao.category import CategoryDAO
from derra.dao.engagement import BusinessCommentDAO, BusinessLikeDAO
from derra.dao.message import MessageDAO, NotificationDAO
from derra.dao.subscription import SubscriptionDAO
from derra.dao.user import UserDAO

__all__ = [
    "BaseDAO",
    "BusinessDAO",
    "BusinessCommentDAO",
    "BusinessLikeDAO",
    "CategoryDAO",
    "MessageDAO",
    "NotificationDAO",
    "SubscriptionDAO",
    "UserDAO",
]
