"""Database models package"""

from app.models.user import User
from app.models.settings import UserSettings
from app.models.conversation import Conversation
from app.models.message import Message

__all__ = [
    "User",
    "UserSettings",
    "Conversation",
    "Message"
]
