from socialnet.models.base import Base
from socialnet.models.friend import FriendRequest, FriendshipEdge
from socialnet.models.interest import Interest, InterestItem
from socialnet.models.notification import Notification
from socialnet.models.token import AuthToken, PasswordResetToken
from socialnet.models.user import User

__all__ = [
    "Base",
    "User",
    "AuthToken",
    "PasswordResetToken",
    "Interest",
    "InterestItem",
    "FriendRequest",
    "FriendshipEdge",
    "Notification",
]
