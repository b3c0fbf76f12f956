from socialnet.database import Base
from socialnet.models.user import User
from socialnet.models.friend_request import FriendRequest, FriendRequestStatus
from socialnet.models.friendship import Friendship
from socialnet.models.post import Post
from socialnet.models.filter import Filter
from socialnet.models.group import Group, GroupMembership
from socialnet.models.quiz import Quiz

__all__ = [
    "Base", "User", "FriendRequest", "FriendRequestStatus", "Friendship",
    "Post", "Filter", "Group", "GroupMembership", "Quiz"
]
