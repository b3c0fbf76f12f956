from socialnet.schemas.user import (
    UserCreate, LoginRequest, UsernameUpdate, PasswordUpdate, UserResponse, CurrentUser, MessageResponse
)
from socialnet.schemas.friends import (
    FriendRequestResponse, FriendResponse, FriendsListResponse, FriendRequestsListResponse,
    FriendRequestStatusResponse, RelationshipStatusResponse
)
from socialnet.schemas.post import PostOptions, PostCreate, PostUpdate, PostResponse, PostCreatedResponse
from socialnet.schemas.filter import FilterCreate, FilterResponse
from socialnet.schemas.group import GroupCreate, GroupMemberAdd, GroupResponse, GroupCreatedResponse
from socialnet.schemas.quiz import QuizCreate, QuizUpdate, QuizResponse, QuizSavedResponse

__all__ = [
    "UserCreate", "LoginRequest", "UsernameUpdate", "PasswordUpdate", "UserResponse", "CurrentUser",
    "MessageResponse",
    "FriendRequestResponse", "FriendResponse", "FriendsListResponse", "FriendRequestsListResponse",
    "FriendRequestStatusResponse", "RelationshipStatusResponse",
    "PostOptions", "PostCreate", "PostUpdate", "PostResponse", "PostCreatedResponse",
    "FilterCreate", "FilterResponse",
    "GroupCreate", "GroupMemberAdd", "GroupResponse", "GroupCreatedResponse",
    "QuizCreate", "QuizUpdate", "QuizResponse", "QuizSavedResponse",
]
