from socialnet.crud.user import (
    get_user,
    get_user_by_username,
    get_users,
    get_usernames_by_ids,
    user_exists,
    is_username_available,
    create_user,
    update_username,
    update_password_hash,
    update_user_display_name,
    delete_user,
)
from socialnet.crud import post, filter, group, quiz
from socialnet.crud.friends import FriendRequestStore, FriendshipStore

__all__ = [
    # User operations
    "get_user",
    "get_user_by_username",
    "get_users",
    "get_usernames_by_ids",
    "user_exists",
    "is_username_available",
    "create_user",
    "update_username",
    "update_password_hash",
    "update_user_display_name",
    "delete_user",

    # Concept modules
    "post",
    "filter",
    "group",
    "quiz",

    # Friend stores (written only by the friending engine)
    "FriendRequestStore",
    "FriendshipStore",
]
