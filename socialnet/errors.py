"""
Error taxonomy for the social backend.

Every error raised by a concept (friending, posting, grouping, ...) carries
raw identifiers only. Turning those identifiers into usernames for display is
the job of the presentation layer (see ``socialnet.services.presentation``),
which calls :meth:`SocialError.format_with` with the resolved names.
"""
from typing import Optional, Sequence


class SocialError(Exception):
    """Base class for errors reported back to the caller as a rejected operation."""

    status_code = 500

    def __init__(self, template: str, *values):
        self.template = template
        self.values = values
        super().__init__(self.format_with(*values))

    @property
    def user_ids(self) -> Sequence[str]:
        """Identifiers in ``values`` that should be shown as usernames."""
        return ()

    def format_with(self, *values) -> str:
        """Render the message, substituting positional ``{n}`` placeholders."""
        return self.template.format(*values)

    def render(self, usernames: Sequence[str]) -> str:
        """Render the message with ``user_ids`` replaced by ``usernames``."""
        return self.format_with(*usernames, *self.values[len(usernames):])


class NotAllowedError(SocialError):
    """The action is understood but not permitted in the current state."""
    status_code = 403


class NotFoundError(SocialError):
    """The thing the caller refers to does not exist."""
    status_code = 404


class StorageUnavailableError(SocialError):
    """The backing store failed; never mapped to a semantic error."""
    status_code = 503

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__("Storage unavailable while trying to {0}.", operation)


class _PairError(SocialError):
    """Mixin for errors about two accounts, both rendered as usernames."""

    @property
    def user_ids(self) -> Sequence[str]:
        return self.values[:2]


# Friending

class SelfRequestError(NotAllowedError):
    def __init__(self, user: str):
        self.user = user
        super().__init__("{0} cannot send a friend request to themselves!", user)

    @property
    def user_ids(self):
        return (self.user,)


class AlreadyFriendsError(_PairError, NotAllowedError):
    def __init__(self, user1: str, user2: str):
        self.user1 = user1
        self.user2 = user2
        super().__init__("{0} and {1} are already friends!", user1, user2)


class DuplicateRequestError(_PairError, NotAllowedError):
    def __init__(self, from_user: str, to_user: str):
        self.from_user = from_user
        self.to_user = to_user
        super().__init__("Friend request between {0} and {1} already exists!", from_user, to_user)


class RequestNotFoundError(_PairError, NotFoundError):
    def __init__(self, from_user: str, to_user: str):
        self.from_user = from_user
        self.to_user = to_user
        super().__init__("Friend request from {0} to {1} does not exist!", from_user, to_user)


class FriendNotFoundError(_PairError, NotFoundError):
    def __init__(self, user1: str, user2: str):
        self.user1 = user1
        self.user2 = user2
        super().__init__("Friendship between {0} and {1} does not exist!", user1, user2)


class FriendingTimeoutError(SocialError):
    """Another operation on the same pair held the lock for too long; nothing was written."""
    status_code = 503

    def __init__(self, user1: str, user2: str, timeout: Optional[float]):
        self.user1 = user1
        self.user2 = user2
        self.timeout = timeout
        super().__init__(
            "Timed out after {2}s waiting for another friend operation between {0} and {1}.",
            user1, user2, timeout,
        )

    @property
    def user_ids(self):
        return (self.user1, self.user2)


# Identity

class UnknownUserError(NotFoundError):
    def __init__(self, user: str):
        self.user = user
        super().__init__("User {0} does not exist!", user)


# Posting

class PostNotFoundError(NotFoundError):
    def __init__(self, post_id: str):
        self.post_id = post_id
        super().__init__("Post {0} does not exist!", post_id)


class PostAuthorNotMatchError(NotAllowedError):
    def __init__(self, author: str, post_id: str):
        self.author = author
        self.post_id = post_id
        super().__init__("{0} is not the author of post {1}!", author, post_id)

    @property
    def user_ids(self):
        return (self.author,)


# Filtering

class FilterAlreadyExistsError(NotAllowedError):
    def __init__(self, name: str):
        self.name = name
        super().__init__('Filter "{0}" already exists!', name)


class FilterNotFoundError(NotFoundError):
    def __init__(self, name: str):
        self.name = name
        super().__init__('Filter "{0}" does not exist!', name)


class FilterAuthorNotMatchError(NotAllowedError):
    def __init__(self, author: str, name: str):
        self.author = author
        self.name = name
        super().__init__('{0} is not the author of filter "{1}"!', author, name)

    @property
    def user_ids(self):
        return (self.author,)


# Grouping

class GroupAlreadyExistsError(NotAllowedError):
    def __init__(self, name: str):
        self.name = name
        super().__init__('Group "{0}" already exists!', name)


class GroupNotFoundError(NotFoundError):
    def __init__(self, group_id: str):
        self.group_id = group_id
        super().__init__("Group {0} does not exist!", group_id)


class GroupAuthorNotMatchError(NotAllowedError):
    def __init__(self, author: str, group_id: str):
        self.author = author
        self.group_id = group_id
        super().__init__("{0} is not the author of group {1}!", author, group_id)

    @property
    def user_ids(self):
        return (self.author,)


class AlreadyGroupMemberError(NotAllowedError):
    def __init__(self, user: str, group_id: str):
        self.user = user
        self.group_id = group_id
        super().__init__("{0} is already a member of group {1}!", user, group_id)

    @property
    def user_ids(self):
        return (self.user,)


class NotGroupMemberError(NotAllowedError):
    def __init__(self, user: str, group_id: str):
        self.user = user
        self.group_id = group_id
        super().__init__("{0} is not a member of group {1}!", user, group_id)

    @property
    def user_ids(self):
        return (self.user,)


# Quizzing

class QuizAlreadyExistsError(NotAllowedError):
    def __init__(self, question: str):
        self.question = question
        super().__init__('Quiz "{0}" already exists!', question)


class QuizNotFoundError(NotFoundError):
    def __init__(self, quiz_id: str):
        self.quiz_id = quiz_id
        super().__init__("Quiz {0} does not exist!", quiz_id)


class QuizAuthorNotMatchError(NotAllowedError):
    def __init__(self, author: str, quiz_id: str):
        self.author = author
        self.quiz_id = quiz_id
        super().__init__("{0} is not the author of quiz {1}!", author, quiz_id)

    @property
    def user_ids(self):
        return (self.author,)
