"""
Storage access for friend requests and friendships.

These stores only read and stage writes on the session they are handed. They
never decide whether a write is allowed: the friending engine checks every
precondition and commits, holding the per-pair lock around both.
"""
import functools
from typing import Callable, List, Optional, TypeVar

from sqlalchemy import and_, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from socialnet.errors import StorageUnavailableError
from socialnet.models.friend_request import FriendRequest, FriendRequestStatus
from socialnet.models.friendship import Friendship
from socialnet.utils.logger import get_logger

logger = get_logger(__name__)

F = TypeVar("F", bound=Callable)

PENDING = FriendRequestStatus.PENDING.value


def ordered_pair(user_a: str, user_b: str) -> tuple[str, str]:
    """Canonical (smaller, larger) ordering used for edges and pair locks."""
    user1_id, user2_id = sorted([user_a, user_b])
    return user1_id, user2_id


def storage_guard(operation: str) -> Callable[[F], F]:
    """
    Translate SQLAlchemy failures into ``StorageUnavailableError``.

    The session is rolled back so no half-staged write survives the failure.
    """
    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(self, db: Session, *args, **kwargs):
            try:
                return func(self, db, *args, **kwargs)
            except SQLAlchemyError as e:
                logger.error(f"Store failure during {operation}: {e}")
                try:
                    db.rollback()
                except SQLAlchemyError as rollback_error:
                    logger.error(f"Error during rollback: {rollback_error}")
                raise StorageUnavailableError(operation) from e
        return wrapper  # type: ignore[return-value]
    return decorator


class _Store:
    """Shared commit handling for the friend stores."""

    @storage_guard("commit friend changes")
    def commit(self, db: Session, *instances) -> None:
        """Commit staged writes and reload server-side defaults on ``instances``."""
        db.commit()
        for instance in instances:
            db.refresh(instance)


class FriendRequestStore(_Store):
    """Directed friend requests (requester -> recipient) with a lifecycle status."""

    @storage_guard("look up a friend request")
    def get_pending(self, db: Session, requester_id: str, recipient_id: str) -> Optional[FriendRequest]:
        """The pending request for the exact ordered pair, if any."""
        return db.query(FriendRequest).filter(
            and_(
                FriendRequest.requester_id == requester_id,
                FriendRequest.recipient_id == recipient_id,
                FriendRequest.status == PENDING
            )
        ).first()

    @storage_guard("look up a friend request")
    def get_pending_between(self, db: Session, user_a: str, user_b: str) -> Optional[FriendRequest]:
        """A pending request for the unordered pair, in either direction."""
        return db.query(FriendRequest).filter(
            and_(
                or_(
                    and_(FriendRequest.requester_id == user_a, FriendRequest.recipient_id == user_b),
                    and_(FriendRequest.requester_id == user_b, FriendRequest.recipient_id == user_a)
                ),
                FriendRequest.status == PENDING
            )
        ).first()

    @storage_guard("create a friend request")
    def add(self, db: Session, requester_id: str, recipient_id: str) -> FriendRequest:
        friend_request = FriendRequest(
            requester_id=requester_id,
            recipient_id=recipient_id,
            status=PENDING
        )
        db.add(friend_request)
        db.flush()
        return friend_request

    @storage_guard("update a friend request")
    def set_status(self, db: Session, friend_request: FriendRequest, status: FriendRequestStatus) -> FriendRequest:
        friend_request.status = status.value
        db.flush()
        return friend_request

    @storage_guard("delete a friend request")
    def delete(self, db: Session, friend_request: FriendRequest) -> None:
        db.delete(friend_request)
        db.flush()

    @storage_guard("delete friend requests")
    def delete_between(self, db: Session, user_a: str, user_b: str) -> int:
        """Delete every request row for the unordered pair, whatever its status."""
        deleted = db.query(FriendRequest).filter(
            or_(
                and_(FriendRequest.requester_id == user_a, FriendRequest.recipient_id == user_b),
                and_(FriendRequest.requester_id == user_b, FriendRequest.recipient_id == user_a)
            )
        ).delete(synchronize_session=False)
        db.flush()
        return deleted

    @storage_guard("list friend requests")
    def list_pending(self, db: Session, user_id: str) -> List[FriendRequest]:
        """Pending requests sent or received by ``user_id``, newest first."""
        return db.query(FriendRequest).filter(
            and_(
                or_(
                    FriendRequest.requester_id == user_id,
                    FriendRequest.recipient_id == user_id
                ),
                FriendRequest.status == PENDING
            )
        ).order_by(FriendRequest.created_at.desc()).all()

    @storage_guard("list friend requests")
    def list_received(self, db: Session, user_id: str) -> List[FriendRequest]:
        return db.query(FriendRequest).filter(
            and_(
                FriendRequest.recipient_id == user_id,
                FriendRequest.status == PENDING
            )
        ).order_by(FriendRequest.created_at.desc()).all()

    @storage_guard("list friend requests")
    def list_sent(self, db: Session, user_id: str) -> List[FriendRequest]:
        return db.query(FriendRequest).filter(
            and_(
                FriendRequest.requester_id == user_id,
                FriendRequest.status == PENDING
            )
        ).order_by(FriendRequest.created_at.desc()).all()

    @storage_guard("list friend requests")
    def counterparts(self, db: Session, user_id: str) -> set[str]:
        """Every user that shares any request row (any status) with ``user_id``."""
        rows = db.query(FriendRequest.requester_id, FriendRequest.recipient_id).filter(
            or_(
                FriendRequest.requester_id == user_id,
                FriendRequest.recipient_id == user_id
            )
        ).all()
        return {r.recipient_id if r.requester_id == user_id else r.requester_id for r in rows}

    @storage_guard("list friend requests")
    def pending_with(self, db: Session, user_id: str, other_ids: List[str]) -> List[FriendRequest]:
        """Pending requests between ``user_id`` and any of ``other_ids``, both directions."""
        return db.query(FriendRequest).filter(
            and_(
                FriendRequest.status == PENDING,
                or_(
                    and_(FriendRequest.requester_id == user_id, FriendRequest.recipient_id.in_(other_ids)),
                    and_(FriendRequest.recipient_id == user_id, FriendRequest.requester_id.in_(other_ids))
                )
            )
        ).all()


class FriendshipStore(_Store):
    """Undirected friendship edges; lookups are independent of argument order."""

    @storage_guard("look up a friendship")
    def get(self, db: Session, user_a: str, user_b: str) -> Optional[Friendship]:
        user1_id, user2_id = ordered_pair(user_a, user_b)
        return db.query(Friendship).filter(
            and_(
                Friendship.user1_id == user1_id,
                Friendship.user2_id == user2_id
            )
        ).first()

    @storage_guard("create a friendship")
    def add(self, db: Session, user_a: str, user_b: str) -> Friendship:
        user1_id, user2_id = ordered_pair(user_a, user_b)
        friendship = Friendship(user1_id=user1_id, user2_id=user2_id)
        db.add(friendship)
        db.flush()
        return friendship

    @storage_guard("delete a friendship")
    def delete(self, db: Session, friendship: Friendship) -> None:
        db.delete(friendship)
        db.flush()

    @storage_guard("list friends")
    def friend_ids(self, db: Session, user_id: str) -> List[str]:
        """Every identifier paired with ``user_id``, most recent friendship first."""
        friendships = db.query(Friendship).filter(
            or_(
                Friendship.user1_id == user_id,
                Friendship.user2_id == user_id
            )
        ).order_by(Friendship.created_at.desc()).all()
        return [friendship.other(user_id) for friendship in friendships]

    @storage_guard("list friends")
    def friends_among(self, db: Session, user_id: str, other_ids: List[str]) -> set[str]:
        """The subset of ``other_ids`` that are friends with ``user_id``."""
        friendships = db.query(Friendship).filter(
            or_(
                and_(Friendship.user1_id == user_id, Friendship.user2_id.in_(other_ids)),
                and_(Friendship.user2_id == user_id, Friendship.user1_id.in_(other_ids))
            )
        ).all()
        return {friendship.other(user_id) for friendship in friendships}
