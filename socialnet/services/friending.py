"""
Friending engine: the only writer of friend requests and friendships.

Requests are directed (requester -> recipient); friendships are undirected.
Because the store offers no multi-row transaction we can rely on across
separate calls, every mutating operation checks its preconditions and writes
while holding a lock scoped to the unordered pair of users involved. Two
operations on different pairs never wait for each other.

Waiting for a pair lock happens on the event loop, so a queue of callers on a
busy pair occupies no threadpool workers. Once the lock is held, the checks,
write and commit run in one threadpool call. That call is not abandoned when
the caller is cancelled, so the lock is never released while a write is still
in flight.
"""
import asyncio
from contextlib import AsyncExitStack, asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Dict, Iterable, List, Optional, Set

from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from socialnet.crud.friends import FriendRequestStore, FriendshipStore, ordered_pair
from socialnet.errors import (
    AlreadyFriendsError,
    DuplicateRequestError,
    FriendNotFoundError,
    FriendingTimeoutError,
    RequestNotFoundError,
    SelfRequestError,
    UnknownUserError,
)
from socialnet.models.friend_request import FriendRequest, FriendRequestStatus
from socialnet.services.identity import IdentityResolver
from socialnet.utils.logger import get_logger

logger = get_logger(__name__)

FRIEND = "friend"
REQUEST_SENT = "request_sent"
REQUEST_RECEIVED = "request_received"
NONE = "none"


@dataclass
class _PairLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    holders: int = 0


class PairLocks:
    """
    Registry of per-pair locks.

    Entries are reference counted and dropped as soon as nobody holds or waits
    for them, so the registry only ever contains pairs with in-flight writes.
    Must only be used from the event loop.
    """

    def __init__(self):
        self._locks: Dict[tuple[str, str], _PairLock] = {}

    @asynccontextmanager
    async def hold(self, user_a: str, user_b: str, timeout: Optional[float] = None) -> AsyncIterator[None]:
        key = ordered_pair(user_a, user_b)
        entry = self._locks.setdefault(key, _PairLock())
        entry.holders += 1
        try:
            try:
                await asyncio.wait_for(entry.lock.acquire(), timeout=timeout)
            except asyncio.TimeoutError:
                raise FriendingTimeoutError(key[0], key[1], timeout)
            try:
                yield
            finally:
                entry.lock.release()
        finally:
            entry.holders -= 1
            if entry.holders == 0:
                del self._locks[key]

    def __len__(self) -> int:
        return len(self._locks)


class FriendingEngine:
    """
    Send, accept, reject, cancel and remove operations over the friend graph.

    Args:
        identity: Resolver used to confirm both endpoints exist before sending.
        lock_timeout: Default seconds to wait for another operation on the same
            pair. ``None`` waits indefinitely.
    """

    def __init__(
        self,
        identity: IdentityResolver,
        lock_timeout: Optional[float] = None,
        requests: Optional[FriendRequestStore] = None,
        friendships: Optional[FriendshipStore] = None,
    ):
        self.identity = identity
        self.lock_timeout = lock_timeout
        self.requests = requests or FriendRequestStore()
        self.friendships = friendships or FriendshipStore()
        self.locks = PairLocks()

    def _timeout(self, timeout: Optional[float]) -> Optional[float]:
        return self.lock_timeout if timeout is None else timeout

    # Mutations

    async def send_request(self, db: Session, from_id: str, to_id: str, timeout: Optional[float] = None) -> FriendRequest:
        if from_id == to_id:
            raise SelfRequestError(from_id)
        await run_in_threadpool(self._check_users_exist, db, from_id, to_id)

        async with self.locks.hold(from_id, to_id, self._timeout(timeout)):
            friend_request = await run_in_threadpool(self._send_request, db, from_id, to_id)

        logger.info(f"Friend request sent: {from_id} -> {to_id}")
        return friend_request

    def _check_users_exist(self, db: Session, *user_ids: str) -> None:
        for user_id in user_ids:
            if not self.identity.exists(db, user_id):
                raise UnknownUserError(user_id)

    def _send_request(self, db: Session, from_id: str, to_id: str) -> FriendRequest:
        if self.friendships.get(db, from_id, to_id) is not None:
            raise AlreadyFriendsError(from_id, to_id)
        if self.requests.get_pending_between(db, from_id, to_id) is not None:
            raise DuplicateRequestError(from_id, to_id)

        friend_request = self.requests.add(db, from_id, to_id)
        self.requests.commit(db, friend_request)
        return friend_request

    async def accept_request(self, db: Session, from_id: str, to_id: str, timeout: Optional[float] = None) -> FriendRequest:
        """Accept the pending request ``from_id -> to_id`` on behalf of its recipient."""
        async with self.locks.hold(from_id, to_id, self._timeout(timeout)):
            friend_request = await run_in_threadpool(self._accept_request, db, from_id, to_id)

        logger.info(f"Friend request accepted: {from_id} -> {to_id}")
        return friend_request

    def _accept_request(self, db: Session, from_id: str, to_id: str) -> FriendRequest:
        friend_request = self.requests.get_pending(db, from_id, to_id)
        if friend_request is None:
            raise RequestNotFoundError(from_id, to_id)

        self.requests.set_status(db, friend_request, FriendRequestStatus.ACCEPTED)
        # Status change and edge land in the same commit
        if self.friendships.get(db, from_id, to_id) is None:
            self.friendships.add(db, from_id, to_id)
        self.requests.commit(db, friend_request)
        return friend_request

    async def reject_request(self, db: Session, from_id: str, to_id: str, timeout: Optional[float] = None) -> FriendRequest:
        async with self.locks.hold(from_id, to_id, self._timeout(timeout)):
            friend_request = await run_in_threadpool(self._reject_request, db, from_id, to_id)

        logger.info(f"Friend request rejected: {from_id} -> {to_id}")
        return friend_request

    def _reject_request(self, db: Session, from_id: str, to_id: str) -> FriendRequest:
        friend_request = self.requests.get_pending(db, from_id, to_id)
        if friend_request is None:
            raise RequestNotFoundError(from_id, to_id)

        self.requests.set_status(db, friend_request, FriendRequestStatus.REJECTED)
        self.requests.commit(db, friend_request)
        return friend_request

    async def remove_request(self, db: Session, requester_id: str, to_id: str, timeout: Optional[float] = None) -> None:
        """Cancel a pending request. The row is deleted, leaving no trace."""
        async with self.locks.hold(requester_id, to_id, self._timeout(timeout)):
            await run_in_threadpool(self._remove_request, db, requester_id, to_id)

        logger.info(f"Friend request cancelled: {requester_id} -> {to_id}")

    def _remove_request(self, db: Session, requester_id: str, to_id: str) -> None:
        friend_request = self.requests.get_pending(db, requester_id, to_id)
        if friend_request is None:
            raise RequestNotFoundError(requester_id, to_id)

        self.requests.delete(db, friend_request)
        self.requests.commit(db)

    async def remove_friend(self, db: Session, user_a: str, user_b: str, timeout: Optional[float] = None) -> None:
        async with self.locks.hold(user_a, user_b, self._timeout(timeout)):
            await run_in_threadpool(self._remove_friend, db, user_a, user_b)

        logger.info(f"Friendship removed: {user_a} <-> {user_b}")

    def _remove_friend(self, db: Session, user_a: str, user_b: str) -> None:
        friendship = self.friendships.get(db, user_a, user_b)
        if friendship is None:
            raise FriendNotFoundError(user_a, user_b)

        self.friendships.delete(db, friendship)
        self.friendships.commit(db)

    async def purge_user(self, db: Session, user_id: str, timeout: Optional[float] = None) -> int:
        """
        Remove every request and friendship touching ``user_id``.

        The locks of all affected pairs are taken first, in pair order, and the
        deletions are written in one commit. If any lock times out, nothing is
        deleted. Returns the number of counterparts that were cleaned up.
        """
        timeout = self._timeout(timeout)
        counterparts = await run_in_threadpool(self._counterparts, db, user_id)

        async with AsyncExitStack() as stack:
            for other_id in sorted(counterparts, key=lambda other: ordered_pair(user_id, other)):
                await stack.enter_async_context(self.locks.hold(user_id, other_id, timeout))
            await run_in_threadpool(self._purge_pairs, db, user_id, counterparts)

        if counterparts:
            logger.info(f"Purged friend state for {user_id}: {len(counterparts)} counterparts")
        return len(counterparts)

    def _counterparts(self, db: Session, user_id: str) -> Set[str]:
        counterparts = set(self.friendships.friend_ids(db, user_id))
        counterparts |= self.requests.counterparts(db, user_id)
        return counterparts

    def _purge_pairs(self, db: Session, user_id: str, counterparts: Iterable[str]) -> None:
        for other_id in counterparts:
            self.requests.delete_between(db, user_id, other_id)
            friendship = self.friendships.get(db, user_id, other_id)
            if friendship is not None:
                self.friendships.delete(db, friendship)
        self.friendships.commit(db)

    # Reads; no lock, a concurrent writer may or may not be visible yet

    async def get_friends(self, db: Session, user_id: str) -> List[str]:
        return await run_in_threadpool(self.friendships.friend_ids, db, user_id)

    async def get_requests(self, db: Session, user_id: str) -> List[FriendRequest]:
        """Pending requests in both directions; compare ``requester_id`` to tell sent from received."""
        return await run_in_threadpool(self.requests.list_pending, db, user_id)

    async def get_received_requests(self, db: Session, user_id: str) -> List[FriendRequest]:
        return await run_in_threadpool(self.requests.list_received, db, user_id)

    async def get_sent_requests(self, db: Session, user_id: str) -> List[FriendRequest]:
        return await run_in_threadpool(self.requests.list_sent, db, user_id)

    async def relationship_status(self, db: Session, user_id: str, other_ids: List[str]) -> Dict[str, str]:
        """Map each of ``other_ids`` to friend, request_sent, request_received or none."""
        return await run_in_threadpool(self._relationship_status, db, user_id, other_ids)

    def _relationship_status(self, db: Session, user_id: str, other_ids: List[str]) -> Dict[str, str]:
        status_map = {other_id: NONE for other_id in other_ids}
        if not other_ids:
            return status_map

        friends = self.friendships.friends_among(db, user_id, other_ids)
        for req in self.requests.pending_with(db, user_id, other_ids):
            if req.requester_id == user_id:
                status_map[req.recipient_id] = REQUEST_SENT
            else:
                status_map[req.requester_id] = REQUEST_RECEIVED
        for friend_id in friends:
            status_map[friend_id] = FRIEND
        return status_map
