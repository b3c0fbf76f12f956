"""
Tests for per-pair mutual exclusion in the friending engine
"""
import asyncio
import time

import pytest

from socialnet.errors import DuplicateRequestError, FriendingTimeoutError, RequestNotFoundError
from socialnet.models import FriendRequest, Friendship
from socialnet.services.friending import PairLocks


class TestPairLocks:

    @pytest.mark.asyncio
    async def test_lock_is_order_independent(self):
        locks = PairLocks()
        async with locks.hold("a", "b"):
            with pytest.raises(FriendingTimeoutError):
                async with locks.hold("b", "a", timeout=0.01):
                    pass

    @pytest.mark.asyncio
    async def test_different_pairs_do_not_contend(self):
        locks = PairLocks()
        async with locks.hold("a", "b"):
            async with locks.hold("a", "c", timeout=0.01):
                assert len(locks) == 2

    @pytest.mark.asyncio
    async def test_entries_are_discarded_when_idle(self):
        locks = PairLocks()
        async with locks.hold("a", "b"):
            assert len(locks) == 1
        assert len(locks) == 0

        async with locks.hold("a", "b"):
            with pytest.raises(FriendingTimeoutError):
                async with locks.hold("a", "b", timeout=0.01):
                    pass
            assert len(locks) == 1
        assert len(locks) == 0


class TestConcurrentOperations:

    @pytest.mark.asyncio
    async def test_concurrent_accepts_produce_one_edge(self, db, friending, make_user, session_factory):
        alice = make_user("alice").id
        bob = make_user("bob").id
        await friending.send_request(db, alice, bob)

        results = await asyncio.gather(
            *(friending.accept_request(session_factory(), alice, bob) for _ in range(8)),
            return_exceptions=True,
        )

        accepted = [r for r in results if isinstance(r, FriendRequest)]
        missing = [r for r in results if isinstance(r, RequestNotFoundError)]
        assert len(accepted) == 1
        assert len(missing) == 7
        assert db.query(Friendship).count() == 1
        assert len(friending.locks) == 0

    @pytest.mark.asyncio
    async def test_accept_racing_cancel_is_serialized(self, db, friending, make_user, session_factory):
        alice = make_user("alice").id
        bob = make_user("bob").id
        await friending.send_request(db, alice, bob)

        accepted, cancelled = await asyncio.gather(
            friending.accept_request(session_factory(), alice, bob),
            friending.remove_request(session_factory(), alice, bob),
            return_exceptions=True,
        )

        outcomes = [accepted, cancelled]
        assert sum(isinstance(r, RequestNotFoundError) for r in outcomes) == 1
        assert db.query(FriendRequest).filter(FriendRequest.status == "pending").count() == 0
        if isinstance(accepted, FriendRequest):
            assert db.query(Friendship).count() == 1
        else:
            assert db.query(Friendship).count() == 0
            assert db.query(FriendRequest).count() == 0

    @pytest.mark.asyncio
    async def test_concurrent_opposite_sends_leave_one_pending(self, db, friending, make_user, session_factory):
        alice = make_user("alice").id
        bob = make_user("bob").id

        results = await asyncio.gather(
            friending.send_request(session_factory(), alice, bob),
            friending.send_request(session_factory(), bob, alice),
            return_exceptions=True,
        )

        assert sum(isinstance(r, FriendRequest) for r in results) == 1
        assert sum(isinstance(r, DuplicateRequestError) for r in results) == 1
        assert db.query(FriendRequest).filter(FriendRequest.status == "pending").count() == 1

    @pytest.mark.asyncio
    async def test_timeout_writes_nothing(self, db, friending, make_user):
        alice = make_user("alice").id
        bob = make_user("bob").id

        async with friending.locks.hold(alice, bob):
            with pytest.raises(FriendingTimeoutError):
                await friending.send_request(db, bob, alice, timeout=0.05)

        assert db.query(FriendRequest).count() == 0
        assert len(friending.locks) == 0

    @pytest.mark.asyncio
    async def test_waiters_on_busy_pair_do_not_block_other_pairs(self, db, friending, make_user, session_factory):
        alice = make_user("alice").id
        bob = make_user("bob").id
        carol = make_user("carol").id
        dave = make_user("dave").id

        async with friending.locks.hold(alice, bob):
            waiters = [
                asyncio.ensure_future(friending.accept_request(db, alice, bob, timeout=1))
                for _ in range(40)
            ]
            await asyncio.sleep(0.05)

            started = time.perf_counter()
            req = await friending.send_request(session_factory(), carol, dave, timeout=1)
            elapsed = time.perf_counter() - started

            results = await asyncio.gather(*waiters, return_exceptions=True)

        assert req.status == "pending"
        assert elapsed < 0.5
        assert all(isinstance(r, FriendingTimeoutError) for r in results)
        assert len(friending.locks) == 0


class TestPurgeAtomicity:

    @pytest.mark.asyncio
    async def test_purge_timeout_deletes_nothing(self, db, friending, make_user):
        alice = make_user("alice").id
        bob = make_user("bob").id
        carol = make_user("carol").id
        dave = make_user("dave").id
        await friending.send_request(db, alice, bob)
        await friending.accept_request(db, alice, bob)
        await friending.send_request(db, carol, alice)
        await friending.send_request(db, alice, dave)

        async with friending.locks.hold(alice, carol):
            with pytest.raises(FriendingTimeoutError):
                await friending.purge_user(db, alice, timeout=0.05)

        assert db.query(Friendship).count() == 1
        assert db.query(FriendRequest).count() == 3
        assert len(friending.locks) == 0

        assert await friending.purge_user(db, alice) == 3
        assert db.query(Friendship).count() == 0
        assert db.query(FriendRequest).count() == 0
