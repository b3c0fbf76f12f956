"""
Tests for FriendingEngine request and friendship lifecycle
"""
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from socialnet.crud.friends import FriendRequestStore, FriendshipStore
from socialnet.errors import (
    AlreadyFriendsError,
    DuplicateRequestError,
    FriendNotFoundError,
    RequestNotFoundError,
    SelfRequestError,
    StorageUnavailableError,
    UnknownUserError,
)
from socialnet.models import FriendRequest, Friendship
from socialnet.services.friending import FRIEND, NONE, REQUEST_RECEIVED, REQUEST_SENT, FriendingEngine
from socialnet.services.identity import DELETED_USER


@pytest.fixture
def users(make_user):
    return {name: make_user(name).id for name in ("alice", "bob", "carol")}


def _edges(db):
    return db.query(Friendship).count()


class TestSendRequest:

    @pytest.mark.asyncio
    async def test_send_creates_pending_request(self, db, friending, users):
        req = await friending.send_request(db, users["alice"], users["bob"])

        assert req.status == "pending"
        assert req.requester_id == users["alice"]
        assert req.recipient_id == users["bob"]
        sent = await friending.get_sent_requests(db, users["alice"])
        received = await friending.get_received_requests(db, users["bob"])
        assert [r.id for r in sent] == [req.id]
        assert [r.id for r in received] == [req.id]

    @pytest.mark.asyncio
    async def test_self_request_is_rejected(self, db, friending, users):
        with pytest.raises(SelfRequestError):
            await friending.send_request(db, users["alice"], users["alice"])
        assert db.query(FriendRequest).count() == 0

    @pytest.mark.asyncio
    async def test_self_request_checked_before_existence(self, db, friending):
        with pytest.raises(SelfRequestError):
            await friending.send_request(db, "ghost", "ghost")

    @pytest.mark.asyncio
    async def test_unknown_recipient(self, db, friending, users):
        with pytest.raises(UnknownUserError):
            await friending.send_request(db, users["alice"], "no-such-id")

    @pytest.mark.asyncio
    async def test_duplicate_same_direction(self, db, friending, users):
        await friending.send_request(db, users["alice"], users["bob"])
        with pytest.raises(DuplicateRequestError):
            await friending.send_request(db, users["alice"], users["bob"])

    @pytest.mark.asyncio
    async def test_duplicate_reverse_direction(self, db, friending, users):
        await friending.send_request(db, users["alice"], users["bob"])
        with pytest.raises(DuplicateRequestError):
            await friending.send_request(db, users["bob"], users["alice"])
        assert db.query(FriendRequest).count() == 1

    @pytest.mark.asyncio
    async def test_already_friends(self, db, friending, users):
        await friending.send_request(db, users["alice"], users["bob"])
        await friending.accept_request(db, users["alice"], users["bob"])

        with pytest.raises(AlreadyFriendsError):
            await friending.send_request(db, users["bob"], users["alice"])


class TestAcceptRejectRemove:

    @pytest.mark.asyncio
    async def test_accept_creates_symmetric_friendship(self, db, friending, users):
        await friending.send_request(db, users["alice"], users["bob"])
        req = await friending.accept_request(db, users["alice"], users["bob"])

        assert req.status == "accepted"
        assert await friending.get_friends(db, users["alice"]) == [users["bob"]]
        assert await friending.get_friends(db, users["bob"]) == [users["alice"]]
        assert _edges(db) == 1

    @pytest.mark.asyncio
    async def test_edge_is_stored_in_sorted_order(self, db, friending, users):
        await friending.send_request(db, users["bob"], users["alice"])
        await friending.accept_request(db, users["bob"], users["alice"])

        edge = db.query(Friendship).one()
        assert edge.user1_id < edge.user2_id

    @pytest.mark.asyncio
    async def test_accept_twice_fails(self, db, friending, users):
        await friending.send_request(db, users["alice"], users["bob"])
        await friending.accept_request(db, users["alice"], users["bob"])

        with pytest.raises(RequestNotFoundError):
            await friending.accept_request(db, users["alice"], users["bob"])
        assert _edges(db) == 1

    @pytest.mark.asyncio
    async def test_accept_requires_matching_direction(self, db, friending, users):
        await friending.send_request(db, users["alice"], users["bob"])

        with pytest.raises(RequestNotFoundError):
            await friending.accept_request(db, users["bob"], users["alice"])
        assert _edges(db) == 0

    @pytest.mark.asyncio
    async def test_reject_then_resend(self, db, friending, users):
        await friending.send_request(db, users["alice"], users["bob"])
        req = await friending.reject_request(db, users["alice"], users["bob"])
        assert req.status == "rejected"
        assert await friending.get_requests(db, users["bob"]) == []

        again = await friending.send_request(db, users["alice"], users["bob"])
        assert again.id != req.id
        assert again.status == "pending"

    @pytest.mark.asyncio
    async def test_reject_missing_request(self, db, friending, users):
        with pytest.raises(RequestNotFoundError):
            await friending.reject_request(db, users["alice"], users["bob"])

    @pytest.mark.asyncio
    async def test_remove_request_deletes_row(self, db, friending, users):
        await friending.send_request(db, users["alice"], users["bob"])
        await friending.remove_request(db, users["alice"], users["bob"])

        assert db.query(FriendRequest).count() == 0
        with pytest.raises(RequestNotFoundError):
            await friending.remove_request(db, users["alice"], users["bob"])

    @pytest.mark.asyncio
    async def test_recipient_cannot_cancel_as_requester(self, db, friending, users):
        await friending.send_request(db, users["alice"], users["bob"])
        with pytest.raises(RequestNotFoundError):
            await friending.remove_request(db, users["bob"], users["alice"])

    @pytest.mark.asyncio
    async def test_remove_friend_either_order(self, db, friending, users):
        await friending.send_request(db, users["alice"], users["bob"])
        await friending.accept_request(db, users["alice"], users["bob"])

        await friending.remove_friend(db, users["bob"], users["alice"])
        assert await friending.get_friends(db, users["alice"]) == []
        assert await friending.get_friends(db, users["bob"]) == []

        with pytest.raises(FriendNotFoundError):
            await friending.remove_friend(db, users["alice"], users["bob"])

    @pytest.mark.asyncio
    async def test_resend_after_unfriend(self, db, friending, users):
        await friending.send_request(db, users["alice"], users["bob"])
        await friending.accept_request(db, users["alice"], users["bob"])
        await friending.remove_friend(db, users["alice"], users["bob"])

        req = await friending.send_request(db, users["bob"], users["alice"])
        assert req.status == "pending"


class TestScenarios:

    @pytest.mark.asyncio
    async def test_three_user_scenario(self, db, friending, users):
        alice, bob, carol = users["alice"], users["bob"], users["carol"]

        await friending.send_request(db, alice, bob)
        await friending.send_request(db, carol, alice)
        await friending.accept_request(db, alice, bob)

        assert await friending.get_friends(db, alice) == [bob]
        requests = await friending.get_requests(db, alice)
        assert [(r.requester_id, r.recipient_id) for r in requests] == [(carol, alice)]

        await friending.reject_request(db, carol, alice)
        assert await friending.get_requests(db, alice) == []
        assert await friending.get_friends(db, carol) == []

    @pytest.mark.asyncio
    async def test_relationship_status(self, db, friending, users, make_user):
        alice, bob, carol = users["alice"], users["bob"], users["carol"]
        dave = make_user("dave").id

        await friending.send_request(db, alice, bob)
        await friending.accept_request(db, alice, bob)
        await friending.send_request(db, alice, carol)
        await friending.send_request(db, dave, alice)

        status = await friending.relationship_status(db, alice, [bob, carol, dave, "stranger"])
        assert status == {bob: FRIEND, carol: REQUEST_SENT, dave: REQUEST_RECEIVED, "stranger": NONE}
        assert await friending.relationship_status(db, alice, []) == {}

    @pytest.mark.asyncio
    async def test_purge_user(self, db, friending, users, identity):
        alice, bob, carol = users["alice"], users["bob"], users["carol"]

        await friending.send_request(db, alice, bob)
        await friending.accept_request(db, alice, bob)
        await friending.send_request(db, carol, alice)
        await friending.send_request(db, bob, carol)

        cleaned = await friending.purge_user(db, alice)

        assert cleaned == 2
        assert await friending.get_friends(db, bob) == []
        assert await friending.get_requests(db, carol) != []
        remaining = db.query(FriendRequest).all()
        assert [(r.requester_id, r.recipient_id) for r in remaining] == [(bob, carol)]
        assert len(friending.locks) == 0

    @pytest.mark.asyncio
    async def test_deleted_user_renders_as_placeholder(self, db, identity, users):
        names = identity.ids_to_usernames(db, [users["bob"], "gone", users["alice"]])
        assert names == ["bob", DELETED_USER, "alice"]


class TestStorageFailures:

    def _broken_db(self):
        db = MagicMock()
        db.query.side_effect = OperationalError("SELECT 1", {}, Exception("database is down"))
        return db

    def test_store_failure_becomes_storage_unavailable(self):
        db = self._broken_db()

        with pytest.raises(StorageUnavailableError):
            FriendRequestStore().get_pending(db, "a", "b")
        db.rollback.assert_called_once()

    @pytest.mark.asyncio
    async def test_engine_surfaces_storage_unavailable(self, identity):
        db = self._broken_db()
        friending = FriendingEngine(identity, requests=FriendRequestStore(), friendships=FriendshipStore())

        with pytest.raises(StorageUnavailableError):
            await friending.get_friends(db, "a")
        with pytest.raises(StorageUnavailableError):
            await friending.send_request(db, "a", "b")
        assert len(friending.locks) == 0

    def test_storage_error_is_not_a_semantic_error(self):
        error = StorageUnavailableError("list friends")
        assert error.status_code == 503
        assert not isinstance(error, (RequestNotFoundError, FriendNotFoundError))
