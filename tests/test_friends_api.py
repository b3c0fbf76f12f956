"""
Tests for the friend request and friendship HTTP endpoints
"""
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from socialnet.errors import StorageUnavailableError


@pytest.fixture
def alice(client_for):
    return client_for("alice")


@pytest.fixture
def bob(client_for):
    return client_for("bob")


@pytest.fixture
def carol(client_for):
    return client_for("carol")


def _befriend(sender, recipient, sender_name, recipient_name):
    assert sender.post(f"/friend/requests/{recipient_name}").status_code == 200
    assert recipient.put(f"/friend/accept/{sender_name}").status_code == 200


class TestFriendRequests:

    def test_send_and_list(self, alice, bob):
        response = alice.post("/friend/requests/bob")
        assert response.status_code == 200
        data = response.json()
        assert data["requester_username"] == "alice"
        assert data["recipient_username"] == "bob"
        assert data["status"] == "pending"
        assert data["direction"] == "sent"

        received = bob.get("/friend/requests/received").json()
        assert received["total_count"] == 1
        assert received["requests"][0]["requester_username"] == "alice"

        both = bob.get("/friend/requests").json()
        assert [r["direction"] for r in both["requests"]] == ["received"]

        sent = alice.get("/friend/requests/sent").json()
        assert [r["recipient_username"] for r in sent["requests"]] == ["bob"]

    def test_accept_makes_both_friends(self, alice, bob):
        _befriend(alice, bob, "alice", "bob")

        alice_friends = alice.get("/friends").json()
        bob_friends = bob.get("/friends").json()
        assert [f["username"] for f in alice_friends["friends"]] == ["bob"]
        assert [f["username"] for f in bob_friends["friends"]] == ["alice"]
        assert alice_friends["total_count"] == 1
        assert bob.get("/friend/requests").json()["requests"] == []

    def test_self_request(self, alice):
        response = alice.post("/friend/requests/alice")
        assert response.status_code == 403
        assert response.json()["detail"] == "alice cannot send a friend request to themselves!"

    def test_unknown_user(self, alice):
        response = alice.post("/friend/requests/nobody")
        assert response.status_code == 404
        assert response.json()["detail"] == "User nobody does not exist!"

    def test_reverse_duplicate(self, alice, bob):
        alice.post("/friend/requests/bob")
        response = bob.post("/friend/requests/alice")
        assert response.status_code == 403
        assert response.json()["detail"] == "Friend request between bob and alice already exists!"

    def test_already_friends(self, alice, bob):
        _befriend(alice, bob, "alice", "bob")
        response = bob.post("/friend/requests/alice")
        assert response.status_code == 403
        assert response.json()["detail"] == "bob and alice are already friends!"

    def test_accept_missing_request(self, alice, carol):
        response = alice.put("/friend/accept/carol")
        assert response.status_code == 404
        assert response.json()["detail"] == "Friend request from carol to alice does not exist!"

    def test_reject_then_resend(self, alice, bob):
        alice.post("/friend/requests/bob")
        response = bob.put("/friend/reject/alice")
        assert response.status_code == 200
        assert response.json()["status"] == "rejected"
        assert bob.get("/friend/requests").json()["total_count"] == 0

        assert alice.post("/friend/requests/bob").status_code == 200

    def test_cancel_request(self, alice, bob):
        alice.post("/friend/requests/bob")
        response = alice.delete("/friend/requests/bob")
        assert response.status_code == 200
        assert bob.get("/friend/requests/received").json()["requests"] == []

        response = alice.delete("/friend/requests/bob")
        assert response.status_code == 404

    def test_relationship_status(self, alice, bob, carol, client_for):
        client_for("dave")
        _befriend(alice, bob, "alice", "bob")
        alice.post("/friend/requests/carol")

        response = alice.get("/friend/status", params={"usernames": "bob, carol,dave"})
        assert response.status_code == 200
        assert response.json()["statuses"] == {"bob": "friend", "carol": "request_sent", "dave": "none"}
        assert carol.get("/friend/status", params={"usernames": "alice"}).json()["statuses"] == {
            "alice": "request_received"
        }


class TestFriendships:

    def test_unfriend_either_side(self, alice, bob):
        _befriend(alice, bob, "alice", "bob")

        response = bob.delete("/friends/alice")
        assert response.status_code == 200
        assert alice.get("/friends").json()["friends"] == []

        response = alice.delete("/friends/bob")
        assert response.status_code == 404
        assert response.json()["detail"] == "Friendship between alice and bob does not exist!"

    def test_pagination(self, alice, bob, carol):
        _befriend(bob, alice, "bob", "alice")
        _befriend(carol, alice, "carol", "alice")

        first = alice.get("/friends", params={"page": 1, "page_size": 1}).json()
        second = alice.get("/friends", params={"page": 2, "page_size": 1}).json()
        assert first["total_count"] == 2
        assert len(first["friends"]) == 1
        assert len(second["friends"]) == 1
        assert {first["friends"][0]["username"], second["friends"][0]["username"]} == {"bob", "carol"}

    def test_deleted_account_disappears_from_friends(self, alice, bob, carol):
        _befriend(alice, bob, "alice", "bob")
        carol.post("/friend/requests/bob")

        assert bob.delete("/users").status_code == 200

        assert alice.get("/friends").json()["friends"] == []
        assert carol.get("/friend/requests").json()["requests"] == []

    def test_requires_login(self, anonymous_client):
        assert anonymous_client.get("/friends").status_code == 401
        assert anonymous_client.post("/friend/requests/bob").status_code == 401

    def test_storage_failure_is_503(self, app, alice):
        with patch.object(
            app.state.friending.friendships, "friend_ids", side_effect=StorageUnavailableError("list friends")
        ):
            response = alice.get("/friends")
        assert response.status_code == 503
        assert response.json()["detail"] == "Storage unavailable while trying to list friends."


class TestFirebaseUsers:

    @patch("socialnet.auth.auth.verify_id_token")
    def test_username_required_before_friending(self, verify_id_token, app, client_for):
        client_for("bob")
        verify_id_token.return_value = {"uid": "firebase-uid-1", "email": "fb@example.com", "name": "Fb User"}

        with TestClient(app) as client:
            headers = {"Authorization": "Bearer fake-token"}
            assert client.get("/session", headers=headers).json()["id"] == "firebase-uid-1"

            response = client.post("/friend/requests/bob", headers=headers)
            assert response.status_code == 400

            assert client.patch("/users/username", json={"username": "fbuser"}, headers=headers).status_code == 200
            assert client.post("/friend/requests/bob", headers=headers).status_code == 200

    @patch("socialnet.auth.auth.verify_id_token", side_effect=ValueError("bad token"))
    def test_invalid_token(self, verify_id_token, anonymous_client):
        response = anonymous_client.get("/session", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401
