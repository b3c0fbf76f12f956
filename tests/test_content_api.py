"""
Tests for posts, filters, groups and quizzes
"""
import pytest


@pytest.fixture
def alice(client_for):
    return client_for("alice")


@pytest.fixture
def bob(client_for):
    return client_for("bob")


class TestPosts:

    def test_create_and_list(self, alice, bob):
        response = alice.post("/posts", json={"content": "first", "tags": ["news"], "options": {"background_color": "#fff"}})
        assert response.status_code == 200
        post = response.json()["post"]
        assert post["author"] == "alice"
        assert post["background_color"] == "#fff"

        bob.post("/posts", json={"content": "second", "tags": ["sports"]})

        assert len(alice.get("/posts").json()) == 2
        assert [p["content"] for p in alice.get("/posts", params={"author": "bob"}).json()] == ["second"]
        assert [p["content"] for p in alice.get("/posts", params={"tags": "news,music"}).json()] == ["first"]

    def test_only_author_may_edit(self, alice, bob):
        post_id = alice.post("/posts", json={"content": "mine"}).json()["post"]["id"]

        response = bob.patch(f"/posts/{post_id}", json={"content": "stolen"})
        assert response.status_code == 403
        assert response.json()["detail"] == f"bob is not the author of post {post_id}!"

        response = alice.patch(f"/posts/{post_id}", json={"tags": ["edited"]})
        assert response.status_code == 200
        assert response.json()["post"]["content"] == "mine"
        assert response.json()["post"]["tags"] == ["edited"]

        assert bob.delete(f"/posts/{post_id}").status_code == 403
        assert alice.delete(f"/posts/{post_id}").status_code == 200
        assert alice.delete(f"/posts/{post_id}").status_code == 404

    def test_author_filter_unknown_user(self, alice):
        assert alice.get("/posts", params={"author": "nobody"}).status_code == 404


class TestFilters:

    def test_add_list_remove(self, alice, bob):
        assert alice.post("/filters", json={"filter": "news"}).status_code == 200

        response = bob.post("/filters", json={"filter": "news"})
        assert response.status_code == 403
        assert response.json()["detail"] == 'Filter "news" already exists!'

        filters = bob.get("/filters", params={"author": "alice"}).json()
        assert [(f["name"], f["author"]) for f in filters] == [("news", "alice")]

        response = bob.delete("/filters/news")
        assert response.status_code == 403
        assert response.json()["detail"] == 'bob is not the author of filter "news"!'

        assert alice.delete("/filters/news").status_code == 200
        assert alice.delete("/filters/news").status_code == 404


class TestGroups:

    def test_membership(self, alice, bob, client_for):
        client_for("carol")
        response = alice.post("/groups", json={"group_name": "hikers"})
        assert response.status_code == 200
        group = response.json()["group"]
        assert group["author"] == "alice"
        assert group["members"] == ["alice"]

        response = alice.post(f"/groups/{group['id']}/members", json={"username": "bob"})
        assert response.json()["group"]["members"] == ["alice", "bob"]

        response = alice.post(f"/groups/{group['id']}/members", json={"username": "bob"})
        assert response.status_code == 403
        assert response.json()["detail"] == f"bob is already a member of group {group['id']}!"

        response = bob.post(f"/groups/{group['id']}/members", json={"username": "carol"})
        assert response.status_code == 403

        response = alice.delete(f"/groups/{group['id']}/members/bob")
        assert response.json()["group"]["members"] == ["alice"]
        assert alice.delete(f"/groups/{group['id']}/members/carol").status_code == 403

    def test_duplicate_and_delete(self, alice, bob):
        group_id = alice.post("/groups", json={"group_name": "hikers"}).json()["group"]["id"]
        assert bob.post("/groups", json={"group_name": "hikers"}).status_code == 403

        assert [g["name"] for g in bob.get("/groups", params={"author": "alice"}).json()] == ["hikers"]
        assert bob.delete(f"/groups/{group_id}").status_code == 403
        assert alice.delete(f"/groups/{group_id}").status_code == 200
        assert alice.delete(f"/groups/{group_id}").status_code == 404


class TestQuizzes:

    def test_comma_separated_fields(self, alice):
        response = alice.post("/quizzes", json={
            "question": "Capital of France?",
            "options": "Paris, Lyon , Nice",
            "answer": "Paris",
            "tags": "geo,europe",
        })
        assert response.status_code == 200
        quiz = response.json()["quiz"]
        assert quiz["options"] == ["Paris", "Lyon", "Nice"]
        assert quiz["tags"] == ["geo", "europe"]
        assert quiz["author"] == "alice"

    def test_update_and_delete(self, alice, bob):
        quiz_id = alice.post("/quizzes", json={"question": "2+2?", "options": ["3", "4"], "answer": "4"}).json()["quiz"]["id"]
        alice.post("/quizzes", json={"question": "3+3?", "options": ["6"], "answer": "6"})

        response = alice.patch(f"/quizzes/{quiz_id}", json={"question": "3+3?"})
        assert response.status_code == 403
        assert response.json()["detail"] == 'Quiz "3+3?" already exists!'

        response = alice.patch(f"/quizzes/{quiz_id}", json={"options": "4, 5"})
        assert response.json()["quiz"]["options"] == ["4", "5"]
        assert response.json()["quiz"]["question"] == "2+2?"

        assert bob.patch(f"/quizzes/{quiz_id}", json={"answer": "5"}).status_code == 403
        assert len(bob.get("/quizzes", params={"author": "alice"}).json()) == 2
        assert alice.delete(f"/quizzes/{quiz_id}").status_code == 200
        assert alice.delete(f"/quizzes/{quiz_id}").status_code == 404
