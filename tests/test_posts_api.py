"""
Devbook API — Post Endpoint Tests
==================================

What:  End-to-end tests for /posts, /users/{id}/posts and like/deslike.
How:   In-memory repositories behind create_app(); posts are seeded straight
       into the store so each test controls ids and authorship.
"""

from unittest.mock import AsyncMock

import pytest


class TestCreatePost:

    @pytest.mark.asyncio
    async def test_create(self, test_client, make_user, auth_headers):
        ada = make_user("ada")

        response = await test_client.post("/posts", headers=auth_headers(ada), json={
            "title": "  First ", "content": "Hello, devbook",
        })

        assert response.status_code == 201
        body = response.json()
        assert body["id"] == 1
        assert body["title"] == "First"
        assert body["author_id"] == ada
        assert body["author_nick"] == "ada"
        assert body["likes"] == 0

    @pytest.mark.asyncio
    async def test_author_and_likes_come_from_the_server(self, test_client, make_user, auth_headers):
        ada = make_user("ada")
        grace = make_user("grace")

        response = await test_client.post("/posts", headers=auth_headers(ada), json={
            "title": "Spoof", "content": "body", "author_id": grace, "likes": 100,
        })

        assert response.status_code == 201
        assert response.json()["author_id"] == ada
        assert response.json()["likes"] == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("extra", [
        {"likes": -1},
        {"author_id": "x"},
        {"id": -7},
        {"author_nick": 5, "created_at": "yesterday"},
    ])
    async def test_server_owned_fields_are_ignored(
        self, test_client, make_user, auth_headers, extra
    ):
        ada = make_user("ada")
        response = await test_client.post(
            "/posts", headers=auth_headers(ada), json={"title": "t", "content": "c", **extra}
        )
        assert response.status_code == 201
        body = response.json()
        assert (body["author_id"], body["likes"], body["author_nick"]) == (ada, 0, "ada")

    @pytest.mark.asyncio
    async def test_blank_title(self, test_client, store, make_user, auth_headers):
        ada = make_user("ada")
        response = await test_client.post("/posts", headers=auth_headers(ada), json={
            "title": "   ", "content": "body",
        })
        assert response.status_code == 400
        assert response.json() == {"error": "title is required and cannot be blank"}
        assert store.posts == {}


class TestFeed:

    @pytest.mark.asyncio
    async def test_feed_has_own_and_followed_posts_newest_first(
        self, test_client, store, make_user, make_post, auth_headers
    ):
        ada = make_user("ada")
        grace = make_user("grace")
        alan = make_user("alan")
        store.followers.add((grace, ada))

        a1 = make_post(ada, title="a1")
        g1 = make_post(grace, title="g1")
        make_post(alan, title="not followed")
        a2 = make_post(ada, title="a2")

        response = await test_client.get("/posts", headers=auth_headers(ada))

        assert response.status_code == 200
        assert [post["id"] for post in response.json()] == [a2, g1, a1]

    @pytest.mark.asyncio
    async def test_empty_feed(self, test_client, make_user, auth_headers):
        ada = make_user("ada")
        response = await test_client.get("/posts", headers=auth_headers(ada))
        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_posts_by_user(self, test_client, make_user, make_post, auth_headers):
        ada = make_user("ada")
        grace = make_user("grace")
        g1 = make_post(grace)
        make_post(ada)
        g2 = make_post(grace)

        response = await test_client.get(f"/users/{grace}/posts", headers=auth_headers(ada))

        assert response.status_code == 200
        assert [post["id"] for post in response.json()] == [g2, g1]
        assert {post["author_nick"] for post in response.json()} == {"grace"}


class TestShowUpdateDelete:

    @pytest.mark.asyncio
    async def test_show(self, test_client, make_user, make_post, auth_headers):
        ada = make_user("ada")
        post_id = make_post(ada, title="Hello")
        response = await test_client.get(f"/posts/{post_id}", headers=auth_headers(ada))
        assert response.status_code == 200
        assert response.json()["title"] == "Hello"

    @pytest.mark.asyncio
    async def test_show_missing(self, test_client, make_user, auth_headers):
        ada = make_user("ada")
        response = await test_client.get("/posts/5", headers=auth_headers(ada))
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_show_bad_id(self, test_client, make_user, auth_headers):
        ada = make_user("ada")
        response = await test_client.get("/posts/abc", headers=auth_headers(ada))
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_author_updates_post(self, test_client, store, make_user, make_post, auth_headers):
        ada = make_user("ada")
        post_id = make_post(ada, title="Old", likes=3)

        response = await test_client.put(f"/posts/{post_id}", headers=auth_headers(ada), json={
            "title": "New", "content": "New content",
        })

        assert response.status_code == 204
        assert store.posts[post_id].title == "New"
        assert store.posts[post_id].likes == 3

    @pytest.mark.asyncio
    async def test_other_user_cannot_update(
        self, test_client, store, make_user, make_post, auth_headers
    ):
        ada = make_user("ada")
        grace = make_user("grace")
        post_id = make_post(ada, title="Old")

        response = await test_client.put(f"/posts/{post_id}", headers=auth_headers(grace), json={
            "title": "Hijacked", "content": "x",
        })

        assert response.status_code == 403
        assert response.json() == {"error": "you cannot update a post that is not yours"}
        assert store.posts[post_id].title == "Old"

    @pytest.mark.asyncio
    async def test_update_ignores_server_owned_fields(
        self, test_client, store, make_user, make_post, auth_headers
    ):
        ada = make_user("ada")
        post_id = make_post(ada, likes=2)

        response = await test_client.put(f"/posts/{post_id}", headers=auth_headers(ada), json={
            "title": "New", "content": "c", "likes": -1, "author_id": "x",
        })

        assert response.status_code == 204
        assert store.posts[post_id].likes == 2
        assert store.posts[post_id].author_id == ada

    @pytest.mark.asyncio
    async def test_update_missing_post(self, test_client, make_user, auth_headers):
        ada = make_user("ada")
        response = await test_client.put("/posts/5", headers=auth_headers(ada), json={
            "title": "t", "content": "c",
        })
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_author_deletes_post(self, test_client, store, make_user, make_post, auth_headers):
        ada = make_user("ada")
        post_id = make_post(ada)
        response = await test_client.delete(f"/posts/{post_id}", headers=auth_headers(ada))
        assert response.status_code == 204
        assert post_id not in store.posts

    @pytest.mark.asyncio
    async def test_other_user_cannot_delete(
        self, test_client, store, make_user, make_post, auth_headers
    ):
        ada = make_user("ada")
        grace = make_user("grace")
        post_id = make_post(ada)
        response = await test_client.delete(f"/posts/{post_id}", headers=auth_headers(grace))
        assert response.status_code == 403
        assert post_id in store.posts


class TestLikes:

    @pytest.mark.asyncio
    async def test_like_increments(self, test_client, store, make_user, make_post, auth_headers):
        ada = make_user("ada")
        post_id = make_post(ada)
        for _ in range(2):
            response = await test_client.post(f"/posts/{post_id}/like", headers=auth_headers(ada))
            assert response.status_code == 204
        assert store.posts[post_id].likes == 2

    @pytest.mark.asyncio
    async def test_deslike_never_goes_below_zero(
        self, test_client, store, make_user, make_post, auth_headers
    ):
        ada = make_user("ada")
        post_id = make_post(ada, likes=1)
        for _ in range(3):
            response = await test_client.post(
                f"/posts/{post_id}/deslike", headers=auth_headers(ada)
            )
            assert response.status_code == 204
        assert store.posts[post_id].likes == 0

    @pytest.mark.asyncio
    async def test_like_missing_post(self, test_client, make_user, auth_headers):
        ada = make_user("ada")
        response = await test_client.post("/posts/77/like", headers=auth_headers(ada))
        assert response.status_code == 404


class TestPersistenceFailures:

    @pytest.mark.asyncio
    async def test_feed_failure_is_redacted(
        self, test_client, post_repository, make_user, auth_headers, monkeypatch
    ):
        ada = make_user("ada")
        monkeypatch.setattr(
            post_repository, "index", AsyncMock(side_effect=RuntimeError("relation posts missing"))
        )

        response = await test_client.get("/posts", headers=auth_headers(ada))

        assert response.status_code == 500
        assert response.json() == {
            "error": "A database error occurred. Please try again later."
        }
