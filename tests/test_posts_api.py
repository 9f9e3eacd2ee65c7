"""
Blog API — /posts Endpoint Tests
================================

What:  End-to-end tests of the HTTP surface through the real app and a real
       (SQLite) database.
How:   httpx AsyncClient over ASGITransport; see conftest.py.

What we test:
    ✅ create → 201 with generated id/created, 400 on each missing field
    ✅ get / list round trips
    ✅ partial update, id mismatch, empty change set
    ✅ delete, then list/get behaviour
    ✅ catch-all 404 and generic 500 bodies
"""

import uuid
from unittest.mock import AsyncMock, patch

import pytest

from blog_api.exceptions import DatabaseError

INTERNAL_ERROR = {"message": "Internal server error"}


async def create(client, payload):
    response = await client.post("/posts", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestCreatePost:

    @pytest.mark.asyncio
    async def test_create_returns_201_with_generated_fields(self, test_client, post_payload):
        response = await test_client.post("/posts", json=post_payload)

        assert response.status_code == 201
        body = response.json()
        assert set(body) == {"id", "title", "content", "author", "created"}
        assert uuid.UUID(body["id"])
        assert body["created"]
        assert body["title"] == "T"
        assert body["content"] == "C"
        assert body["author"] == [{"firstName": "A", "lastName": "B"}]

    @pytest.mark.asyncio
    async def test_empty_strings_satisfy_presence_check(self, test_client):
        response = await test_client.post(
            "/posts", json={"title": "", "content": "", "author": []}
        )

        assert response.status_code == 201
        assert response.json()["title"] == ""
        assert response.json()["author"] == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing", ["title", "content", "author"])
    async def test_missing_field_is_rejected_and_not_persisted(
        self, test_client, post_payload, missing
    ):
        del post_payload[missing]

        response = await test_client.post("/posts", json=post_payload)

        assert response.status_code == 400
        assert response.json() == {"message": f"Missing `{missing}` in request body"}
        listing = await test_client.get("/posts")
        assert listing.json() == {"posts": []}

    @pytest.mark.asyncio
    async def test_first_missing_field_is_reported(self, test_client):
        response = await test_client.post("/posts", json={"author": []})

        assert response.status_code == 400
        assert response.json()["message"] == "Missing `title` in request body"

    @pytest.mark.asyncio
    async def test_empty_body_reports_missing_title(self, test_client):
        response = await test_client.post("/posts")

        assert response.status_code == 400
        assert response.json()["message"] == "Missing `title` in request body"

    @pytest.mark.asyncio
    async def test_author_entry_without_last_name_is_rejected(self, test_client, post_payload):
        post_payload["author"] = [{"firstName": "A"}]

        response = await test_client.post("/posts", json=post_payload)

        assert response.status_code == 400
        assert "lastName" in response.json()["message"]

    @pytest.mark.asyncio
    async def test_malformed_json_is_a_client_error(self, test_client):
        response = await test_client.post(
            "/posts",
            content=b'{"title": ',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json() == {"message": "Request body is not valid JSON"}

    @pytest.mark.asyncio
    async def test_unknown_fields_are_not_stored(self, test_client, post_payload):
        post_payload["views"] = 1000

        body = await create(test_client, post_payload)

        assert "views" not in body


class TestReadPosts:

    @pytest.mark.asyncio
    async def test_list_empty_collection(self, test_client):
        response = await test_client.get("/posts")

        assert response.status_code == 200
        assert response.json() == {"posts": []}

    @pytest.mark.asyncio
    async def test_list_returns_every_post(self, test_client, post_payload):
        first = await create(test_client, post_payload)
        second = await create(test_client, {**post_payload, "title": "Second"})

        response = await test_client.get("/posts")

        assert response.status_code == 200
        ids = [post["id"] for post in response.json()["posts"]]
        assert ids == [first["id"], second["id"]]

    @pytest.mark.asyncio
    async def test_get_round_trip(self, test_client, post_payload):
        created = await create(test_client, post_payload)

        response = await test_client.get(f"/posts/{created['id']}")

        assert response.status_code == 200
        assert response.json() == created

    @pytest.mark.asyncio
    async def test_created_keeps_utc_offset_when_read_back(self, test_client, post_payload):
        created = await create(test_client, post_payload)

        fetched = (await test_client.get(f"/posts/{created['id']}")).json()
        listed = (await test_client.get("/posts")).json()["posts"]

        assert created["created"].endswith("Z")
        assert fetched["created"] == created["created"]
        assert [post["created"] for post in listed] == [created["created"]]

    @pytest.mark.asyncio
    async def test_uppercase_id_resolves_to_canonical_id(self, test_client, post_payload):
        created = await create(test_client, post_payload)

        response = await test_client.get(f"/posts/{created['id'].upper()}")

        assert response.status_code == 200
        assert response.json()["id"] == created["id"]

    @pytest.mark.asyncio
    async def test_get_unknown_id_is_a_server_error(self, test_client):
        response = await test_client.get(f"/posts/{uuid.uuid4()}")

        assert response.status_code == 500
        assert response.json() == INTERNAL_ERROR

    @pytest.mark.asyncio
    async def test_get_malformed_id_is_a_server_error(self, test_client):
        response = await test_client.get("/posts/not-an-id")

        assert response.status_code == 500
        assert response.json() == INTERNAL_ERROR


class TestUpdatePost:

    @pytest.mark.asyncio
    async def test_update_overwrites_only_sent_fields(self, test_client, post_payload):
        created = await create(test_client, post_payload)

        response = await test_client.put(
            f"/posts/{created['id']}",
            json={"id": created["id"], "title": "New title"},
        )

        assert response.status_code == 204
        assert response.content == b""
        fetched = (await test_client.get(f"/posts/{created['id']}")).json()
        assert fetched["title"] == "New title"
        assert fetched["content"] == "C"
        assert fetched["author"] == [{"firstName": "A", "lastName": "B"}]

    @pytest.mark.asyncio
    async def test_update_never_touches_created(self, test_client, post_payload):
        created = await create(test_client, post_payload)
        before = (await test_client.get(f"/posts/{created['id']}")).json()

        await test_client.put(
            f"/posts/{created['id']}",
            json={"id": created["id"], "created": "1999-01-01T00:00:00Z"},
        )

        after = (await test_client.get(f"/posts/{created['id']}")).json()
        assert after["created"] == before["created"]

    @pytest.mark.asyncio
    async def test_applying_same_update_twice_is_idempotent(self, test_client, post_payload):
        created = await create(test_client, post_payload)
        body = {
            "id": created["id"],
            "content": "Rewritten",
            "author": [{"firstName": "Grace", "lastName": "Hopper"}],
        }

        await test_client.put(f"/posts/{created['id']}", json=body)
        once = (await test_client.get(f"/posts/{created['id']}")).json()
        await test_client.put(f"/posts/{created['id']}", json=body)
        twice = (await test_client.get(f"/posts/{created['id']}")).json()

        assert once == twice
        assert twice["author"] == [{"firstName": "Grace", "lastName": "Hopper"}]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"id": "something-else"},
            {"id": "something-else", "title": "x", "content": "y"},
            {"title": "no id at all"},
            {},
        ],
    )
    async def test_mismatched_or_missing_body_id_is_rejected(self, test_client, post_payload, body):
        created = await create(test_client, post_payload)

        response = await test_client.put(f"/posts/{created['id']}", json=body)

        assert response.status_code == 400
        assert response.json() == {
            "message": (
                f"Request path id ({created['id']}) and request body id "
                f"({body.get('id')}) must match"
            )
        }
        fetched = (await test_client.get(f"/posts/{created['id']}")).json()
        assert fetched["title"] == "T"

    @pytest.mark.asyncio
    async def test_update_without_updatable_fields_still_succeeds(self, test_client, post_payload):
        created = await create(test_client, post_payload)

        response = await test_client.put(f"/posts/{created['id']}", json={"id": created["id"]})

        assert response.status_code == 204
        fetched = (await test_client.get(f"/posts/{created['id']}")).json()
        assert fetched["title"] == "T"

    @pytest.mark.asyncio
    async def test_explicit_null_title_is_a_server_error(self, test_client, post_payload):
        created = await create(test_client, post_payload)

        response = await test_client.put(
            f"/posts/{created['id']}",
            json={"id": created["id"], "title": None},
        )

        assert response.status_code == 500
        assert response.json() == INTERNAL_ERROR
        fetched = (await test_client.get(f"/posts/{created['id']}")).json()
        assert fetched == created

    @pytest.mark.asyncio
    async def test_update_of_unknown_id_is_accepted(self, test_client):
        post_id = str(uuid.uuid4())

        response = await test_client.put(f"/posts/{post_id}", json={"id": post_id, "title": "x"})

        assert response.status_code == 204


class TestDeletePost:

    @pytest.mark.asyncio
    async def test_delete_removes_post_from_listing(self, test_client, post_payload):
        keep = await create(test_client, post_payload)
        gone = await create(test_client, post_payload)

        response = await test_client.delete(f"/posts/{gone['id']}")

        assert response.status_code == 204
        assert response.content == b""
        ids = [post["id"] for post in (await test_client.get("/posts")).json()["posts"]]
        assert ids == [keep["id"]]

    @pytest.mark.asyncio
    async def test_full_lifecycle_scenario(self, test_client, post_payload):
        created = await create(test_client, post_payload)
        fetched = (await test_client.get(f"/posts/{created['id']}")).json()
        assert fetched == created

        assert (await test_client.delete(f"/posts/{created['id']}")).status_code == 204

        response = await test_client.get(f"/posts/{created['id']}")
        assert response.status_code == 500
        assert response.json() == INTERNAL_ERROR

    @pytest.mark.asyncio
    async def test_delete_unknown_id_is_accepted(self, test_client):
        response = await test_client.delete(f"/posts/{uuid.uuid4()}")

        assert response.status_code == 204

    @pytest.mark.asyncio
    async def test_delete_malformed_id_is_a_server_error(self, test_client):
        response = await test_client.delete("/posts/42")

        assert response.status_code == 500
        assert response.json() == INTERNAL_ERROR


class TestErrorResponses:

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method, path",
        [
            ("GET", "/"),
            ("GET", "/nothing/here"),
            ("GET", "/docs"),
            ("PATCH", "/posts"),
            ("POST", "/posts/abc"),
        ],
    )
    async def test_unmatched_routes_return_catch_all_404(self, test_client, method, path):
        response = await test_client.request(method, path)

        assert response.status_code == 404
        assert response.json() == {"message": "Not Found"}

    @pytest.mark.asyncio
    async def test_storage_failure_on_list_is_generic_500(self, test_client):
        failing = AsyncMock(side_effect=DatabaseError(message="connection reset"))
        with patch("blog_api.routes.posts.post_service.list_posts", failing):
            response = await test_client.get("/posts")

        assert response.status_code == 500
        assert response.json() == INTERNAL_ERROR

    @pytest.mark.asyncio
    async def test_storage_failure_on_create_is_generic_500(self, test_client, post_payload):
        failing = AsyncMock(side_effect=DatabaseError(message="disk full"))
        with patch("blog_api.routes.posts.post_service.create_post", failing):
            response = await test_client.post("/posts", json=post_payload)

        assert response.status_code == 500
        assert response.json() == INTERNAL_ERROR

    @pytest.mark.asyncio
    async def test_request_id_is_generated_and_echoed(self, test_client):
        generated = await test_client.get("/posts")
        echoed = await test_client.get("/posts", headers={"X-Request-ID": "trace-123"})

        assert generated.headers["X-Request-ID"]
        assert echoed.headers["X-Request-ID"] == "trace-123"
