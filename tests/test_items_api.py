"""Tests for the /items endpoints."""
from datetime import datetime, timedelta

import pytest
from sqlalchemy import update

from dust_gold.models import Item

ITEMS = "/api/v1/items"


async def _submit(client, headers, **fields) -> dict:
    body = {"type": "book", "name": "Dune", **fields}
    response = await client.post(ITEMS, json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def _age(session_factory, item_id: str, minutes: int) -> None:
    """Push an item's created_at into the past so newest-first order is stable."""
    async with session_factory() as session:
        await session.execute(
            update(Item)
            .where(Item.id == item_id)
            .values(created_at=datetime(2026, 1, 1, 12, 0) - timedelta(minutes=minutes))
        )
        await session.commit()


class TestCreateItem:
    """POST /items"""

    @pytest.mark.asyncio
    async def test_create_full_item(self, client, make_user):
        _, alice = await make_user("alice")

        item = await _submit(
            client,
            alice,
            type="movie",
            name="  Alien ",
            description="In space no one can hear you scream.",
            url="https://www.imdb.com/title/tt0078748",
            image_url="https://example.com/alien.jpg",
            artist=["Ridley Scott"],
            tags=["Horror", " Sci-Fi "],
            published_on="1979-05-25",
            provider_id="tt0078748",
        )

        assert item["name"] == "Alien"
        assert item["type"] == "movie"
        assert item["artist"] == ["Ridley Scott"]
        assert item["tags"] == ["Horror", "Sci-Fi"]
        assert item["published_on"] == "1979-05-25"
        assert item["url"] == "https://www.imdb.com/title/tt0078748"
        assert item["provider_id"] == "tt0078748"
        assert item["submitted_by"] == "alice"
        assert item["votes"] == 0
        assert item["voted"] is False
        assert item["upvoters"] == []

    @pytest.mark.asyncio
    async def test_owner_is_always_caller(self, client, make_user):
        _, alice = await make_user("alice")
        await make_user("bob")

        item = await _submit(client, alice, submitted_by="bob", votes=99)
        assert item["submitted_by"] == "alice"
        assert item["votes"] == 0

    @pytest.mark.asyncio
    async def test_requires_auth(self, client):
        response = await client.post(ITEMS, json={"type": "book", "name": "Dune"})
        assert response.status_code == 401
        assert response.json()["error"] == "unauthorized"

    @pytest.mark.asyncio
    async def test_invalid_token(self, client):
        response = await client.post(
            ITEMS,
            json={"type": "book", "name": "Dune"},
            headers={"Authorization": "Bearer not-a-token"},
        )
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid or expired session"

    @pytest.mark.asyncio
    async def test_blank_name_rejected(self, client, make_user):
        _, alice = await make_user("alice")

        response = await client.post(ITEMS, json={"type": "book", "name": "   "}, headers=alice)
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_unknown_kind_rejected(self, client, make_user):
        _, alice = await make_user("alice")

        response = await client.post(ITEMS, json={"type": "podcast", "name": "X"}, headers=alice)
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_too_many_tags_rejected(self, client, make_user):
        _, alice = await make_user("alice")

        response = await client.post(
            ITEMS,
            json={"type": "book", "name": "Dune", "tags": ["a", "b", "c", "d", "e", "f"]},
            headers=alice,
        )
        assert response.status_code == 400
        assert response.json()["detail"].startswith("tags")

    @pytest.mark.asyncio
    async def test_bad_url_rejected(self, client, make_user):
        _, alice = await make_user("alice")

        response = await client.post(
            ITEMS, json={"type": "book", "name": "Dune", "url": "not a url"}, headers=alice
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_empty_url_is_none(self, client, make_user):
        _, alice = await make_user("alice")

        item = await _submit(client, alice, url="", image_url="")
        assert item["url"] is None
        assert item["image_url"] is None


class TestListItems:
    """GET /items"""

    @pytest.mark.asyncio
    async def test_filter_by_type(self, client, make_user):
        _, alice = await make_user("alice")
        await _submit(client, alice, type="book", name="Dune")
        await _submit(client, alice, type="movie", name="Alien")
        await _submit(client, alice, type="music", name="Heroes")

        response = await client.get(ITEMS, params={"type": "movie"})
        data = response.json()
        assert data["total"] == 1
        assert [item["name"] for item in data["items"]] == ["Alien"]

    @pytest.mark.asyncio
    async def test_invalid_type_filter(self, client):
        response = await client.get(ITEMS, params={"type": "podcast"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_sort_newest(self, client, session_factory, make_user):
        _, alice = await make_user("alice")
        old = await _submit(client, alice, name="Old")
        new = await _submit(client, alice, name="New")
        await _age(session_factory, old["id"], minutes=10)
        await _age(session_factory, new["id"], minutes=1)

        data = (await client.get(ITEMS, params={"sort": "newest"})).json()
        assert [item["name"] for item in data["items"]] == ["New", "Old"]

    @pytest.mark.asyncio
    async def test_sort_by_votes(self, client, make_user):
        _, alice = await make_user("alice")
        _, bob = await make_user("bob")
        _, carol = await make_user("carol")
        none = await _submit(client, alice, name="None")
        one = await _submit(client, alice, name="One")
        two = await _submit(client, alice, name="Two")

        await client.post(f"{ITEMS}/{one['id']}/vote", headers=bob)
        await client.post(f"{ITEMS}/{two['id']}/vote", headers=bob)
        await client.post(f"{ITEMS}/{two['id']}/vote", headers=carol)

        high = (await client.get(ITEMS, params={"sort": "votes-high"})).json()
        assert [item["name"] for item in high["items"]] == ["Two", "One", "None"]
        assert [item["votes"] for item in high["items"]] == [2, 1, 0]

        low = (await client.get(ITEMS, params={"sort": "votes-low"})).json()
        assert [item["name"] for item in low["items"]] == ["None", "One", "Two"]
        assert none["id"] == low["items"][0]["id"]

    @pytest.mark.asyncio
    async def test_unknown_sort_rejected(self, client):
        response = await client.get(ITEMS, params={"sort": "oldest"})
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_filter_by_username(self, client, make_user):
        _, alice = await make_user("alice", username="alice_reads")
        _, bob = await make_user("bob", username="bob")
        await _submit(client, alice, name="Dune")
        await _submit(client, bob, name="Emma")

        data = (await client.get(ITEMS, params={"username": "alice_reads"})).json()
        assert [item["name"] for item in data["items"]] == ["Dune"]
        assert data["user"] == {"username": "alice_reads", "name": "Alice", "image": None}

    @pytest.mark.asyncio
    async def test_unknown_username(self, client):
        response = await client.get(ITEMS, params={"username": "ghost"})
        assert response.status_code == 404
        assert response.json()["detail"] == "User not found"

    @pytest.mark.asyncio
    async def test_mine(self, client, make_user):
        _, alice = await make_user("alice")
        _, bob = await make_user("bob")
        await _submit(client, alice, name="Dune")
        await _submit(client, bob, name="Emma")

        data = (await client.get(ITEMS, params={"mine": "true"}, headers=bob)).json()
        assert [item["name"] for item in data["items"]] == ["Emma"]
        assert data["user"] is None

    @pytest.mark.asyncio
    async def test_mine_requires_auth(self, client):
        response = await client.get(ITEMS, params={"mine": "true"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_pagination(self, client, make_user):
        _, alice = await make_user("alice")
        for n in range(3):
            await _submit(client, alice, name=f"Book {n}")

        first = (await client.get(ITEMS, params={"per_page": 2})).json()
        assert len(first["items"]) == 2
        assert first["total"] == 3
        assert first["has_next"] is True

        second = (await client.get(ITEMS, params={"per_page": 2, "page": 2})).json()
        assert len(second["items"]) == 1
        assert second["has_next"] is False


class TestGetItem:
    """GET /items/{id}"""

    @pytest.mark.asyncio
    async def test_not_found(self, client):
        response = await client.get(f"{ITEMS}/missing")
        assert response.status_code == 404
        assert response.json() == {"error": "not_found", "detail": "Item not found"}


class TestUpdateItem:
    """PUT /items/{id}"""

    @pytest.mark.asyncio
    async def test_owner_updates_sent_fields_only(self, client, make_user):
        _, alice = await make_user("alice")
        item = await _submit(client, alice, description="Spice.", tags=["scifi"])

        response = await client.put(
            f"{ITEMS}/{item['id']}", json={"name": "Dune Messiah"}, headers=alice
        )
        assert response.status_code == 200
        updated = response.json()
        assert updated["name"] == "Dune Messiah"
        assert updated["description"] == "Spice."
        assert updated["tags"] == ["scifi"]
        assert updated["type"] == "book"

    @pytest.mark.asyncio
    async def test_clear_optional_fields(self, client, make_user):
        _, alice = await make_user("alice")
        item = await _submit(client, alice, description="Spice.", tags=["scifi"])

        updated = (await client.put(
            f"{ITEMS}/{item['id']}", json={"description": None, "tags": None}, headers=alice
        )).json()
        assert updated["description"] is None
        assert updated["tags"] == []
        assert updated["name"] == "Dune"

    @pytest.mark.asyncio
    async def test_kind_cannot_change(self, client, make_user):
        _, alice = await make_user("alice")
        item = await _submit(client, alice)

        updated = (await client.put(
            f"{ITEMS}/{item['id']}", json={"type": "movie"}, headers=alice
        )).json()
        assert updated["type"] == "book"

    @pytest.mark.asyncio
    async def test_other_user_forbidden(self, client, make_user):
        _, alice = await make_user("alice")
        _, bob = await make_user("bob")
        item = await _submit(client, alice)

        response = await client.put(f"{ITEMS}/{item['id']}", json={"name": "Mine now"}, headers=bob)
        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"

        unchanged = (await client.get(f"{ITEMS}/{item['id']}")).json()
        assert unchanged["name"] == "Dune"

    @pytest.mark.asyncio
    async def test_update_missing_item(self, client, make_user):
        _, alice = await make_user("alice")
        response = await client.put(f"{ITEMS}/missing", json={"name": "X"}, headers=alice)
        assert response.status_code == 404


class TestDeleteItem:
    """DELETE /items/{id}"""

    @pytest.mark.asyncio
    async def test_owner_deletes_with_votes(self, client, make_user):
        _, alice = await make_user("alice")
        _, bob = await make_user("bob")
        item = await _submit(client, alice)
        await client.post(f"{ITEMS}/{item['id']}/vote", headers=bob)

        response = await client.delete(f"{ITEMS}/{item['id']}", headers=alice)
        assert response.status_code == 200
        assert response.json() == {"message": "Item deleted successfully"}

        missing = await client.get(f"{ITEMS}/{item['id']}")
        assert missing.status_code == 404

        profile = (await client.get("/api/v1/profile", headers=bob)).json()
        assert profile["vote_count"] == 0

    @pytest.mark.asyncio
    async def test_other_user_forbidden(self, client, make_user):
        _, alice = await make_user("alice")
        _, bob = await make_user("bob")
        item = await _submit(client, alice)

        response = await client.delete(f"{ITEMS}/{item['id']}", headers=bob)
        assert response.status_code == 403

        still_there = await client.get(f"{ITEMS}/{item['id']}")
        assert still_there.status_code == 200


class TestHealth:

    @pytest.mark.asyncio
    async def test_root(self, client):
        data = (await client.get("/")).json()
        assert data["name"] == "Dust & Gold API"

    @pytest.mark.asyncio
    async def test_health(self, client):
        assert (await client.get("/health")).json() == {"status": "healthy"}
