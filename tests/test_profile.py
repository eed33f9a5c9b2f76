"""Tests for username rules and the /profile endpoints."""
import pytest

from dust_gold.core.exceptions import ValidationException
from dust_gold.services.profile_service import validate_username

PROFILE = "/api/v1/profile"


class TestValidateUsername:
    """Username rules, checked in order."""

    @pytest.mark.parametrize("username", ["art_lover", "abc", "A1_b2", "x" * 20])
    def test_valid(self, username):
        assert validate_username(username) == username

    def test_trims_whitespace(self):
        assert validate_username("  dusty  ") == "dusty"

    @pytest.mark.parametrize("username", [None, "", "   "])
    def test_required(self, username):
        with pytest.raises(ValidationException, match="required"):
            validate_username(username)

    @pytest.mark.parametrize("username", ["ab", "x" * 21])
    def test_length(self, username):
        with pytest.raises(ValidationException, match="between 3 and 20"):
            validate_username(username)

    @pytest.mark.parametrize("username", ["art_votes", "Profile", "API", "upvoters", "items"])
    def test_reserved(self, username):
        with pytest.raises(ValidationException, match="reserved"):
            validate_username(username)

    @pytest.mark.parametrize("username", ["bad name", "dash-name", "dot.name", "émile"])
    def test_charset(self, username):
        with pytest.raises(ValidationException, match="letters, numbers, and underscores"):
            validate_username(username)


class TestProfileEndpoints:
    """GET/PUT /profile"""

    @pytest.mark.asyncio
    async def test_get_profile_counts(self, client, make_user):
        _, alice = await make_user("alice", username="alice")
        _, bob = await make_user("bob")

        item = (await client.post(
            "/api/v1/items", json={"type": "book", "name": "Dune"}, headers=alice
        )).json()
        await client.post(f"/api/v1/items/{item['id']}/vote", headers=bob)

        alice_profile = (await client.get(PROFILE, headers=alice)).json()
        assert alice_profile["id"] == "alice"
        assert alice_profile["email"] == "alice@example.com"
        assert alice_profile["item_count"] == 1
        assert alice_profile["vote_count"] == 0

        bob_profile = (await client.get(PROFILE, headers=bob)).json()
        assert bob_profile["username"] is None
        assert bob_profile["vote_count"] == 1

    @pytest.mark.asyncio
    async def test_requires_auth(self, client):
        response = await client.get(PROFILE)
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_set_valid_username(self, client, make_user):
        _, alice = await make_user("alice")

        response = await client.put(PROFILE, json={"username": "dune_fan"}, headers=alice)
        assert response.status_code == 200
        assert response.json()["username"] == "dune_fan"

        again = (await client.get(PROFILE, headers=alice)).json()
        assert again["username"] == "dune_fan"

    @pytest.mark.asyncio
    async def test_too_short(self, client, make_user):
        _, alice = await make_user("alice")

        response = await client.put(PROFILE, json={"username": "ab"}, headers=alice)
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_reserved(self, client, make_user):
        _, alice = await make_user("alice")

        response = await client.put(PROFILE, json={"username": "art_votes"}, headers=alice)
        assert response.status_code == 400
        assert response.json() == {"error": "validation_error", "detail": "Username is reserved"}

    @pytest.mark.asyncio
    async def test_taken_by_other_user(self, client, make_user):
        await make_user("alice", username="taken_name")
        _, bob = await make_user("bob")

        response = await client.put(PROFILE, json={"username": "taken_name"}, headers=bob)
        assert response.status_code == 400
        assert response.json()["detail"] == "Username is already taken"

    @pytest.mark.asyncio
    async def test_keep_own_username(self, client, make_user):
        _, alice = await make_user("alice", username="alice_1")

        response = await client.put(PROFILE, json={"username": "alice_1"}, headers=alice)
        assert response.status_code == 200
        assert response.json()["username"] == "alice_1"

    @pytest.mark.asyncio
    async def test_missing_username(self, client, make_user):
        _, alice = await make_user("alice")

        response = await client.put(PROFILE, json={}, headers=alice)
        assert response.status_code == 400
        assert response.json()["detail"] == "Username is required"
