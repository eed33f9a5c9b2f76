"""Tests for session token handling."""
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from dust_gold.config import get_settings
from dust_gold.core.security import create_access_token, decode_token, verify_access_token

settings = get_settings()


class TestSessionTokens:

    def test_round_trip_subject(self):
        token = create_access_token("user-123", email="user@example.com")
        payload = decode_token(token)

        assert payload["sub"] == "user-123"
        assert payload["aud"] == "authenticated"
        assert payload["email"] == "user@example.com"
        assert verify_access_token(token) == "user-123"

    def test_expired(self):
        token = create_access_token("user-123", expires_delta=timedelta(seconds=-5))
        assert decode_token(token) is None

    def test_wrong_secret(self):
        token = jwt.encode(
            {"sub": "user-123", "aud": "authenticated", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
            "some-other-secret",
            algorithm=settings.jwt_algorithm,
        )
        assert verify_access_token(token) is None

    def test_wrong_audience(self):
        token = jwt.encode(
            {"sub": "user-123", "aud": "anon", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
            settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
        )
        assert decode_token(token) is None

    def test_garbage(self):
        assert verify_access_token("not.a.token") is None


class TestAuthDependency:

    @pytest.mark.asyncio
    async def test_unknown_user_token(self, client):
        token = create_access_token("nobody")
        response = await client.get("/api/v1/profile", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert response.json() == {"error": "unauthorized", "detail": "Invalid or expired session"}
        assert response.headers["www-authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_optional_user_ignores_bad_token(self, client):
        response = await client.get("/api/v1/items", headers={"Authorization": "Bearer junk"})
        assert response.status_code == 200
