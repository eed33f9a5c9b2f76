"""
Redis Cache Service for Dust & Gold.

Provides a simple interface for caching data with TTL support. Every Redis
failure is treated as a cache miss; with no REDIS_URL configured the cache
is a no-op.
"""
import json
import logging
from typing import Any

import redis.asyncio as redis

from dust_gold.config import get_settings

logger = logging.getLogger(__name__)


class CacheService:
    """Redis cache service with async support."""

    _client: redis.Redis | None = None

    @classmethod
    async def get_client(cls) -> redis.Redis | None:
        """Get or create Redis client connection, None when caching is off."""
        if cls._client is None:
            settings = get_settings()
            if not settings.redis_url:
                return None
            cls._client = redis.from_url(
                settings.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
        return cls._client

    @classmethod
    async def get(cls, key: str) -> str | None:
        """Get a value from cache."""
        try:
            client = await cls.get_client()
            if client is None:
                return None
            return await client.get(key)
        except Exception as e:
            logger.warning(f"[CacheService] get {key} failed: {e}")
            return None

    @classmethod
    async def set(cls, key: str, value: str, ttl: int = 300) -> bool:
        """
        Set a value in cache with TTL.

        Args:
            key: Cache key
            value: Value to store (string)
            ttl: Time to live in seconds (default 5 minutes)

        Returns:
            True if successful, False otherwise
        """
        try:
            client = await cls.get_client()
            if client is None:
                return False
            await client.set(key, value, ex=ttl)
            return True
        except Exception as e:
            logger.warning(f"[CacheService] set {key} failed: {e}")
            return False

    @classmethod
    async def get_json(cls, key: str) -> Any | None:
        """Get a JSON value from cache."""
        value = await cls.get(key)
        if value:
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                return None
        return None

    @classmethod
    async def set_json(cls, key: str, value: Any, ttl: int = 300) -> bool:
        """Set a JSON value in cache."""
        try:
            return await cls.set(key, json.dumps(value, default=str), ttl)
        except (TypeError, ValueError):
            return False

    @classmethod
    async def close(cls) -> None:
        """Close Redis connection."""
        if cls._client:
            await cls._client.aclose()
            cls._client = None


# Cache key prefixes
class CacheKeys:
    """Cache key prefixes for different data types."""

    PROVIDER_SEARCH = "provider:search:"  # TTL: 1 hour
