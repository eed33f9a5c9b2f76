"""
Global HTTP Client with connection pooling for provider API calls.

All upstream requests (OMDB, OpenLibrary, Last.fm, YouTube) go through one
shared client so TCP connections are reused and timeouts stay consistent.
"""
import httpx
from typing import Optional


class HTTPClientManager:
    """Manages a global httpx.AsyncClient with connection pooling."""

    _client: Optional[httpx.AsyncClient] = None

    @classmethod
    def get_client(cls) -> httpx.AsyncClient:
        """
        Get or create the global HTTP client.

        The client is created lazily on first use but then reused.
        """
        if cls._client is None:
            cls._client = httpx.AsyncClient(
                limits=httpx.Limits(
                    max_keepalive_connections=20,
                    max_connections=50,
                    keepalive_expiry=30.0,  # Close idle connections after 30s
                ),
                # Fail fast, there are no retries
                timeout=httpx.Timeout(
                    connect=5.0,
                    read=15.0,
                    write=10.0,
                    pool=5.0,
                ),
                http2=True,
                follow_redirects=True,
                headers={"User-Agent": "DustAndGold/1.0"},
            )
        return cls._client

    @classmethod
    def set_client(cls, client: Optional[httpx.AsyncClient]) -> None:
        """Install a specific client (e.g. one with a mock transport)."""
        cls._client = client

    @classmethod
    async def close(cls) -> None:
        """Close the HTTP client. Call this on app shutdown."""
        if cls._client is not None:
            await cls._client.aclose()
            cls._client = None

    @classmethod
    async def warmup(cls) -> None:
        """Create the client early, called from the app lifespan startup."""
        cls.get_client()


def get_http_client() -> httpx.AsyncClient:
    """Get the global HTTP client instance."""
    return HTTPClientManager.get_client()
