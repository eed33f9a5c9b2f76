from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Dust & Gold API"
    debug: bool = False
    api_v1_prefix: str = "/api/v1"
    cors_origins: list[str] = ["http://localhost:3000"]

    # Database
    database_url: str

    # Session tokens (signed by the auth provider with the shared secret)
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    jwt_audience: str = "authenticated"
    access_token_expire_minutes: int = 60

    # Redis (caching is disabled when unset)
    redis_url: Optional[str] = None

    # OMDB (movies)
    omdb_api_key: Optional[str] = None
    omdb_base_url: str = "https://www.omdbapi.com/"

    # OpenLibrary (books, no key required)
    openlibrary_base_url: str = "https://openlibrary.org"
    openlibrary_covers_url: str = "https://covers.openlibrary.org/b/id"

    # Last.fm (music)
    lastfm_api_key: Optional[str] = None
    lastfm_base_url: str = "https://ws.audioscrobbler.com/2.0/"

    # YouTube oEmbed (no key required)
    youtube_oembed_url: str = "https://www.youtube.com/oembed"

    # Provider search cache
    provider_search_cache_ttl: int = 3600


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
