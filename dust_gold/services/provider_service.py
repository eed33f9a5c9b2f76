import logging

from dust_gold.config import get_settings
from dust_gold.schemas.provider import ProviderSearchResponse, StandardizedResponse
from dust_gold.services.cache_service import CacheService, CacheKeys
from dust_gold.services.providers.base import BaseProvider
from dust_gold.services.providers.lastfm import lastfm_provider
from dust_gold.services.providers.omdb import omdb_provider
from dust_gold.services.providers.openlibrary import openlibrary_provider
from dust_gold.services.providers.youtube import youtube_provider

logger = logging.getLogger(__name__)
settings = get_settings()


class ProviderService:
    """One search/detail interface over the movie, book and music providers."""

    def __init__(self, providers: dict[str, BaseProvider]):
        self._providers = providers

    @property
    def kinds(self) -> tuple[str, ...]:
        return tuple(self._providers)

    def _get(self, kind: str) -> BaseProvider:
        try:
            return self._providers[kind]
        except KeyError:
            raise ValueError(f"Unsupported provider type: {kind}") from None

    async def search(self, kind: str, query: str) -> ProviderSearchResponse:
        """
        Search the provider for `kind`.

        Successful pages are cached; failures never are.

        Raises:
            ProviderError: upstream failure or no results
        """
        provider = self._get(kind)
        cache_key = f"{CacheKeys.PROVIDER_SEARCH}{kind}:{query.strip().lower()}"

        cached = await CacheService.get_json(cache_key)
        if cached:
            return ProviderSearchResponse.model_validate(cached)

        page = await provider.search(query.strip())
        logger.info(f"[ProviderService] {provider.name} search '{query}' -> {len(page.results)} results")

        await CacheService.set_json(
            cache_key,
            page.model_dump(mode="json", by_alias=True),
            ttl=settings.provider_search_cache_ttl,
        )
        return page

    async def detail(self, kind: str, external_id: str) -> StandardizedResponse:
        """
        Look up one record by its external id.

        Raises:
            InvalidProviderIdError: malformed id
            ProviderError: upstream failure or not found
        """
        provider = self._get(kind)
        return await provider.detail(external_id)

    async def youtube(self, video: str) -> StandardizedResponse:
        """Look up a YouTube video by id or URL."""
        return await youtube_provider.detail(video)


provider_service = ProviderService({
    "movie": omdb_provider,
    "book": openlibrary_provider,
    "music": lastfm_provider,
})
