from typing import Optional

from dust_gold.config import get_settings
from dust_gold.schemas.provider import (
    OMDBMovie,
    OMDBSearchItem,
    OMDBSearchPage,
    ProviderSearchResponse,
    StandardizedResponse,
)
from dust_gold.services.providers.base import (
    BaseProvider,
    ProviderError,
    InvalidProviderIdError,
    parse_date,
    to_int,
    year_to_date,
)

settings = get_settings()

# OMDB fills every missing field with this sentinel
NO_DATA = "N/A"


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value or value == NO_DATA:
        return None
    return value


def _split_names(value: Optional[str]) -> list[str]:
    value = _clean(value)
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def _imdb_url(imdb_id: Optional[str]) -> Optional[str]:
    return f"https://www.imdb.com/title/{imdb_id}" if imdb_id else None


class OMDBProvider(BaseProvider):
    """Movie metadata from the OMDB API."""

    name = "OMDB"

    def _api_key(self) -> str:
        if not settings.omdb_api_key:
            raise ProviderError("OMDB API key not configured")
        return settings.omdb_api_key

    async def search(self, query: str) -> ProviderSearchResponse:
        """
        Search movies by title.

        Search results never carry the director, so artist is always empty.
        """
        data = await self._get_json(
            settings.omdb_base_url,
            params={"apikey": self._api_key(), "s": query, "type": "movie"},
        )
        page = self._parse(OMDBSearchPage, data)

        if page.response == "False" or not page.search:
            raise ProviderError(page.error or "No results found")

        raw_items = data.get("Search") or []
        results = [
            self._normalize_search_item(movie, raw)
            for movie, raw in zip(page.search, raw_items)
        ]
        return ProviderSearchResponse(
            results=results,
            total_results=to_int(page.total_results, len(results)),
        )

    async def detail(self, external_id: str) -> StandardizedResponse:
        """Get full movie info by IMDB id."""
        imdb_id = external_id.strip()
        if not imdb_id:
            raise InvalidProviderIdError("Movie ID is required")

        data = await self._get_json(
            settings.omdb_base_url,
            params={"apikey": self._api_key(), "i": imdb_id, "plot": "short"},
        )
        movie = self._parse(OMDBMovie, data)

        if movie.response == "False":
            raise ProviderError(movie.error or "Movie not found")

        return StandardizedResponse(
            name=_clean(movie.title) or "",
            artist=_split_names(movie.director),
            published_on=parse_date(_clean(movie.released)) or year_to_date(_clean(movie.year)),
            description=_clean(movie.plot),
            image_url=_clean(movie.poster),
            url=_imdb_url(movie.imdb_id),
            tags=_split_names(movie.genre),
            provider_id=movie.imdb_id or "",
            type="movie",
            raw_data=data,
        )

    @staticmethod
    def _normalize_search_item(movie: OMDBSearchItem, raw: dict) -> StandardizedResponse:
        return StandardizedResponse(
            name=_clean(movie.title) or "",
            artist=[],
            published_on=year_to_date(_clean(movie.year)),
            description=None,
            image_url=_clean(movie.poster),
            url=_imdb_url(movie.imdb_id),
            tags=[],
            provider_id=movie.imdb_id or "",
            type="movie",
            raw_data=raw,
        )


omdb_provider = OMDBProvider()
