from typing import Optional

from dust_gold.config import get_settings
from dust_gold.schemas.provider import (
    LastFmImage,
    LastFmSearchPage,
    LastFmTrack,
    LastFmTrackInfo,
    LastFmTrackMatch,
    ProviderSearchResponse,
    StandardizedResponse,
)
from dust_gold.services.providers.base import (
    BaseProvider,
    ProviderError,
    InvalidProviderIdError,
    parse_date,
    to_int,
)

settings = get_settings()

MAX_TAGS = 5

# Largest first
IMAGE_SIZES = ("mega", "extralarge", "large", "medium", "small")


def composite_id(artist: Optional[str], track: Optional[str]) -> str:
    """Track id in the artist:track form used as provider_id."""
    return f"{artist or ''}:{track or ''}"


def split_composite_id(external_id: str) -> tuple[str, str]:
    """
    Split an artist:track id back into its parts.

    Raises:
        InvalidProviderIdError: unless there are exactly two non-empty parts
    """
    parts = external_id.split(":")
    if len(parts) != 2 or not all(part.strip() for part in parts):
        raise InvalidProviderIdError("Invalid track ID format, expected artist:track")
    artist, track = (part.strip() for part in parts)
    return artist, track


def pick_largest_image(images: list[LastFmImage]) -> Optional[str]:
    by_size = {image.size: image.url for image in images if image.url}
    for size in IMAGE_SIZES:
        if by_size.get(size):
            return by_size[size]
    # Unknown size labels, take whatever is there
    return next(iter(by_size.values()), None)


class LastFmProvider(BaseProvider):
    """Track metadata from the Last.fm API."""

    name = "Last.fm"

    def _params(self, method: str, **params) -> dict:
        if not settings.lastfm_api_key:
            raise ProviderError("Last.fm API key not configured")
        return {"method": method, "api_key": settings.lastfm_api_key, "format": "json", **params}

    async def _call(self, method: str, **params) -> dict:
        data = await self._get_json(settings.lastfm_base_url, params=self._params(method, **params))
        # Last.fm reports failures in a 200 body
        if "error" in data:
            raise ProviderError(data.get("message") or "Last.fm API error")
        return data

    async def search(self, query: str) -> ProviderSearchResponse:
        data = await self._call("track.search", track=query)
        page = self._parse(LastFmSearchPage, data)

        matches = page.results.trackmatches if page.results else None
        if not matches or not matches.track:
            raise ProviderError("No tracks found")

        raw_tracks = data["results"]["trackmatches"]["track"]
        if not isinstance(raw_tracks, list):
            raw_tracks = [raw_tracks]

        results = [
            self._normalize_match(track, raw)
            for track, raw in zip(matches.track, raw_tracks)
        ]
        return ProviderSearchResponse(
            results=results,
            total_results=to_int(page.results.total_results, len(results)),
        )

    async def detail(self, external_id: str) -> StandardizedResponse:
        """Full track info for an artist:track composite id."""
        artist, track_name = split_composite_id(external_id)

        data = await self._call("track.getInfo", artist=artist, track=track_name)
        info = self._parse(LastFmTrackInfo, data)

        if info.track is None:
            raise ProviderError("Track not found")

        return self._normalize_track(info.track, data["track"])

    @staticmethod
    def _normalize_match(track: LastFmTrackMatch, raw: dict) -> StandardizedResponse:
        return StandardizedResponse(
            name=track.name or "",
            artist=[track.artist] if track.artist else [],
            published_on=None,
            description=None,
            image_url=pick_largest_image(track.image),
            url=track.url or None,
            tags=[],
            provider_id=composite_id(track.artist, track.name),
            type="music",
            raw_data=raw,
        )

    @staticmethod
    def _normalize_track(track: LastFmTrack, raw: dict) -> StandardizedResponse:
        tags = []
        if track.toptags:
            tags = [tag.name for tag in track.toptags.tag if tag.name][:MAX_TAGS]

        wiki = track.wiki
        description = None
        if wiki:
            description = (wiki.content or wiki.summary or "").strip() or None

        artist_name = track.artist_name
        return StandardizedResponse(
            name=track.name or "",
            artist=[artist_name] if artist_name else [],
            published_on=parse_date(wiki.published) if wiki else None,
            description=description,
            image_url=pick_largest_image(track.album.image) if track.album else None,
            url=track.url or None,
            tags=tags,
            provider_id=composite_id(artist_name, track.name),
            type="music",
            raw_data=raw,
        )


lastfm_provider = LastFmProvider()
