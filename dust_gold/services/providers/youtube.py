import re
from typing import Optional

from dust_gold.config import get_settings
from dust_gold.schemas.provider import StandardizedResponse, YouTubeOEmbed
from dust_gold.services.providers.base import BaseProvider, ProviderError, InvalidProviderIdError

settings = get_settings()

VIDEO_URL_PATTERNS = [
    re.compile(r"(?:youtube\.com/watch\?(?:.*&)?v=|youtu\.be/)([^&\s?/]+)"),
    re.compile(r"youtube\.com/embed/([^?\s/]+)"),
    re.compile(r"youtube\.com/v/([^?\s/]+)"),
    re.compile(r"youtube\.com/shorts/([^?\s/]+)"),
]
VIDEO_ID_RE = re.compile(r"^[A-Za-z0-9_-]{11}$")


def extract_youtube_video_id(value: str) -> Optional[str]:
    """Video id from a bare id or any of the common YouTube URL forms."""
    value = value.strip()
    if VIDEO_ID_RE.match(value):
        return value
    for pattern in VIDEO_URL_PATTERNS:
        match = pattern.search(value)
        if match:
            return match.group(1)
    return None


class YouTubeProvider(BaseProvider):
    """Video metadata from YouTube's oEmbed endpoint (no API key needed)."""

    name = "YouTube"

    async def detail(self, external_id: str) -> StandardizedResponse:
        video_id = extract_youtube_video_id(external_id)
        if not video_id:
            raise InvalidProviderIdError("Invalid YouTube video URL or ID")

        watch_url = f"https://www.youtube.com/watch?v={video_id}"
        data = await self._get_json(
            settings.youtube_oembed_url,
            params={"url": watch_url, "format": "json"},
            error_message="Failed to fetch YouTube video data",
        )
        video = self._parse(YouTubeOEmbed, data)
        if not video.title:
            raise ProviderError("Video not found")

        return StandardizedResponse(
            name=video.title,
            artist=[video.author_name] if video.author_name else [],
            published_on=None,  # not part of oEmbed
            description=None,
            image_url=video.thumbnail_url or None,
            url=watch_url,
            tags=[],
            provider_id=video_id,
            type="misc",
            raw_data=data,
        )


youtube_provider = YouTubeProvider()
