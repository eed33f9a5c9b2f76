import logging
from typing import Optional, Union

from fastapi import APIRouter, Query

from dust_gold.schemas.provider import ProviderSearchResponse, StandardizedResponse
from dust_gold.core.exceptions import ValidationException, UpstreamException
from dust_gold.services.provider_service import provider_service
from dust_gold.services.providers.base import ProviderError, InvalidProviderIdError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "",
    response_model=Union[ProviderSearchResponse, StandardizedResponse],
    summary="Search an external catalogue",
)
async def provider_search(
    type: Optional[str] = Query(None, description="movie, book or music"),
    query: Optional[str] = Query(None, description="Free-text search"),
    id: Optional[str] = Query(None, description="External id for a detail lookup"),
):
    """
    Search OMDB, OpenLibrary or Last.fm, or fetch one record by id.

    With `id` the response is a single standardized record, otherwise a
    page of results. Music ids have the form `artist:track`.
    """
    if not (query and query.strip()) and not (id and id.strip()):
        raise ValidationException("Query or ID is required")

    if type not in provider_service.kinds:
        raise ValidationException("Valid type (movie, book, or music) is required")

    try:
        if id and id.strip():
            return await provider_service.detail(type, id.strip())
        return await provider_service.search(type, query)
    except InvalidProviderIdError as e:
        raise ValidationException(e.message)
    except ProviderError as e:
        logger.warning(f"[ProviderSearch] {type} lookup failed: {e.message}")
        raise UpstreamException(e.message)


@router.get(
    "/youtube",
    response_model=StandardizedResponse,
    summary="Look up a YouTube video",
)
async def youtube_lookup(
    video: str = Query(..., min_length=1, description="Video id or URL"),
):
    """Fetch title, channel and thumbnail for a YouTube video."""
    try:
        return await provider_service.youtube(video)
    except InvalidProviderIdError as e:
        raise ValidationException(e.message)
    except ProviderError as e:
        logger.warning(f"[ProviderSearch] YouTube lookup failed: {e.message}")
        raise UpstreamException(e.message)
