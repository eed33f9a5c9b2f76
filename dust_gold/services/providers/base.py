"""
Shared plumbing for the metadata providers.

Each provider fetches an upstream payload, parses it into its own typed
shape (see dust_gold.schemas.provider) and normalizes that into a
StandardizedResponse before anything else sees it.
"""
import logging
import re
from datetime import date, datetime
from typing import Any, Optional, TypeVar

import httpx
from dateutil import parser as date_parser
from pydantic import BaseModel, ValidationError

from dust_gold.schemas.provider import ProviderSearchResponse, StandardizedResponse
from dust_gold.services.http_client import get_http_client

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Missing month/day in lenient dates resolve to January 1st
_DATE_DEFAULT = datetime(2000, 1, 1)
_YEAR_RE = re.compile(r"\d{4}")


class ProviderError(Exception):
    """Upstream failure or an upstream-reported "no results"."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidProviderIdError(ProviderError):
    """External id that cannot be used for a detail lookup."""


def parse_date(value: Any) -> Optional[date]:
    """
    Parse a free-form upstream date, None when absent or unparseable.

    A four-digit year is required; month and day may be missing.
    """
    if value is None:
        return None
    text = str(value).strip()
    if not text or text == "N/A" or not _YEAR_RE.search(text):
        return None
    try:
        return date_parser.parse(text, default=_DATE_DEFAULT).date()
    except (ValueError, OverflowError):
        return None


def year_to_date(value: Any) -> Optional[date]:
    """January 1st of the first four-digit year found in value."""
    if value is None:
        return None
    match = _YEAR_RE.search(str(value))
    if not match:
        return None
    year = int(match.group())
    if year < 1:
        return None
    return date(year, 1, 1)


def to_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


class BaseProvider:
    """Base class for metadata providers."""

    name = "provider"

    async def _get_json(
        self,
        url: str,
        params: Optional[dict] = None,
        error_message: Optional[str] = None,
    ) -> dict:
        """
        GET a JSON document from the upstream.

        Raises:
            ProviderError: on transport failure, non-success status or invalid JSON
        """
        error_message = error_message or f"Failed to fetch from {self.name} API"
        client = get_http_client()

        try:
            response = await client.get(url, params=params)
        except httpx.HTTPError as e:
            logger.warning(f"[{self.name}] Request to {url} failed: {e}")
            raise ProviderError(error_message) from e

        if not response.is_success:
            logger.warning(f"[{self.name}] {url} returned {response.status_code}")
            raise ProviderError(error_message)

        try:
            payload = response.json()
        except ValueError as e:
            logger.warning(f"[{self.name}] {url} returned invalid JSON")
            raise ProviderError(error_message) from e

        if not isinstance(payload, dict):
            raise ProviderError(error_message)
        return payload

    def _parse(self, model: type[ModelT], data: dict) -> ModelT:
        """Validate an upstream payload into its typed shape."""
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.warning(f"[{self.name}] Unexpected payload shape: {e}")
            raise ProviderError(f"Unexpected response from {self.name} API") from e

    async def search(self, query: str) -> ProviderSearchResponse:
        raise NotImplementedError

    async def detail(self, external_id: str) -> StandardizedResponse:
        raise NotImplementedError
