import asyncio
import logging
from typing import Optional

from dust_gold.config import get_settings
from dust_gold.schemas.provider import (
    OpenLibraryAuthorEntry,
    OpenLibraryDoc,
    OpenLibrarySearchPage,
    OpenLibraryText,
    OpenLibraryWork,
    ProviderSearchResponse,
    StandardizedResponse,
)
from dust_gold.services.providers.base import (
    BaseProvider,
    ProviderError,
    InvalidProviderIdError,
    parse_date,
    year_to_date,
)

logger = logging.getLogger(__name__)
settings = get_settings()

MAX_TAGS = 5


def _work_id(key: Optional[str]) -> str:
    if not key:
        return ""
    return key.replace("/works/", "").strip("/")


def _work_url(key: Optional[str]) -> Optional[str]:
    return f"{settings.openlibrary_base_url}{key}" if key else None


def _cover_url(cover_id: Optional[int]) -> Optional[str]:
    # OpenLibrary uses -1 for "no cover"
    if cover_id is None or cover_id <= 0:
        return None
    return f"{settings.openlibrary_covers_url}/{cover_id}-M.jpg"


class OpenLibraryProvider(BaseProvider):
    """Book metadata from the OpenLibrary API."""

    name = "OpenLibrary"

    async def search(self, query: str) -> ProviderSearchResponse:
        """Full-text search over works."""
        data = await self._get_json(
            f"{settings.openlibrary_base_url}/search.json",
            params={"q": query},
        )
        page = self._parse(OpenLibrarySearchPage, data)

        if not page.docs:
            raise ProviderError("No books found")

        raw_docs = data.get("docs") or []
        results = [
            self._normalize_doc(doc, raw)
            for doc, raw in zip(page.docs, raw_docs)
        ]
        return ProviderSearchResponse(
            results=results,
            total_results=page.num_found or len(results),
        )

    async def detail(self, external_id: str) -> StandardizedResponse:
        """
        Get a single work, resolving author references to names.

        Author lookups run concurrently and each one is isolated: a failed
        lookup only drops that author's resolved name.
        """
        work_id = _work_id(external_id.strip())
        if not work_id:
            raise InvalidProviderIdError("Book ID is required")

        data = await self._get_json(
            f"{settings.openlibrary_base_url}/works/{work_id}.json",
            error_message="Failed to fetch book details from OpenLibrary API",
        )
        work = self._parse(OpenLibraryWork, data)

        if work.author_name:
            authors = [name for name in work.author_name if name]
        else:
            names = await asyncio.gather(*[
                self._resolve_author(entry) for entry in work.authors
            ])
            authors = [name for name in names if name]

        return StandardizedResponse(
            name=work.title or "",
            artist=authors,
            published_on=self._published_on(work),
            description=self._description(work.description),
            image_url=next((url for url in map(_cover_url, work.covers) if url), None),
            url=_work_url(work.key),
            tags=work.subjects[:MAX_TAGS],
            provider_id=_work_id(work.key),
            type="book",
            raw_data=data,
        )

    async def _resolve_author(self, entry: OpenLibraryAuthorEntry) -> Optional[str]:
        """Name for one author entry, falling back to what the work already had."""
        if entry.author and entry.author.key:
            author_id = entry.author.key.rstrip("/").split("/")[-1]
            name = await self._fetch_author_name(author_id)
            if name:
                return name
        return entry.name

    async def _fetch_author_name(self, author_id: str) -> Optional[str]:
        try:
            data = await self._get_json(f"{settings.openlibrary_base_url}/authors/{author_id}.json")
        except ProviderError:
            logger.warning(f"[OpenLibrary] Failed to fetch author details for {author_id}")
            return None

        name = data.get("name")
        return name if isinstance(name, str) and name.strip() else None

    @staticmethod
    def _published_on(work: OpenLibraryWork):
        """First parseable of first_publish_date, publish_date, created, last_modified."""
        candidates = [
            work.first_publish_date,
            work.publish_date,
            work.created.value if work.created else None,
            work.last_modified.value if work.last_modified else None,
        ]
        for candidate in candidates:
            published = parse_date(candidate)
            if published:
                return published
        return None

    @staticmethod
    def _description(description: str | OpenLibraryText | None) -> Optional[str]:
        if isinstance(description, OpenLibraryText):
            return description.value or None
        return description or None

    @staticmethod
    def _normalize_doc(doc: OpenLibraryDoc, raw: dict) -> StandardizedResponse:
        return StandardizedResponse(
            name=doc.title or "",
            artist=[name for name in doc.author_name if name],
            published_on=year_to_date(doc.first_publish_year),
            description=None,
            image_url=_cover_url(doc.cover_i),
            url=_work_url(doc.key),
            tags=doc.subject[:MAX_TAGS],
            provider_id=_work_id(doc.key),
            type="book",
            raw_data=raw,
        )


openlibrary_provider = OpenLibraryProvider()
