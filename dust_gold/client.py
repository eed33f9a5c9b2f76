"""
Python client for the Dust & Gold API.

- DustGoldClient: async HTTP wrapper that raises ApiError on error responses
- FeedState: the feed's filter/sort/search selection plus loaded items
- LatestQuery: debounced search where only the newest query's result lands
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar, Union, get_args

import httpx

from dust_gold.schemas.item import (
    ItemCreate,
    ItemKind,
    ItemUpdate,
    ItemListResponse,
    ItemResponse,
    SortOption,
    Upvoter,
    VoteResponse,
)
from dust_gold.schemas.provider import ProviderSearchResponse, StandardizedResponse
from dust_gold.schemas.user import ProfileResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")

FEED_KINDS = ("all", *get_args(ItemKind))
FEED_SORTS = get_args(SortOption)


# ============== Errors ==============

class ApiError(Exception):
    """An error response from the API, carrying its classification."""

    def __init__(self, status_code: int, error: str, detail: str):
        self.status_code = status_code
        self.error = error
        self.detail = detail
        super().__init__(f"{status_code} {error}: {detail}")


# ============== HTTP Client ==============

class DustGoldClient:
    """
    Async client for the HTTP API.

    Pass `client` to reuse an existing httpx.AsyncClient (for example one
    built on an ASGI transport); otherwise one is created for `base_url`.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        token: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        api_prefix: str = "/api/v1",
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=15.0)
        self._prefix = api_prefix.rstrip("/")
        self.token = token

    async def __aenter__(self) -> "DustGoldClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        response = await self._client.request(
            method,
            f"{self._prefix}{path}",
            headers=self._headers(),
            **kwargs,
        )
        if response.is_success:
            return response.json()

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        error = body.get("error") or "http_error"
        detail = body.get("detail") or response.reason_phrase or "Request failed"
        logger.debug(f"[DustGoldClient] {method} {path} -> {response.status_code} {error}")
        raise ApiError(response.status_code, error, str(detail))

    # Items

    async def list_items(
        self,
        kind: Optional[str] = None,
        sort: str = "newest",
        username: Optional[str] = None,
        mine: bool = False,
        page: int = 1,
        per_page: int = 50,
    ) -> ItemListResponse:
        params = {"sort": sort, "page": page, "per_page": per_page}
        if kind and kind != "all":
            params["type"] = kind
        if username:
            params["username"] = username
        if mine:
            params["mine"] = "true"
        data = await self._request("GET", "/items", params=params)
        return ItemListResponse.model_validate(data)

    async def get_item(self, item_id: str) -> ItemResponse:
        data = await self._request("GET", f"/items/{item_id}")
        return ItemResponse.model_validate(data)

    async def create_item(self, item: Union[ItemCreate, dict]) -> ItemResponse:
        if isinstance(item, dict):
            item = ItemCreate.model_validate(item)
        data = await self._request(
            "POST", "/items", json=item.model_dump(mode="json", exclude_none=True)
        )
        return ItemResponse.model_validate(data)

    async def update_item(self, item_id: str, changes: Union[ItemUpdate, dict]) -> ItemResponse:
        if isinstance(changes, dict):
            changes = ItemUpdate.model_validate(changes)
        data = await self._request(
            "PUT", f"/items/{item_id}", json=changes.model_dump(mode="json", exclude_unset=True)
        )
        return ItemResponse.model_validate(data)

    async def delete_item(self, item_id: str) -> str:
        data = await self._request("DELETE", f"/items/{item_id}")
        return data["message"]

    async def vote(self, item_id: str) -> VoteResponse:
        data = await self._request("POST", f"/items/{item_id}/vote")
        return VoteResponse.model_validate(data)

    # Providers

    async def search_provider(self, kind: str, query: str) -> ProviderSearchResponse:
        data = await self._request("GET", "/provider-search", params={"type": kind, "query": query})
        return ProviderSearchResponse.model_validate(data)

    async def provider_detail(self, kind: str, external_id: str) -> StandardizedResponse:
        data = await self._request("GET", "/provider-search", params={"type": kind, "id": external_id})
        return StandardizedResponse.model_validate(data)

    async def youtube(self, video: str) -> StandardizedResponse:
        data = await self._request("GET", "/provider-search/youtube", params={"video": video})
        return StandardizedResponse.model_validate(data)

    # Profile

    async def get_profile(self) -> ProfileResponse:
        data = await self._request("GET", "/profile")
        return ProfileResponse.model_validate(data)

    async def set_username(self, username: str) -> ProfileResponse:
        data = await self._request("PUT", "/profile", json={"username": username})
        return ProfileResponse.model_validate(data)


# ============== Feed State ==============

@dataclass
class FeedState:
    """
    Selection and content of an item feed.

    Owned by whoever renders the feed and passed to the code that changes
    it; there is no shared module-level instance.
    """
    kind: str = "all"
    sort: str = "newest"
    search: str = ""
    items: list[ItemResponse] = field(default_factory=list)

    def select_kind(self, kind: str) -> None:
        if kind not in FEED_KINDS:
            raise ValueError(f"Unknown item kind: {kind}")
        self.kind = kind

    def set_sort(self, sort: str) -> None:
        if sort not in FEED_SORTS:
            raise ValueError(f"Unknown sort option: {sort}")
        self.sort = sort

    def set_search(self, text: str) -> None:
        self.search = text.strip()

    def replace_items(self, items: list[ItemResponse]) -> None:
        self.items = list(items)

    def add_item(self, item: ItemResponse) -> None:
        self.items.append(item)

    def remove_item(self, item_id: str) -> None:
        self.items = [item for item in self.items if item.id != item_id]

    def apply_vote(self, result: VoteResponse, voter: Optional[Upvoter] = None) -> Optional[ItemResponse]:
        """
        Apply a vote toggle result to the matching item.

        The server's count is taken as-is. When `voter` is given the
        upvoter list is updated as well. Returns the updated item, or None
        if it isn't loaded.
        """
        for index, item in enumerate(self.items):
            if item.id != result.item_id:
                continue

            upvoters = item.upvoters
            if voter is not None:
                upvoters = [u for u in upvoters if u.id != voter.id]
                if result.voted:
                    upvoters.append(voter)

            updated = item.model_copy(update={
                "votes": result.votes,
                "voted": result.voted,
                "upvoters": upvoters,
            })
            self.items[index] = updated
            return updated
        return None

    def _matches_search(self, item: ItemResponse) -> bool:
        if not self.search:
            return True
        needle = self.search.lower()
        haystack = [item.name, *(item.artist or []), *(item.tags or [])]
        return any(needle in value.lower() for value in haystack if value)

    def visible_items(self) -> list[ItemResponse]:
        """Items passing the kind filter and search text, in sort order."""
        items = [
            item for item in self.items
            if (self.kind == "all" or item.type == self.kind) and self._matches_search(item)
        ]
        if self.sort == "votes-high":
            return sorted(items, key=lambda item: item.votes, reverse=True)
        if self.sort == "votes-low":
            return sorted(items, key=lambda item: item.votes)
        return sorted(items, key=lambda item: item.created_at, reverse=True)


# ============== Latest Query ==============

class LatestQuery(Generic[T]):
    """
    Debounced, cancellable query runner.

    Each submit() schedules `fetch(value)` after `delay` seconds and cancels
    whatever was pending. A result is only handed to `on_result` if no newer
    submission happened while it was in flight.
    """

    def __init__(
        self,
        fetch: Callable[[str], Awaitable[T]],
        on_result: Callable[[T], None],
        delay: float = 0.5,
        on_error: Optional[Callable[[Exception], None]] = None,
    ):
        self._fetch = fetch
        self._on_result = on_result
        self._on_error = on_error
        self.delay = delay
        self._task: Optional[asyncio.Task] = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def submit(self, value: str) -> asyncio.Task:
        self.cancel()
        self._generation += 1
        self._task = asyncio.create_task(self._run(value, self._generation))
        return self._task

    def cancel(self) -> None:
        if self._task and not self._task.done():
            self._task.cancel()

    async def wait(self) -> None:
        """Wait for the most recent submission to settle."""
        if self._task is None:
            return
        try:
            await self._task
        except asyncio.CancelledError:
            pass

    async def _run(self, value: str, generation: int) -> None:
        await asyncio.sleep(self.delay)
        try:
            result = await self._fetch(value)
        except Exception as e:
            if generation != self._generation:
                logger.debug(f"[LatestQuery] Dropping stale error for '{value}': {e}")
                return
            if self._on_error is None:
                raise
            self._on_error(e)
            return

        if generation != self._generation:
            logger.debug(f"[LatestQuery] Dropping stale result for '{value}'")
            return
        self._on_result(result)
