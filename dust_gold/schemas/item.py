from datetime import date, datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field, HttpUrl, field_validator


ItemKind = Literal["music", "book", "movie", "misc"]
SortOption = Literal["newest", "votes-high", "votes-low"]

MAX_ARTISTS = 5
MAX_TAGS = 5


def _strip_list(values: Optional[list[str]]) -> list[str]:
    if not values:
        return []
    return [value.strip() for value in values if value and value.strip()]


# ============== Item Schemas ==============

class ItemFields(BaseModel):
    """Editable item fields shared by create and update."""
    description: Optional[str] = Field(None, max_length=5000)
    url: Optional[HttpUrl] = None
    image_url: Optional[HttpUrl] = None
    artist: Optional[list[str]] = Field(None, max_length=MAX_ARTISTS)
    tags: Optional[list[str]] = Field(None, max_length=MAX_TAGS)
    published_on: Optional[date] = None

    @field_validator("url", "image_url", "description", mode="before")
    @classmethod
    def empty_as_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("artist", "tags")
    @classmethod
    def strip_entries(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        return None if v is None else _strip_list(v)


class ItemCreate(ItemFields):
    """
    Schema for submitting an item.

    The owner is always the caller; any owner or vote fields sent by the
    client are ignored.
    """
    type: ItemKind
    name: str = Field(..., min_length=1, max_length=500)
    provider_id: Optional[str] = Field(None, max_length=500)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Name is required")
        return v.strip()


class ItemUpdate(ItemFields):
    """Schema for updating an item. Kind, owner and votes are not editable."""
    name: Optional[str] = Field(None, min_length=1, max_length=500)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if not v.strip():
            raise ValueError("Name is required")
        return v.strip()


class Upvoter(BaseModel):
    """Public identity of a user who upvoted an item."""
    id: str
    name: Optional[str] = None
    username: Optional[str] = None
    image: Optional[str] = None


class ItemResponse(BaseModel):
    """Schema for item response."""
    id: str
    type: ItemKind
    name: str
    description: Optional[str] = None
    url: Optional[str] = None
    image_url: Optional[str] = None
    artist: list[str] = []
    tags: list[str] = []
    published_on: Optional[date] = None
    provider_id: Optional[str] = None
    submitted_by: str
    created_at: datetime

    # Vote stats, derived from the vote table
    votes: int = 0
    voted: Optional[bool] = None  # Whether the current user voted
    upvoters: list[Upvoter] = []


class PublicUser(BaseModel):
    """Public profile fields shown on a user's item page."""
    username: str
    name: Optional[str] = None
    image: Optional[str] = None


class ItemListResponse(BaseModel):
    """Schema for item listings."""
    items: list[ItemResponse]
    total: int
    page: int
    per_page: int
    has_next: bool
    user: Optional[PublicUser] = None  # Set when filtering by username


# ============== Vote Schemas ==============

class VoteResponse(BaseModel):
    """Schema for vote toggle response."""
    item_id: str
    voted: bool
    votes: int
