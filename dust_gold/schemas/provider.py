from datetime import date
from typing import Any, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, field_validator


ProviderKind = Literal["movie", "book", "music"]


def _as_list(value: Any) -> Any:
    """Upstreams send a bare object where a one-element list is meant."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


# ============== Standardized Schemas ==============

class StandardizedResponse(BaseModel):
    """Provider record normalized into the common submission shape."""
    name: str
    artist: list[str] = []
    published_on: Optional[date] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    url: Optional[str] = None
    tags: list[str] = []
    provider_id: str
    type: Literal["movie", "book", "music", "misc"]
    raw_data: Any = None


class ProviderSearchResponse(BaseModel):
    """A page of normalized search results."""
    model_config = ConfigDict(populate_by_name=True)

    results: list[StandardizedResponse]
    total_results: int = Field(..., alias="totalResults")


# ============== OMDB (movies) ==============

class OMDBSearchItem(BaseModel):
    title: Optional[str] = Field(None, alias="Title")
    year: Optional[str] = Field(None, alias="Year")
    imdb_id: Optional[str] = Field(None, alias="imdbID")
    poster: Optional[str] = Field(None, alias="Poster")


class OMDBSearchPage(BaseModel):
    search: list[OMDBSearchItem] = Field(default_factory=list, alias="Search")
    total_results: Optional[str] = Field(None, alias="totalResults")
    response: Optional[str] = Field(None, alias="Response")
    error: Optional[str] = Field(None, alias="Error")


class OMDBMovie(BaseModel):
    title: Optional[str] = Field(None, alias="Title")
    year: Optional[str] = Field(None, alias="Year")
    released: Optional[str] = Field(None, alias="Released")
    director: Optional[str] = Field(None, alias="Director")
    genre: Optional[str] = Field(None, alias="Genre")
    plot: Optional[str] = Field(None, alias="Plot")
    poster: Optional[str] = Field(None, alias="Poster")
    imdb_id: Optional[str] = Field(None, alias="imdbID")
    response: Optional[str] = Field(None, alias="Response")
    error: Optional[str] = Field(None, alias="Error")


# ============== OpenLibrary (books) ==============

class OpenLibraryDoc(BaseModel):
    key: Optional[str] = None
    title: Optional[str] = None
    author_name: list[str] = []
    first_publish_year: Optional[int] = None
    cover_i: Optional[int] = None
    subject: list[str] = []

    @field_validator("subject", "author_name", mode="before")
    @classmethod
    def coerce_list(cls, v: Any) -> Any:
        return _as_list(v)


class OpenLibrarySearchPage(BaseModel):
    docs: list[OpenLibraryDoc] = []
    num_found: Optional[int] = Field(None, alias="numFound")


class OpenLibraryKeyRef(BaseModel):
    key: Optional[str] = None


class OpenLibraryAuthorEntry(BaseModel):
    """Entry of a work's authors list, a key reference and maybe a name."""
    author: Optional[OpenLibraryKeyRef] = None
    name: Optional[str] = None


class OpenLibraryText(BaseModel):
    value: Optional[str] = None


class OpenLibraryWork(BaseModel):
    key: Optional[str] = None
    title: Optional[str] = None
    authors: list[OpenLibraryAuthorEntry] = []
    author_name: list[str] = []
    description: Union[str, OpenLibraryText, None] = None
    covers: list[int] = []
    subjects: list[str] = []
    first_publish_date: Optional[str] = None
    publish_date: Optional[str] = None
    created: Optional[OpenLibraryText] = None
    last_modified: Optional[OpenLibraryText] = None

    @field_validator("authors", "author_name", "covers", "subjects", mode="before")
    @classmethod
    def coerce_list(cls, v: Any) -> Any:
        return _as_list(v)


# ============== Last.fm (music) ==============

class LastFmImage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: Optional[str] = Field(None, alias="#text")
    size: Optional[str] = None


class LastFmTrackMatch(BaseModel):
    name: Optional[str] = None
    artist: Optional[str] = None
    url: Optional[str] = None
    image: list[LastFmImage] = []


class LastFmTrackMatches(BaseModel):
    track: list[LastFmTrackMatch] = []

    @field_validator("track", mode="before")
    @classmethod
    def coerce_list(cls, v: Any) -> Any:
        return _as_list(v)


class LastFmSearchResults(BaseModel):
    trackmatches: Optional[LastFmTrackMatches] = None
    total_results: Optional[str] = Field(None, alias="opensearch:totalResults")


class LastFmSearchPage(BaseModel):
    results: Optional[LastFmSearchResults] = None


class LastFmArtistRef(BaseModel):
    name: Optional[str] = None


class LastFmAlbum(BaseModel):
    title: Optional[str] = None
    image: list[LastFmImage] = []


class LastFmTag(BaseModel):
    name: Optional[str] = None


class LastFmTopTags(BaseModel):
    tag: list[LastFmTag] = []

    @field_validator("tag", mode="before")
    @classmethod
    def coerce_list(cls, v: Any) -> Any:
        return _as_list(v)


class LastFmWiki(BaseModel):
    published: Optional[str] = None
    summary: Optional[str] = None
    content: Optional[str] = None


class LastFmTrack(BaseModel):
    name: Optional[str] = None
    artist: Union[LastFmArtistRef, str, None] = None
    url: Optional[str] = None
    album: Optional[LastFmAlbum] = None
    toptags: Optional[LastFmTopTags] = None
    wiki: Optional[LastFmWiki] = None

    @property
    def artist_name(self) -> Optional[str]:
        if isinstance(self.artist, LastFmArtistRef):
            return self.artist.name
        return self.artist


class LastFmTrackInfo(BaseModel):
    track: Optional[LastFmTrack] = None


# ============== YouTube oEmbed ==============

class YouTubeOEmbed(BaseModel):
    title: Optional[str] = None
    author_name: Optional[str] = None
    author_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
