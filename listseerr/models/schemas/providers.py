"""List Provider API Models Module."""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

__all__ = [
    "AnilistList",
    "AnilistListEntry",
    "AnilistMedia",
    "AnilistMediaListCollection",
    "AnilistTitle",
    "AnimeIdEntry",
    "MdbListItem",
    "StevenLuMovie",
    "TraktChartEntry",
    "TraktIds",
    "TraktListEntry",
    "TraktMedia",
]


class ProviderBaseModel(BaseModel):
    """Base model for provider payloads, tolerant of unknown keys."""

    model_config = ConfigDict(extra="ignore")


class MdbListItem(ProviderBaseModel):
    """An entry of the MDBList unified list items endpoint."""

    id: int | None = None
    title: str = ""
    release_year: int | None = None
    mediatype: str = "movie"


class TraktIds(ProviderBaseModel):
    """External identifiers Trakt attaches to every movie and show."""

    trakt: int | None = None
    slug: str | None = None
    imdb: str | None = None
    tmdb: int | None = None


class TraktMedia(ProviderBaseModel):
    """A Trakt movie or show summary."""

    title: str = ""
    year: int | None = None
    ids: TraktIds = Field(default_factory=TraktIds)


class TraktListEntry(ProviderBaseModel):
    """An entry of a Trakt user list."""

    type: Literal["movie", "show", "season", "episode", "person"]
    movie: TraktMedia | None = None
    show: TraktMedia | None = None


class TraktChartEntry(ProviderBaseModel):
    """A wrapped entry of a Trakt chart (trending, anticipated, etc.)."""

    movie: TraktMedia | None = None
    show: TraktMedia | None = None


class StevenLuMovie(ProviderBaseModel):
    """An entry of the StevenLu popular movies feed."""

    title: str = ""
    tmdb_id: int | None = None
    imdb_id: str | None = None


class AnilistBaseModel(ProviderBaseModel):
    """Base model for AniList GraphQL objects, which use camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )


class AnilistTitle(AnilistBaseModel):
    romaji: str | None = None
    english: str | None = None


class AnilistMedia(AnilistBaseModel):
    """The media fields requested for each list entry."""

    id: int
    title: AnilistTitle = Field(default_factory=AnilistTitle)
    format: str | None = None
    episodes: int | None = None
    season_year: int | None = None


class AnilistListEntry(AnilistBaseModel):
    media_id: int | None = None
    status: str | None = None
    media: AnilistMedia | None = None


class AnilistList(AnilistBaseModel):
    name: str | None = None
    status: str | None = None
    entries: list[AnilistListEntry] = Field(default_factory=list)


class AnilistMediaListCollection(AnilistBaseModel):
    """A user's anime lists, one per status."""

    lists: list[AnilistList] = Field(default_factory=list)


def _positive_id(value: Any) -> int | None:
    """Keep positive integer ids, the mapping file also holds strings and lists."""
    if isinstance(value, bool) or not isinstance(value, int | str):
        return None
    try:
        value = int(value)
    except ValueError:
        return None
    return value if value > 0 else None


OptionalId = Annotated[int | None, BeforeValidator(_positive_id)]


class AnimeIdEntry(ProviderBaseModel):
    """An entry of the Fribb anime-lists mapping between anime databases."""

    anilist_id: OptionalId = None
    themoviedb_id: OptionalId = None
    type: str | None = None
