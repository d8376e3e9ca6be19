"""Jellyseerr API Models Module."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

__all__ = ["MediaDetails", "MediaInfo", "RequestResponse"]


class JellyseerrBaseModel(BaseModel):
    """Base model for Jellyseerr payloads, which use camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )


class MediaInfo(JellyseerrBaseModel):
    """The `mediaInfo` block Jellyseerr attaches to media it already tracks."""

    id: int | None = None
    tmdb_id: int | None = None
    status: int | None = None
    status4k: int | None = Field(default=None, alias="status4k")
    requests: list[dict[str, Any]] = Field(default_factory=list)


class MediaDetails(JellyseerrBaseModel):
    """Response of `GET /api/v1/{movie|tv}/{tmdbId}`."""

    id: int
    media_info: MediaInfo | None = None


class RequestedMedia(JellyseerrBaseModel):
    """The `media` block of a request response."""

    tmdb_id: int | None = None
    status: int | None = None


class RequestResponse(JellyseerrBaseModel):
    """Response of `POST /api/v1/request`."""

    id: int | None = None
    media: RequestedMedia | None = None
