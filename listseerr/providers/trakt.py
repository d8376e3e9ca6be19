"""Trakt Providers.

Two providers share the Trakt API: user lists (`trakt`) and the public movie
and show charts (`trakt_chart`). Both authenticate with the application's
client id.
"""

import re
from typing import Any
from urllib.parse import parse_qs, urlparse

from limiter import Limiter
from pydantic import TypeAdapter, ValidationError

from listseerr import log
from listseerr.exceptions import (
    InvalidListUrlError,
    ProviderFetchError,
    ProviderNotConfiguredError,
)
from listseerr.models.media import MediaItem, MediaType, Provider
from listseerr.models.schemas.providers import (
    TraktChartEntry,
    TraktListEntry,
    TraktMedia,
)
from listseerr.providers.base import MediaFetcher, provider_registry

__all__ = ["TraktChartFetcher", "TraktListFetcher"]

# Trakt allows 1000 GET requests every 5 minutes per application
trakt_limiter = Limiter(rate=1000 / 300, capacity=20, jitter=True)

_list_adapter = TypeAdapter(list[TraktListEntry])
_chart_adapter = TypeAdapter(list[TraktChartEntry])
_popular_adapter = TypeAdapter(list[TraktMedia])


class TraktFetcher(MediaFetcher):
    """Shared request handling for the Trakt API."""

    API_URL = "https://api.trakt.tv"

    @trakt_limiter()
    async def _request(self, path: str, params: dict[str, Any], client_id: str) -> Any:
        return await self._get_json(
            f"{self.API_URL}{path}",
            params=params,
            headers={"trakt-api-version": "2", "trakt-api-key": client_id},
        )

    def _require_client_id(self, credential: str | None) -> str:
        if not credential:
            raise ProviderNotConfiguredError(self.PROVIDER)
        return credential

    @staticmethod
    def _to_media_item(media: TraktMedia, media_type: MediaType) -> MediaItem | None:
        if not media.ids.tmdb or media.ids.tmdb <= 0:
            log.debug(f"Skipping $$'{media.title}'$$ without a TMDB id")
            return None
        return MediaItem(
            title=media.title,
            year=media.year,
            external_id=media.ids.tmdb,
            media_type=media_type,
        )


@provider_registry.register
class TraktListFetcher(TraktFetcher):
    """Fetches Trakt user lists.

    Accepts `https://trakt.tv/users/{user}/lists/{slug}` with the optional
    `display` (movie or show) and `sort` (`field,order`) query parameters the
    Trakt website uses.
    """

    PROVIDER = Provider.TRAKT
    URL_PATTERN = re.compile(
        r"^https?://(?:www\.)?trakt\.tv/users/"
        r"(?P<username>[^/?#]+)/lists/(?P<slug>[^/?#]+)/?$"
    )

    @classmethod
    def build_items_path(cls, list_url: str) -> str:
        """Translate a Trakt list URL into the API path of its items.

        Raises:
            InvalidListUrlError: If the URL is not a Trakt list URL.
        """
        parsed = urlparse(list_url.strip())
        match = cls.URL_PATTERN.match(
            f"{parsed.scheme}://{parsed.netloc}{parsed.path}"
        )
        if not match:
            raise InvalidListUrlError(f"Invalid Trakt list URL: '{list_url}'")

        path = f"/users/{match['username']}/lists/{match['slug']}/items"
        query = parse_qs(parsed.query)

        display = query.get("display", [""])[0]
        if display in ("movie", "show"):
            path += f"/{display}"
        sort = query.get("sort", [""])[0].split(",")
        if len(sort) == 2 and all(sort):
            if display not in ("movie", "show"):
                path += "/movie,show"
            path += f"/{sort[0]}/{sort[1]}"
        return path

    async def fetch_items(
        self, list_url: str, max_items: int, credential: str | None
    ) -> list[MediaItem]:
        """Fetch the movies and shows of a Trakt user list."""
        client_id = self._require_client_id(credential)
        path = self.build_items_path(list_url)

        payload = await self._request(
            path, {"page": 1, "limit": max_items}, client_id
        )
        try:
            entries = _list_adapter.validate_python(payload)
        except ValidationError as e:
            raise ProviderFetchError(f"Unexpected Trakt response: {e}") from e

        items: list[MediaItem] = []
        for entry in entries:
            if entry.type == "movie" and entry.movie:
                item = self._to_media_item(entry.movie, MediaType.MOVIE)
            elif entry.type == "show" and entry.show:
                item = self._to_media_item(entry.show, MediaType.SHOW)
            else:
                log.debug(f"Skipping unsupported Trakt item type $$'{entry.type}'$$")
                continue
            if item is not None:
                items.append(item)

        return items[:max_items]


@provider_registry.register
class TraktChartFetcher(TraktFetcher):
    """Fetches the public Trakt movie and show charts."""

    PROVIDER = Provider.TRAKT_CHART
    URL_PATTERN = re.compile(
        r"^https?://(?:www\.)?(?:api\.)?trakt\.tv/(?P<media>movies|shows)/"
        r"(?P<chart>trending|popular|favorited|played|watched|collected|anticipated)"
        r"/?(?:[?#].*)?$"
    )

    @classmethod
    def parse_url(cls, list_url: str) -> tuple[MediaType, str]:
        """Extract the media type and chart name from a Trakt chart URL.

        Raises:
            InvalidListUrlError: If the URL is not a Trakt chart URL.
        """
        match = cls.URL_PATTERN.match(list_url.strip())
        if not match:
            raise InvalidListUrlError(f"Invalid Trakt chart URL: '{list_url}'")
        media_type = MediaType.MOVIE if match["media"] == "movies" else MediaType.SHOW
        return media_type, match["chart"]

    async def fetch_items(
        self, list_url: str, max_items: int, credential: str | None
    ) -> list[MediaItem]:
        """Fetch the entries of a Trakt chart."""
        client_id = self._require_client_id(credential)
        media_type, chart = self.parse_url(list_url)
        segment = "movies" if media_type is MediaType.MOVIE else "shows"

        payload = await self._request(
            f"/{segment}/{chart}", {"page": 1, "limit": max_items}, client_id
        )
        try:
            if chart == "popular":
                medias = _popular_adapter.validate_python(payload)
            else:
                medias = [
                    entry.movie if media_type is MediaType.MOVIE else entry.show
                    for entry in _chart_adapter.validate_python(payload)
                ]
        except ValidationError as e:
            raise ProviderFetchError(f"Unexpected Trakt response: {e}") from e

        items = [
            item
            for media in medias
            if media is not None
            and (item := self._to_media_item(media, media_type)) is not None
        ]
        return items[:max_items]
