"""MDBList Provider."""

import re
from typing import Any

from limiter import Limiter
from pydantic import TypeAdapter, ValidationError

from listseerr import log
from listseerr.exceptions import (
    InvalidListUrlError,
    ProviderFetchError,
    ProviderNotConfiguredError,
)
from listseerr.models.media import MediaItem, MediaType, Provider
from listseerr.models.schemas.providers import MdbListItem
from listseerr.providers.base import MediaFetcher, provider_registry

__all__ = ["MdbListFetcher"]

# MDBList allows 1000 requests per day on the free tier
mdblist_limiter = Limiter(rate=60 / 60, capacity=5, jitter=True)

_items_adapter = TypeAdapter(list[MdbListItem])


@provider_registry.register
class MdbListFetcher(MediaFetcher):
    """Fetches public MDBList lists through the MDBList API."""

    PROVIDER = Provider.MDBLIST
    API_URL = "https://api.mdblist.com"
    URL_PATTERN = re.compile(
        r"^https?://(?:www\.)?mdblist\.com/lists/"
        r"(?P<username>[^/?#]+)/(?P<slug>[^/?#]+)/?(?:[?#].*)?$"
    )
    PAGE_LIMIT = 50

    @classmethod
    def parse_url(cls, list_url: str) -> tuple[str, str]:
        """Extract the username and list slug from an MDBList URL.

        Raises:
            InvalidListUrlError: If the URL is not an MDBList list URL.
        """
        match = cls.URL_PATTERN.match(list_url.strip())
        if not match:
            raise InvalidListUrlError(f"Invalid MDBList URL: '{list_url}'")
        return match["username"], match["slug"]

    @mdblist_limiter()
    async def _request(self, url: str, params: dict[str, Any]) -> Any:
        return await self._get_json(url, params=params)

    async def fetch_items(
        self, list_url: str, max_items: int, credential: str | None
    ) -> list[MediaItem]:
        """Fetch the items of an MDBList list."""
        if not credential:
            raise ProviderNotConfiguredError(self.PROVIDER)

        username, slug = self.parse_url(list_url)
        log.debug(f"Fetching MDBList list $$'{username}/{slug}'$$")

        payload = await self._request(
            f"{self.API_URL}/lists/{username}/{slug}/items/",
            {
                "limit": min(max_items, self.PAGE_LIMIT),
                "apikey": credential,
                "unified": "true",
            },
        )
        try:
            entries = _items_adapter.validate_python(payload)
        except ValidationError as e:
            raise ProviderFetchError(f"Unexpected MDBList response: {e}") from e

        items = [
            self._to_media_item(entry)
            for entry in entries
            if entry.id is not None and entry.id > 0
        ]
        log.debug(
            f"Received $${{total: {len(entries)}, with_tmdb_id: {len(items)}}}$$ "
            f"items from MDBList list $$'{username}/{slug}'$$"
        )
        return items[:max_items]

    @staticmethod
    def _to_media_item(entry: MdbListItem) -> MediaItem:
        return MediaItem(
            title=entry.title,
            year=entry.release_year or None,
            external_id=entry.id,
            media_type=MediaType.SHOW if entry.mediatype == "show" else MediaType.MOVIE,
        )
