"""AniList Provider."""

import re
from typing import Any

from async_lru import alru_cache
from limiter import Limiter
from pydantic import TypeAdapter, ValidationError

from listseerr import log
from listseerr.exceptions import InvalidListUrlError, ProviderFetchError
from listseerr.models.media import MediaItem, MediaType, Provider
from listseerr.models.schemas.providers import (
    AnilistMediaListCollection,
    AnimeIdEntry,
)
from listseerr.providers.base import MediaFetcher, provider_registry

__all__ = ["AnilistFetcher"]

ANIME_IDS_URL = (
    "https://raw.githubusercontent.com/Fribb/anime-lists/master/anime-list-full.json"
)

MEDIA_LIST_QUERY = """
query ($userName: String, $status: MediaListStatus) {
  MediaListCollection(userName: $userName, type: ANIME, status: $status) {
    lists {
      name
      status
      entries {
        mediaId
        status
        media {
          id
          title {
            romaji
            english
          }
          format
          episodes
          seasonYear
        }
      }
    }
  }
}
"""

# AniList allows 90 requests per minute, but is known to throttle below that
anilist_limiter = Limiter(rate=30 / 60, capacity=3, jitter=False)

_anime_ids_adapter = TypeAdapter(list[AnimeIdEntry])


@alru_cache(maxsize=1, ttl=24 * 60 * 60)
async def _load_anime_ids(timeout: float) -> dict[int, tuple[int, MediaType]]:
    """Download the AniList to TMDB mapping, keyed by AniList id."""
    async with AnilistFetcher(timeout=timeout) as fetcher:
        payload = await fetcher._get_json(ANIME_IDS_URL)

    try:
        entries = _anime_ids_adapter.validate_python(payload)
    except ValidationError as e:
        raise ProviderFetchError(f"Unexpected anime id mapping: {e}") from e

    mapping: dict[int, tuple[int, MediaType]] = {}
    for entry in entries:
        if entry.anilist_id is None or entry.themoviedb_id is None:
            continue
        media_type = (
            MediaType.MOVIE
            if (entry.type or "").upper() == "MOVIE"
            else MediaType.SHOW
        )
        mapping[entry.anilist_id] = (entry.themoviedb_id, media_type)

    log.debug(
        f"Loaded $${{total: {len(entries)}, with_tmdb_id: {len(mapping)}}}$$ "
        f"anime id mappings"
    )
    return mapping


@provider_registry.register
class AnilistFetcher(MediaFetcher):
    """Fetches public AniList anime lists and maps their entries to TMDB.

    Lists are addressed as `anilist:{username}:{status}`. Entries are mapped
    through the Fribb anime-lists database, those without a TMDB id are
    skipped.
    """

    PROVIDER = Provider.ANILIST
    REQUIRES_CREDENTIAL = False
    # One for the id mapping, one for the list
    REQUESTS_PER_FETCH = 2
    API_URL = "https://graphql.anilist.co"
    URL_PATTERN = re.compile(
        r"^anilist:(?P<username>[^:]+):"
        r"(?P<status>CURRENT|PLANNING|COMPLETED|DROPPED|PAUSED|REPEATING)$",
        re.IGNORECASE,
    )

    @classmethod
    def parse_url(cls, list_url: str) -> tuple[str, str]:
        """Extract the username and the upper-cased list status.

        Raises:
            InvalidListUrlError: If the URL is not `anilist:{username}:{status}`.
        """
        match = cls.URL_PATTERN.match(list_url.strip())
        if not match:
            raise InvalidListUrlError(
                f"Invalid AniList URL: '{list_url}', expected "
                f"'anilist:{{username}}:{{status}}'"
            )
        return match["username"], match["status"].upper()

    @anilist_limiter()
    async def _request(self, query: str, variables: dict[str, Any]) -> Any:
        return await self._post_json(
            self.API_URL, {"query": query, "variables": variables}
        )

    async def fetch_items(
        self, list_url: str, max_items: int, credential: str | None
    ) -> list[MediaItem]:
        """Fetch the anime of a user's list with the given status."""
        username, status = self.parse_url(list_url)
        anime_ids = await _load_anime_ids(self.timeout)

        log.debug(f"Fetching AniList list $$'{username}:{status}'$$")
        payload = await self._request(
            MEDIA_LIST_QUERY, {"userName": username, "status": status}
        )
        if not isinstance(payload, dict):
            raise ProviderFetchError("Unexpected AniList response")
        if payload.get("errors"):
            messages = ", ".join(
                str(error.get("message", error) if isinstance(error, dict) else error)
                for error in payload["errors"]
            )
            raise ProviderFetchError(f"AniList GraphQL errors: {messages}")

        data = (payload.get("data") or {}).get("MediaListCollection")
        if not data:
            log.warning(
                f"AniList returned no lists for $$'{username}'$$, the user may not "
                f"exist or the list may be private"
            )
            return []
        try:
            collection = AnilistMediaListCollection.model_validate(data)
        except ValidationError as e:
            raise ProviderFetchError(f"Unexpected AniList response: {e}") from e

        entries = [entry for lst in collection.lists for entry in lst.entries]
        entries = entries[:max_items]
        items: list[MediaItem] = []
        for entry in entries:
            media = entry.media
            if media is None or media.format == "MUSIC":
                continue
            mapped = anime_ids.get(media.id)
            if mapped is None:
                continue
            tmdb_id, media_type = mapped
            items.append(
                MediaItem(
                    title=media.title.english or media.title.romaji or str(media.id),
                    year=media.season_year or None,
                    external_id=tmdb_id,
                    media_type=media_type,
                )
            )

        log.debug(
            f"Mapped $${{entries: {len(entries)}, with_tmdb_id: {len(items)}}}$$ "
            f"items of AniList list $$'{username}:{status}'$$"
        )
        return items
