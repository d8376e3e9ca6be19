"""StevenLu Popular Movies Provider."""

from async_lru import alru_cache
from pydantic import TypeAdapter, ValidationError

from listseerr import log
from listseerr.exceptions import ProviderFetchError
from listseerr.models.media import MediaItem, MediaType, Provider
from listseerr.models.schemas.providers import StevenLuMovie
from listseerr.providers.base import MediaFetcher, provider_registry

__all__ = ["StevenLuFetcher"]

FEED_URL = "https://s3.amazonaws.com/popular-movies/movies.json"

_feed_adapter = TypeAdapter(list[StevenLuMovie])


@alru_cache(maxsize=1, ttl=24 * 60 * 60)
async def _load_feed(timeout: float) -> tuple[StevenLuMovie, ...]:
    """Download the popular movies feed, which is regenerated once a day."""
    async with StevenLuFetcher(timeout=timeout) as fetcher:
        payload = await fetcher._get_json(FEED_URL)

    try:
        movies = _feed_adapter.validate_python(payload)
    except ValidationError as e:
        raise ProviderFetchError(f"Unexpected StevenLu response: {e}") from e

    log.debug(f"Loaded $${{count: {len(movies)}}}$$ movies from the StevenLu feed")
    return tuple(movies)


@provider_registry.register
class StevenLuFetcher(MediaFetcher):
    """Fetches the StevenLu popular movies feed.

    The feed is public, so no credential is needed and the list URL is ignored.
    """

    PROVIDER = Provider.STEVENLU
    REQUIRES_CREDENTIAL = False

    async def fetch_items(
        self, list_url: str, max_items: int, credential: str | None
    ) -> list[MediaItem]:
        """Fetch the most popular movies of the feed."""
        movies = await _load_feed(self.timeout)

        items = [
            MediaItem(
                title=movie.title,
                year=None,
                external_id=movie.tmdb_id,
                media_type=MediaType.MOVIE,
            )
            for movie in movies
            if movie.tmdb_id is not None and movie.tmdb_id > 0
        ]
        return items[:max_items]
