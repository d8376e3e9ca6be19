"""Deduplication policies.

A policy decides which fetched items still need to be requested. The
persistent cache policy remembers everything ListSeerr has requested before;
the live availability policy asks Jellyseerr about each item instead.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from listseerr import log
from listseerr.config.settings import JellyseerrConfig
from listseerr.core.jellyseerr import AvailabilityChecker
from listseerr.core.repositories import RequestCacheRepository
from listseerr.models.availability import Availability
from listseerr.models.media import MediaItem

__all__ = [
    "CategorizedItems",
    "DeduplicationPolicy",
    "LiveAvailabilityPolicy",
    "PersistentCachePolicy",
    "deduplicate",
]


def deduplicate(items: Iterable[MediaItem]) -> list[MediaItem]:
    """Drop repeated items, keeping the first occurrence of each TMDB id."""
    return list(dict.fromkeys(items))


@dataclass(slots=True)
class CategorizedItems:
    """Items split by their availability category."""

    to_request: list[MediaItem] = field(default_factory=list)
    previously_requested: list[MediaItem] = field(default_factory=list)
    available: list[MediaItem] = field(default_factory=list)

    def add(self, item: MediaItem, availability: Availability) -> None:
        """File an item under its category."""
        match availability:
            case Availability.AVAILABLE:
                self.available.append(item)
            case Availability.PREVIOUSLY_REQUESTED:
                self.previously_requested.append(item)
            case _:
                self.to_request.append(item)

    def __len__(self) -> int:
        return (
            len(self.to_request) + len(self.previously_requested) + len(self.available)
        )


class DeduplicationPolicy(Protocol):
    """Strategy deciding which items still need to be requested."""

    async def categorize(
        self, items: Sequence[MediaItem], jellyseerr: JellyseerrConfig
    ) -> CategorizedItems:
        """Categorize unique items."""
        ...

    def record(self, list_id: int, items: Sequence[MediaItem]) -> None:
        """Remember items that were successfully requested for a list."""
        ...


class PersistentCachePolicy:
    """Skips every item ListSeerr has ever requested successfully.

    Cached items count as previously requested. Jellyseerr is never consulted,
    so nothing is categorized as available.
    """

    def __init__(self, cache: RequestCacheRepository) -> None:
        self.cache = cache

    async def categorize(
        self, items: Sequence[MediaItem], jellyseerr: JellyseerrConfig
    ) -> CategorizedItems:
        """Split items into uncached (to request) and cached ones."""
        cached_ids = self.cache.find_cached_ids(item.external_id for item in items)
        result = CategorizedItems()
        for item in items:
            if item.external_id in cached_ids:
                result.previously_requested.append(item)
            else:
                result.to_request.append(item)
        return result

    def record(self, list_id: int, items: Sequence[MediaItem]) -> None:
        """Cache the requested items; existing entries keep their first list."""
        inserted = self.cache.insert(list_id, items)
        log.debug(
            f"Cached $${{new: {inserted}, requested: {len(items)}}}$$ items "
            f"for list $${{id: {list_id}}}$$"
        )


class LiveAvailabilityPolicy:
    """Asks Jellyseerr about every item, one at a time.

    An item whose lookup fails is categorized as to be requested; a failed
    request is recorded per item by the submitter later on.
    """

    def __init__(self, checker: AvailabilityChecker) -> None:
        self.checker = checker

    async def categorize(
        self, items: Sequence[MediaItem], jellyseerr: JellyseerrConfig
    ) -> CategorizedItems:
        """Categorize each item from its live Jellyseerr status."""
        result = CategorizedItems()
        for item in items:
            try:
                availability = await self.checker.get_availability(item, jellyseerr)
            except Exception as e:
                log.warning(
                    f"Could not check availability of $$'{item}'$$, "
                    f"requesting it anyway: {str(e) or type(e).__name__}"
                )
                availability = Availability.TO_BE_REQUESTED
            result.add(item, availability)
        return result

    def record(self, list_id: int, items: Sequence[MediaItem]) -> None:
        """Nothing to remember, Jellyseerr is the source of truth."""
