"""Availability categorization of Jellyseerr media statuses."""

from enum import IntEnum

from listseerr.utils.types import BaseStrEnum

__all__ = ["Availability", "JellyseerrStatus"]


class JellyseerrStatus(IntEnum):
    """Values of `mediaInfo.status` reported by Jellyseerr."""

    UNKNOWN = 1
    PENDING = 2
    PROCESSING = 3
    PARTIALLY_AVAILABLE = 4
    AVAILABLE = 5
    DELETED = 6


_REQUESTED_STATUSES = frozenset(
    {
        JellyseerrStatus.UNKNOWN,
        JellyseerrStatus.PENDING,
        JellyseerrStatus.PROCESSING,
        JellyseerrStatus.DELETED,
    }
)
_AVAILABLE_STATUSES = frozenset(
    {JellyseerrStatus.PARTIALLY_AVAILABLE, JellyseerrStatus.AVAILABLE}
)


class Availability(BaseStrEnum):
    """Where an item stands relative to the downstream request service.

    TO_BE_REQUESTED: Jellyseerr has never seen the item
    PREVIOUSLY_REQUESTED: Jellyseerr knows the item but it is not in the library
    AVAILABLE: the item is (at least partially) in the library
    """

    TO_BE_REQUESTED = "to_be_requested"
    PREVIOUSLY_REQUESTED = "previously_requested"
    AVAILABLE = "available"

    @classmethod
    def from_status(
        cls, status: int | None, has_known_requests: bool = False
    ) -> "Availability":
        """Categorize a single Jellyseerr status code.

        Args:
            status (int | None): Media status, None when Jellyseerr has no record.
            has_known_requests (bool): Whether Jellyseerr lists requests for the
                item, only consulted for status codes outside the known range.

        Returns:
            Availability: The categorized availability.
        """
        if status is None:
            return cls.TO_BE_REQUESTED
        if status in _AVAILABLE_STATUSES:
            return cls.AVAILABLE
        if status in _REQUESTED_STATUSES:
            return cls.PREVIOUSLY_REQUESTED
        return cls.PREVIOUSLY_REQUESTED if has_known_requests else cls.TO_BE_REQUESTED

    @classmethod
    def from_combined_status(
        cls,
        status: int | None,
        status_4k: int | None,
        has_known_requests: bool = False,
    ) -> "Availability":
        """Categorize the standard and 4K statuses together.

        Availability in either quality wins, then a request in either quality.

        Args:
            status (int | None): Standard quality media status.
            status_4k (int | None): 4K media status.
            has_known_requests (bool): Whether Jellyseerr lists requests for the item.

        Returns:
            Availability: The combined availability.
        """
        categories = {
            cls.from_status(status, has_known_requests),
            cls.from_status(status_4k, has_known_requests),
        }
        if cls.AVAILABLE in categories:
            return cls.AVAILABLE
        if cls.PREVIOUSLY_REQUESTED in categories:
            return cls.PREVIOUSLY_REQUESTED
        return cls.TO_BE_REQUESTED

    def should_request(self) -> bool:
        """Whether an item in this category should be submitted."""
        return self is Availability.TO_BE_REQUESTED
