"""Media item and batch identifier value types."""

import secrets
import string
import time
from dataclasses import dataclass

from listseerr.exceptions import InvalidBatchIdError, InvalidMediaItemError
from listseerr.utils.types import BaseStrEnum

__all__ = ["BatchId", "MediaItem", "MediaType", "Provider", "TriggerType"]


class MediaType(BaseStrEnum):
    """Kind of media an item refers to."""

    MOVIE = "movie"
    SHOW = "show"

    @property
    def jellyseerr_type(self) -> str:
        """Media type name used by the Jellyseerr API."""
        return "tv" if self is MediaType.SHOW else "movie"


class TriggerType(BaseStrEnum):
    """What caused a processing run."""

    MANUAL = "manual"
    SCHEDULED = "scheduled"


class Provider(BaseStrEnum):
    """External list providers items can be fetched from."""

    MDBLIST = "mdblist"
    TRAKT = "trakt"
    TRAKT_CHART = "trakt_chart"
    STEVENLU = "stevenlu"
    ANILIST = "anilist"


@dataclass(frozen=True, slots=True, eq=False)
class MediaItem:
    """A movie or show fetched from a list provider.

    Two items are the same item when they share a TMDB id, regardless of the
    title or year each provider reported.
    """

    title: str
    year: int | None
    external_id: int
    media_type: MediaType

    def __post_init__(self) -> None:
        """Validate the external identifier."""
        if (
            isinstance(self.external_id, bool)
            or not isinstance(self.external_id, int)
            or self.external_id <= 0
        ):
            raise InvalidMediaItemError(
                f"Invalid TMDB id {self.external_id!r} for '{self.title}'"
            )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MediaItem):
            return NotImplemented
        return self.external_id == other.external_id

    def __hash__(self) -> int:
        return hash(self.external_id)

    def __str__(self) -> str:
        year = f" ({self.year})" if self.year else ""
        return f"{self.title}{year} [tmdb:{self.external_id}]"


_ALPHABET = string.digits + string.ascii_lowercase


@dataclass(frozen=True, slots=True)
class BatchId:
    """Correlation id shared by every execution of one processing run.

    Formatted as `{trigger_type}-{unix_millis}-{random}`.
    """

    trigger_type: TriggerType
    timestamp: int
    nonce: str

    @classmethod
    def generate(cls, trigger_type: TriggerType) -> "BatchId":
        """Create a new batch id for the given trigger."""
        nonce = "".join(secrets.choice(_ALPHABET) for _ in range(7))
        return cls(TriggerType(trigger_type), time.time_ns() // 1_000_000, nonce)

    @classmethod
    def parse(cls, value: str) -> "BatchId":
        """Parse a batch id string.

        Args:
            value (str): Batch id in its string form.

        Returns:
            BatchId: The parsed batch id.

        Raises:
            InvalidBatchIdError: If the value is not a well-formed batch id.
        """
        parts = value.split("-")
        if len(parts) != 3:
            raise InvalidBatchIdError(f"Invalid batch id format: '{value}'")

        trigger, timestamp, nonce = parts
        try:
            trigger_type = TriggerType(trigger)
        except ValueError:
            raise InvalidBatchIdError(
                f"Invalid trigger type in batch id: '{trigger}'"
            ) from None
        if not timestamp.isdigit():
            raise InvalidBatchIdError(f"Invalid timestamp in batch id: '{timestamp}'")
        if not nonce:
            raise InvalidBatchIdError(f"Missing random part in batch id: '{value}'")

        return cls(trigger_type, int(timestamp), nonce)

    def __str__(self) -> str:
        return f"{self.trigger_type.value}-{self.timestamp}-{self.nonce}"
