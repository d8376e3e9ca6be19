"""Processing execution entity."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from listseerr.exceptions import InvalidTransitionError
from listseerr.models.media import TriggerType
from listseerr.utils.types import BaseStrEnum

__all__ = ["ExecutionMetrics", "ExecutionStatus", "ProcessingExecution"]


class ExecutionStatus(BaseStrEnum):
    """Lifecycle states of a processing execution."""

    RUNNING = "running"
    SUCCESS = "success"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        """Whether no further transition is allowed out of this state."""
        return self is not ExecutionStatus.RUNNING


@dataclass(frozen=True, slots=True)
class ExecutionMetrics:
    """Item counters recorded when an execution completes successfully."""

    items_found: int = 0
    items_requested: int = 0
    items_failed: int = 0
    items_skipped_available: int = 0
    items_skipped_previously_requested: int = 0

    def __post_init__(self) -> None:
        """Reject negative counters."""
        for name in self.__dataclass_fields__:
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")


@dataclass
class ProcessingExecution:
    """Audit record of one list being processed in one run.

    An execution starts RUNNING and moves exactly once to SUCCESS or ERROR.
    Metrics are only non-zero on SUCCESS, and only an ERROR execution carries
    an error message.
    """

    list_id: int
    batch_id: str
    trigger_type: TriggerType
    status: ExecutionStatus = ExecutionStatus.RUNNING
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None
    metrics: ExecutionMetrics = field(default_factory=ExecutionMetrics)
    error_message: str | None = None
    id: int | None = None

    @classmethod
    def create(
        cls, list_id: int, batch_id: str, trigger_type: TriggerType
    ) -> "ProcessingExecution":
        """Start a new running execution."""
        return cls(list_id=list_id, batch_id=batch_id, trigger_type=trigger_type)

    @property
    def is_running(self) -> bool:
        """Whether the execution has not completed yet."""
        return self.status is ExecutionStatus.RUNNING

    @property
    def duration(self) -> timedelta | None:
        """Time between start and completion, None while running."""
        if self.completed_at is None:
            return None
        return self.completed_at - self.started_at

    def _complete(self, status: ExecutionStatus) -> None:
        if self.status.is_terminal:
            raise InvalidTransitionError(self.status.value, status.value)
        self.status = status
        self.completed_at = datetime.now(UTC)

    def mark_success(
        self,
        items_found: int,
        items_requested: int,
        items_failed: int,
        items_skipped_available: int,
        items_skipped_previously_requested: int,
    ) -> None:
        """Complete the execution successfully with the given counters.

        Raises:
            InvalidTransitionError: If the execution already completed.
        """
        metrics = ExecutionMetrics(
            items_found=items_found,
            items_requested=items_requested,
            items_failed=items_failed,
            items_skipped_available=items_skipped_available,
            items_skipped_previously_requested=items_skipped_previously_requested,
        )
        self._complete(ExecutionStatus.SUCCESS)
        self.metrics = metrics

    def mark_error(self, message: str) -> None:
        """Complete the execution as failed, zeroing every counter.

        Raises:
            InvalidTransitionError: If the execution already completed.
        """
        self._complete(ExecutionStatus.ERROR)
        self.metrics = ExecutionMetrics()
        self.error_message = message or "Unknown error"
