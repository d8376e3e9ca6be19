"""Tests for the processing execution state machine."""

import pytest

from listseerr.exceptions import InvalidTransitionError
from listseerr.models.execution import (
    ExecutionMetrics,
    ExecutionStatus,
    ProcessingExecution,
)
from listseerr.models.media import TriggerType


def _execution() -> ProcessingExecution:
    return ProcessingExecution.create(7, "manual-1700000000000-abc1234", "manual")


def test_create_starts_running_with_zero_metrics() -> None:
    """A new execution is running and has no counters."""
    execution = _execution()

    assert execution.status is ExecutionStatus.RUNNING
    assert execution.is_running
    assert execution.metrics == ExecutionMetrics()
    assert execution.completed_at is None
    assert execution.duration is None
    assert execution.id is None


def test_mark_success_records_metrics() -> None:
    """A successful execution keeps its counters and completion time."""
    execution = _execution()

    execution.mark_success(5, 2, 1, 1, 1)

    assert execution.status is ExecutionStatus.SUCCESS
    assert execution.metrics == ExecutionMetrics(5, 2, 1, 1, 1)
    assert execution.completed_at is not None
    assert execution.duration is not None
    assert execution.error_message is None


def test_mark_error_zeroes_metrics() -> None:
    """A failed execution carries its message and no counters."""
    execution = _execution()

    execution.mark_error("boom")

    assert execution.status is ExecutionStatus.ERROR
    assert execution.error_message == "boom"
    assert execution.metrics == ExecutionMetrics()


@pytest.mark.parametrize("complete", ["success", "error"])
def test_terminal_execution_rejects_transitions(complete: str) -> None:
    """No transition is allowed out of a terminal status, and state is kept."""
    execution = _execution()
    if complete == "success":
        execution.mark_success(3, 3, 0, 0, 0)
    else:
        execution.mark_error("first")
    snapshot = (
        execution.status,
        execution.metrics,
        execution.completed_at,
        execution.error_message,
    )

    with pytest.raises(InvalidTransitionError):
        execution.mark_success(1, 1, 0, 0, 0)
    with pytest.raises(InvalidTransitionError):
        execution.mark_error("second")

    assert snapshot == (
        execution.status,
        execution.metrics,
        execution.completed_at,
        execution.error_message,
    )


def test_negative_metrics_are_rejected() -> None:
    """Counters can never be negative."""
    execution = _execution()

    with pytest.raises(ValueError):
        execution.mark_success(1, -1, 0, 0, 0)
    assert execution.is_running


def test_trigger_type_is_kept() -> None:
    """The trigger type is stored as given."""
    assert _execution().trigger_type == TriggerType.MANUAL
