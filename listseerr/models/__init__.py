"""ListSeerr domain and database models."""

from listseerr.models.availability import Availability, JellyseerrStatus
from listseerr.models.db import Base, ExecutionHistory, MediaList, RequestCache
from listseerr.models.execution import (
    ExecutionMetrics,
    ExecutionStatus,
    ProcessingExecution,
)
from listseerr.models.media import BatchId, MediaItem, MediaType, Provider, TriggerType

__all__ = [
    "Availability",
    "Base",
    "BatchId",
    "ExecutionHistory",
    "ExecutionMetrics",
    "ExecutionStatus",
    "JellyseerrStatus",
    "MediaItem",
    "MediaList",
    "MediaType",
    "ProcessingExecution",
    "Provider",
    "RequestCache",
    "TriggerType",
]
