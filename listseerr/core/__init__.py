"""ListSeerr processing engine."""

from listseerr.core.batch import BatchOrchestrator, BatchResult
from listseerr.core.dedup import (
    CategorizedItems,
    DeduplicationPolicy,
    LiveAvailabilityPolicy,
    PersistentCachePolicy,
    deduplicate,
)
from listseerr.core.jellyseerr import JellyseerrClient, RequestResults
from listseerr.core.sched import SchedulerClient
from listseerr.core.service import ProcessingService
from listseerr.core.single import SingleListOrchestrator

__all__ = [
    "BatchOrchestrator",
    "BatchResult",
    "CategorizedItems",
    "DeduplicationPolicy",
    "JellyseerrClient",
    "LiveAvailabilityPolicy",
    "PersistentCachePolicy",
    "ProcessingService",
    "RequestResults",
    "SchedulerClient",
    "SingleListOrchestrator",
    "deduplicate",
]
