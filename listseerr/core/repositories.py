"""Repositories backing the processing engine."""

from collections.abc import Iterable, Sequence
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from listseerr import log
from listseerr.config.database import db
from listseerr.config.settings import (
    JellyseerrConfig,
    ListConfig,
    ListSeerrConfig,
    ProviderConfig,
)
from listseerr.models.db import ExecutionHistory, MediaList, RequestCache
from listseerr.models.execution import (
    ExecutionMetrics,
    ExecutionStatus,
    ProcessingExecution,
)
from listseerr.models.media import MediaItem, Provider

__all__ = [
    "ConfigRepository",
    "ExecutionRepository",
    "ListRepository",
    "RequestCacheRepository",
]


def _as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes read back from SQLite."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


class ListRepository:
    """Access to the media lists of each owner."""

    def find_all(self, owner_id: str) -> list[MediaList]:
        """Get every active list of an owner, in declaration order."""
        with db() as ctx:
            return list(
                ctx.session.scalars(
                    select(MediaList)
                    .where(MediaList.owner_id == owner_id, ~MediaList.archived)
                    .order_by(MediaList.id)
                )
            )

    def find_by_id(self, list_id: int, owner_id: str) -> MediaList | None:
        """Get an active list by id, only if it belongs to the owner."""
        with db() as ctx:
            return ctx.session.scalar(
                select(MediaList).where(
                    MediaList.id == list_id,
                    MediaList.owner_id == owner_id,
                    ~MediaList.archived,
                )
            )

    def find_by_name(self, name: str, owner_id: str) -> MediaList | None:
        """Get an active list by its configured name."""
        with db() as ctx:
            return ctx.session.scalar(
                select(MediaList).where(
                    MediaList.name == name,
                    MediaList.owner_id == owner_id,
                    ~MediaList.archived,
                )
            )

    def sync_profile(
        self, owner_id: str, lists: Sequence[ListConfig]
    ) -> list[MediaList]:
        """Mirror a profile's configured lists into the database.

        Lists are matched by name. New lists are inserted, existing ones updated
        and lists missing from the configuration archived.

        Returns:
            list[MediaList]: The owner's active lists after the sync.
        """
        with db() as ctx:
            existing = {
                row.name: row
                for row in ctx.session.scalars(
                    select(MediaList).where(MediaList.owner_id == owner_id)
                )
            }
            now = datetime.now(UTC)

            for list_config in lists:
                row = existing.pop(list_config.name, None)
                if row is None:
                    row = MediaList(owner_id=owner_id, name=list_config.name)
                    ctx.session.add(row)
                    log.debug(f"[{owner_id}] Adding list $$'{list_config.name}'$$")
                row.url = list_config.url
                row.provider = list_config.provider
                row.enabled = list_config.enabled
                row.max_items = list_config.max_items
                row.schedule = list_config.schedule
                row.archived = False
                row.updated_at = now

            for row in existing.values():
                if not row.archived:
                    log.debug(f"[{owner_id}] Archiving list $$'{row.name}'$$")
                    row.archived = True
                    row.updated_at = now

            ctx.session.commit()

        return self.find_all(owner_id)


class ConfigRepository:
    """Read access to the credentials configured for each owner."""

    def __init__(self, config: ListSeerrConfig) -> None:
        self.config = config

    def find_provider(self, owner_id: str, provider: Provider) -> ProviderConfig | None:
        """Get the provider credentials of an owner, None if not configured."""
        profile = self.config.profiles.get(owner_id)
        if profile is None:
            return None
        return profile.providers.get(provider)

    def find_jellyseerr(self, owner_id: str) -> JellyseerrConfig | None:
        """Get the Jellyseerr connection of an owner, None if not configured."""
        profile = self.config.profiles.get(owner_id)
        if profile is None:
            return None
        return profile.jellyseerr


class ExecutionRepository:
    """Persistence of processing executions.

    Executions are never deleted; their rows are only updated until they reach
    a terminal status.
    """

    @staticmethod
    def _to_entity(row: ExecutionHistory) -> ProcessingExecution:
        return ProcessingExecution(
            id=row.id,
            list_id=row.list_id,
            batch_id=row.batch_id,
            trigger_type=row.trigger_type,
            status=row.status,
            started_at=_as_utc(row.started_at),
            completed_at=_as_utc(row.completed_at),
            metrics=ExecutionMetrics(
                items_found=row.items_found,
                items_requested=row.items_requested,
                items_failed=row.items_failed,
                items_skipped_available=row.items_skipped_available,
                items_skipped_previously_requested=(
                    row.items_skipped_previously_requested
                ),
            ),
            error_message=row.error_message,
        )

    @staticmethod
    def _apply(row: ExecutionHistory, execution: ProcessingExecution) -> None:
        metrics = execution.metrics
        row.list_id = execution.list_id
        row.batch_id = execution.batch_id
        row.trigger_type = execution.trigger_type
        row.status = execution.status
        row.started_at = execution.started_at
        row.completed_at = execution.completed_at
        row.items_found = metrics.items_found
        row.items_requested = metrics.items_requested
        row.items_failed = metrics.items_failed
        row.items_skipped_available = metrics.items_skipped_available
        row.items_skipped_previously_requested = (
            metrics.items_skipped_previously_requested
        )
        row.error_message = execution.error_message

    def save(self, execution: ProcessingExecution) -> ProcessingExecution:
        """Insert a new execution or update an existing one.

        The id assigned on insert is set on the given execution.
        """
        with db() as ctx:
            row = None
            if execution.id is not None:
                row = ctx.session.get(ExecutionHistory, execution.id)
            if row is None:
                row = ExecutionHistory()
                ctx.session.add(row)

            self._apply(row, execution)
            ctx.session.commit()
            execution.id = row.id

        return execution

    def find_by_id(self, execution_id: int) -> ProcessingExecution | None:
        """Get an execution by id."""
        with db() as ctx:
            row = ctx.session.get(ExecutionHistory, execution_id)
            return self._to_entity(row) if row else None

    def find_by_list_id(
        self, list_id: int, owner_id: str, limit: int = 50
    ) -> list[ProcessingExecution]:
        """Get the latest executions of a list, only if the owner owns the list."""
        with db() as ctx:
            rows = ctx.session.scalars(
                select(ExecutionHistory)
                .join(MediaList, MediaList.id == ExecutionHistory.list_id)
                .where(
                    ExecutionHistory.list_id == list_id,
                    MediaList.owner_id == owner_id,
                )
                .order_by(
                    ExecutionHistory.started_at.desc(), ExecutionHistory.id.desc()
                )
                .limit(limit)
            )
            return [self._to_entity(row) for row in rows]

    def find_by_batch_id(self, batch_id: str) -> list[ProcessingExecution]:
        """Get every execution of a batch, in creation order."""
        with db() as ctx:
            rows = ctx.session.scalars(
                select(ExecutionHistory)
                .where(ExecutionHistory.batch_id == batch_id)
                .order_by(ExecutionHistory.id)
            )
            return [self._to_entity(row) for row in rows]

    def find_running(self) -> list[ProcessingExecution]:
        """Get every execution that has not completed."""
        with db() as ctx:
            rows = ctx.session.scalars(
                select(ExecutionHistory).where(
                    ExecutionHistory.status == ExecutionStatus.RUNNING
                )
            )
            return [self._to_entity(row) for row in rows]


class RequestCacheRepository:
    """The persistent set of items that have already been requested."""

    def find_cached_ids(self, external_ids: Iterable[int]) -> set[int]:
        """Get the subset of the given ids that are in the cache."""
        ids = set(external_ids)
        if not ids:
            return set()
        with db() as ctx:
            return set(
                ctx.session.scalars(
                    select(RequestCache.external_id).where(
                        RequestCache.external_id.in_(ids)
                    )
                )
            )

    def filter_uncached(self, items: Sequence[MediaItem]) -> list[MediaItem]:
        """Drop the items that are already in the cache, keeping the order."""
        cached = self.find_cached_ids(item.external_id for item in items)
        return [item for item in items if item.external_id not in cached]

    def insert(self, list_id: int, items: Sequence[MediaItem]) -> int:
        """Add items to the cache, ignoring items that are already cached.

        Returns:
            int: Number of newly cached items.
        """
        if not items:
            return 0

        now = datetime.now(UTC)
        values = [
            {
                "external_id": item.external_id,
                "first_list_id": list_id,
                "title": item.title,
                "year": item.year,
                "media_type": item.media_type,
                "cached_at": now,
            }
            for item in {item.external_id: item for item in items}.values()
        ]
        with db() as ctx:
            result = ctx.session.execute(
                sqlite_insert(RequestCache)
                .values(values)
                .on_conflict_do_nothing(index_elements=["external_id"])
            )
            ctx.session.commit()
            return max(result.rowcount or 0, 0)

    def get(self, external_id: int) -> RequestCache | None:
        """Get the cache entry of an item."""
        with db() as ctx:
            return ctx.session.scalar(
                select(RequestCache).where(RequestCache.external_id == external_id)
            )
