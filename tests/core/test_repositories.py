"""Tests for the database-backed repositories."""

from datetime import UTC, datetime, timedelta

import pytest

from listseerr.config.settings import ListConfig, ListSeerrConfig
from listseerr.core.repositories import (
    ConfigRepository,
    ExecutionRepository,
    ListRepository,
    RequestCacheRepository,
)
from listseerr.models.execution import ExecutionStatus, ProcessingExecution
from listseerr.models.media import Provider, TriggerType
from tests.fakes import movie


def _list_config(name: str, enabled: bool = True) -> ListConfig:
    return ListConfig(
        name=name,
        url=f"https://mdblist.com/lists/user/{name.lower()}",
        provider=Provider.MDBLIST,
        enabled=enabled,
    )


def test_sync_profile_inserts_updates_and_archives(db) -> None:
    """Syncing mirrors the configured lists, archiving removed ones."""
    repository = ListRepository()

    first = repository.sync_profile("alice", [_list_config("A"), _list_config("B")])
    assert [media_list.name for media_list in first] == ["A", "B"]
    a_id = first[0].id

    second = repository.sync_profile(
        "alice", [_list_config("A", enabled=False), _list_config("C")]
    )

    assert [media_list.name for media_list in second] == ["A", "C"]
    assert second[0].id == a_id
    assert second[0].enabled is False
    assert repository.find_by_name("B", "alice") is None


def test_sync_profile_restores_archived_list(db) -> None:
    """A list added back to the configuration keeps its id."""
    repository = ListRepository()
    a_id = repository.sync_profile("alice", [_list_config("A")])[0].id
    repository.sync_profile("alice", [])

    assert repository.find_all("alice") == []

    restored = repository.sync_profile("alice", [_list_config("A")])
    assert [media_list.id for media_list in restored] == [a_id]


def test_find_by_id_checks_owner(db) -> None:
    """Lists of another owner are not found."""
    repository = ListRepository()
    a_id = repository.sync_profile("alice", [_list_config("A")])[0].id
    repository.sync_profile("bob", [_list_config("A")])

    assert repository.find_by_id(a_id, "alice") is not None
    assert repository.find_by_id(a_id, "bob") is None
    assert repository.find_by_id(9999, "alice") is None
    assert [media_list.owner_id for media_list in repository.find_all("bob")] == [
        "bob"
    ]


def test_config_repository_reads_profiles() -> None:
    """Credentials come from the owner's profile."""
    config = ListSeerrConfig(
        profiles={
            "alice": {
                "timezone": "UTC",
                "jellyseerr": {"url": "http://js:5055", "api_key": "k"},
                "providers": {"trakt": {"api_key": "client-id"}},
            }
        }
    )
    repository = ConfigRepository(config)

    trakt = repository.find_provider("alice", Provider.TRAKT)
    assert trakt is not None
    assert trakt.api_key.get_secret_value() == "client-id"
    assert repository.find_provider("alice", Provider.MDBLIST) is None
    assert repository.find_jellyseerr("alice").url == "http://js:5055"
    assert repository.find_provider("nobody", Provider.TRAKT) is None
    assert repository.find_jellyseerr("nobody") is None


def test_execution_save_inserts_then_updates(db) -> None:
    """Saving assigns an id once and updates the same row afterwards."""
    list_id = ListRepository().sync_profile("alice", [_list_config("A")])[0].id
    repository = ExecutionRepository()

    execution = repository.save(
        ProcessingExecution.create(list_id, "manual-1-abc", TriggerType.MANUAL)
    )
    assert execution.id is not None
    execution_id = execution.id

    execution.mark_success(4, 2, 1, 1, 0)
    repository.save(execution)

    stored = repository.find_by_id(execution_id)
    assert stored is not None
    assert stored.id == execution_id
    assert stored.status is ExecutionStatus.SUCCESS
    assert stored.metrics == execution.metrics
    assert stored.started_at.tzinfo is not None
    assert stored.completed_at is not None
    assert repository.find_by_id(execution_id + 100) is None


def test_find_by_list_id_is_owner_checked_and_newest_first(db) -> None:
    """Executions are listed newest first, only for the list's owner."""
    list_id = ListRepository().sync_profile("alice", [_list_config("A")])[0].id
    repository = ExecutionRepository()
    start = datetime(2026, 1, 1, tzinfo=UTC)
    for offset in range(3):
        execution = ProcessingExecution.create(
            list_id, f"manual-{offset}-abc", TriggerType.MANUAL
        )
        execution.started_at = start + timedelta(hours=offset)
        repository.save(execution)

    executions = repository.find_by_list_id(list_id, "alice", limit=2)

    assert [execution.batch_id for execution in executions] == [
        "manual-2-abc",
        "manual-1-abc",
    ]
    assert repository.find_by_list_id(list_id, "bob") == []


def test_find_by_batch_id_and_running(db) -> None:
    """Executions can be grouped by batch and filtered by status."""
    lists = ListRepository().sync_profile(
        "alice", [_list_config("A"), _list_config("B")]
    )
    repository = ExecutionRepository()
    first = repository.save(
        ProcessingExecution.create(lists[0].id, "batch-1-x", TriggerType.SCHEDULED)
    )
    repository.save(
        ProcessingExecution.create(lists[1].id, "batch-1-x", TriggerType.SCHEDULED)
    )
    first.mark_error("failed")
    repository.save(first)

    assert [e.list_id for e in repository.find_by_batch_id("batch-1-x")] == [
        lists[0].id,
        lists[1].id,
    ]
    assert [e.list_id for e in repository.find_running()] == [lists[1].id]


def test_cache_insert_is_idempotent_and_keeps_first_list(db) -> None:
    """The first list to request an item stays recorded."""
    lists = ListRepository().sync_profile(
        "alice", [_list_config("A"), _list_config("B")]
    )
    cache = RequestCacheRepository()

    assert cache.insert(lists[0].id, [movie(1), movie(2)]) == 2
    assert cache.insert(lists[1].id, [movie(2), movie(3), movie(3)]) == 1

    entry = cache.get(2)
    assert entry is not None
    assert entry.first_list_id == lists[0].id
    assert cache.get(3).first_list_id == lists[1].id
    assert cache.insert(lists[1].id, []) == 0


def test_cache_filter_uncached_keeps_order(db) -> None:
    """Uncached items are returned in their original order."""
    list_id = ListRepository().sync_profile("alice", [_list_config("A")])[0].id
    cache = RequestCacheRepository()
    cache.insert(list_id, [movie(2)])

    remaining = cache.filter_uncached([movie(3), movie(2), movie(1)])

    assert [item.external_id for item in remaining] == [3, 1]
    assert cache.find_cached_ids([]) == set()


@pytest.mark.parametrize("limit", [1, 50])
def test_find_by_list_id_unknown_list(db, limit: int) -> None:
    """Unknown lists have no executions."""
    assert ExecutionRepository().find_by_list_id(1234, "alice", limit=limit) == []
