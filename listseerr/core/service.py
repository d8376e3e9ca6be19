"""Processing Service."""

from listseerr import log
from listseerr.config.settings import ListSeerrConfig
from listseerr.core.batch import BatchOrchestrator, BatchResult
from listseerr.core.dedup import LiveAvailabilityPolicy, PersistentCachePolicy
from listseerr.core.jellyseerr import JellyseerrClient
from listseerr.core.repositories import (
    ConfigRepository,
    ExecutionRepository,
    ListRepository,
    RequestCacheRepository,
)
from listseerr.core.single import SingleListOrchestrator
from listseerr.exceptions import ListNotFoundError
from listseerr.models.db import MediaList
from listseerr.models.execution import ProcessingExecution
from listseerr.models.media import TriggerType
from listseerr.providers import ProviderRegistry, provider_registry

__all__ = ["ProcessingService"]


class ProcessingService:
    """Entry point to list processing for the scheduler and the CLI.

    Wires the repositories, the provider registry and the Jellyseerr client into
    the single-list orchestrator (persistent cache deduplication) and the batch
    orchestrator (live availability deduplication).
    """

    def __init__(
        self,
        config: ListSeerrConfig,
        registry: ProviderRegistry = provider_registry,
        jellyseerr_client: JellyseerrClient | None = None,
    ) -> None:
        self.config = config
        self.lists = ListRepository()
        self.configs = ConfigRepository(config)
        self.executions = ExecutionRepository()
        self.cache = RequestCacheRepository()
        self.jellyseerr_client = jellyseerr_client or JellyseerrClient(
            timeout=config.request_timeout
        )

        self.single = SingleListOrchestrator(
            self.lists,
            self.configs,
            self.executions,
            registry,
            self.jellyseerr_client,
            PersistentCachePolicy(self.cache),
            request_timeout=config.request_timeout,
        )
        self.batch = BatchOrchestrator(
            self.lists,
            self.configs,
            self.executions,
            registry,
            self.jellyseerr_client,
            LiveAvailabilityPolicy(self.jellyseerr_client),
            request_timeout=config.request_timeout,
        )

    def initialize(self) -> None:
        """Mirror the configured lists and fail executions left running.

        An execution can only still be running at startup if a previous process
        stopped in the middle of it.
        """
        for profile_name, profile in self.config.profiles.items():
            media_lists = self.lists.sync_profile(profile_name, profile.lists)
            log.info(f"[{profile_name}] {len(media_lists)} list(s) configured")

        for execution in self.executions.find_running():
            log.warning(
                f"Marking interrupted execution $${{id: {execution.id}, "
                f"batch_id: {execution.batch_id}}}$$ as failed"
            )
            execution.mark_error("Interrupted before completion")
            self.executions.save(execution)

    async def run_single_list(
        self,
        list_id: int,
        owner_id: str,
        trigger_type: TriggerType = TriggerType.MANUAL,
    ) -> ProcessingExecution:
        """Process one list with the persistent request cache."""
        return await self.single.run(list_id, owner_id, trigger_type)

    async def run_list_by_name(
        self,
        name: str,
        owner_id: str,
        trigger_type: TriggerType = TriggerType.MANUAL,
    ) -> ProcessingExecution:
        """Process one list, looked up by its configured name.

        Raises:
            ListNotFoundError: If the owner has no list with that name.
        """
        media_list: MediaList | None = self.lists.find_by_name(name, owner_id)
        if media_list is None:
            raise ListNotFoundError(f"List '{name}' not found for '{owner_id}'")
        return await self.single.run(media_list.id, owner_id, trigger_type)

    async def run_batch(
        self, owner_id: str, trigger_type: TriggerType = TriggerType.MANUAL
    ) -> BatchResult:
        """Process all of an owner's lists with live availability checks."""
        return await self.batch.run(trigger_type, owner_id)

    async def close(self) -> None:
        """Release the Jellyseerr client's HTTP session."""
        await self.jellyseerr_client.close()
