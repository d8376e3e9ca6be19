"""Single-List Orchestrator."""

import asyncio

from listseerr import log
from listseerr.core.dedup import DeduplicationPolicy, deduplicate
from listseerr.core.jellyseerr import RequestSubmitter
from listseerr.core.repositories import (
    ConfigRepository,
    ExecutionRepository,
    ListRepository,
)
from listseerr.exceptions import (
    JellyseerrNotConfiguredError,
    ListNotFoundError,
    ProviderNotConfiguredError,
)
from listseerr.models.execution import ProcessingExecution
from listseerr.models.media import BatchId, TriggerType
from listseerr.providers.base import ProviderRegistry

__all__ = ["SingleListOrchestrator"]


class SingleListOrchestrator:
    """Processes one list on its own.

    Items ListSeerr requested before, for any list, are skipped using the
    deduplication policy (the persistent request cache by default). Successful
    requests are recorded so later runs skip them too.
    """

    def __init__(
        self,
        lists: ListRepository,
        configs: ConfigRepository,
        executions: ExecutionRepository,
        registry: ProviderRegistry,
        submitter: RequestSubmitter,
        policy: DeduplicationPolicy,
        request_timeout: float = 30.0,
    ) -> None:
        self.lists = lists
        self.configs = configs
        self.executions = executions
        self.registry = registry
        self.submitter = submitter
        self.policy = policy
        self.request_timeout = request_timeout

    async def run(
        self,
        list_id: int,
        owner_id: str,
        trigger_type: TriggerType = TriggerType.MANUAL,
    ) -> ProcessingExecution:
        """Process a list.

        Args:
            list_id (int): Id of the list to process.
            owner_id (str): Owner the list must belong to.
            trigger_type (TriggerType): What triggered the run.

        Returns:
            ProcessingExecution: The completed execution.

        Raises:
            ListNotFoundError: If the owner has no such list.
            NotConfiguredError: If the list's provider or Jellyseerr is not
                configured. Raised before any execution is created.
            Exception: Any failure during processing is re-raised after the
                execution has been marked as failed.
        """
        trigger_type = TriggerType(trigger_type)
        media_list = self.lists.find_by_id(list_id, owner_id)
        if media_list is None:
            raise ListNotFoundError(f"List {list_id} not found for '{owner_id}'")

        credential = None
        provider_config = self.configs.find_provider(owner_id, media_list.provider)
        if provider_config is not None:
            credential = provider_config.api_key.get_secret_value()
        elif self.registry.requires_credential(media_list.provider):
            raise ProviderNotConfiguredError(media_list.provider)

        jellyseerr = self.configs.find_jellyseerr(owner_id)
        if jellyseerr is None:
            raise JellyseerrNotConfiguredError(owner_id)

        execution = self.executions.save(
            ProcessingExecution.create(
                media_list.id, str(BatchId.generate(trigger_type)), trigger_type
            )
        )
        log.info(
            f"[{owner_id}] Processing list $$'{media_list.name}'$$ "
            f"$${{execution_id: {execution.id}, trigger: {trigger_type}}}$$"
        )

        try:
            fetcher = self.registry.create(
                media_list.provider, timeout=self.request_timeout
            )
            try:
                fetch = fetcher.fetch_items(
                    media_list.url, media_list.max_items, credential
                )
                items = await asyncio.wait_for(fetch, fetcher.fetch_timeout)
            finally:
                await fetcher.close()

            categorized = await self.policy.categorize(deduplicate(items), jellyseerr)
            results = await self.submitter.request_items(
                categorized.to_request, jellyseerr
            )
            self.policy.record(media_list.id, results.successful)

            execution.mark_success(
                items_found=len(items),
                items_requested=len(results.successful),
                items_failed=len(results.failed),
                items_skipped_available=len(categorized.available),
                items_skipped_previously_requested=len(
                    categorized.previously_requested
                ),
            )
            self.executions.save(execution)
        except asyncio.CancelledError:
            log.warning(
                f"[{owner_id}] Processing of list $$'{media_list.name}'$$ cancelled"
            )
            if execution.is_running:
                execution.mark_error("Cancelled")
                self.executions.save(execution)
            raise
        except Exception as e:
            error = str(e) or type(e).__name__
            log.error(
                f"[{owner_id}] Failed to process list $$'{media_list.name}'$$: {error}"
            )
            if execution.is_running:
                execution.mark_error(error)
                self.executions.save(execution)
            raise

        metrics = execution.metrics
        log.success(
            f"[{owner_id}] Processed list $$'{media_list.name}'$$: "
            f"$${{found: {metrics.items_found}, requested: {metrics.items_requested}, "
            f"failed: {metrics.items_failed}, "
            f"previously_requested: {metrics.items_skipped_previously_requested}}}$$"
        )
        return execution
