"""Batch Orchestrator."""

import asyncio
from dataclasses import dataclass, field

from listseerr import log
from listseerr.core.dedup import DeduplicationPolicy, deduplicate
from listseerr.core.jellyseerr import RequestSubmitter
from listseerr.core.repositories import (
    ConfigRepository,
    ExecutionRepository,
    ListRepository,
)
from listseerr.exceptions import JellyseerrNotConfiguredError
from listseerr.models.db import MediaList
from listseerr.models.execution import ProcessingExecution
from listseerr.models.media import BatchId, MediaItem, Provider, TriggerType
from listseerr.providers.base import MediaFetcher, ProviderRegistry

__all__ = ["BatchOrchestrator", "BatchResult"]


@dataclass(slots=True)
class BatchResult:
    """Summary of a batch run.

    `total_items_found` counts every fetched item, duplicates across lists
    included. The request and skip counters count unique items.
    """

    processed_lists: int = 0
    total_items_found: int = 0
    items_requested: int = 0
    items_failed: int = 0
    items_skipped_previously_requested: int = 0
    items_skipped_available: int = 0
    executions: list[ProcessingExecution] = field(default_factory=list)


class BatchOrchestrator:
    """Processes every list of an owner in one run.

    Items are deduplicated across all lists before Jellyseerr is consulted, so
    an item appearing in several lists is checked and requested once. Each list
    still gets its own execution record, reconciled from the run-wide outcome.
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

    def _select_lists(
        self, owner_id: str, trigger_type: TriggerType
    ) -> tuple[list[MediaList], dict[Provider, str | None]]:
        """Get the lists to process and the credential of each of their providers.

        Scheduled runs only include enabled lists. Lists whose provider needs a
        credential that is not configured are left out.
        """
        candidates = self.lists.find_all(owner_id)
        if trigger_type is TriggerType.SCHEDULED:
            candidates = [candidate for candidate in candidates if candidate.enabled]

        credentials: dict[Provider, str | None] = {}
        for provider in dict.fromkeys(candidate.provider for candidate in candidates):
            provider_config = self.configs.find_provider(owner_id, provider)
            if provider_config is not None:
                credentials[provider] = provider_config.api_key.get_secret_value()
            elif not self.registry.requires_credential(provider):
                credentials[provider] = None
            else:
                log.debug(
                    f"[{owner_id}] Skipping $$'{provider}'$$ lists, not configured"
                )

        selected = [
            candidate for candidate in candidates if candidate.provider in credentials
        ]
        return selected, credentials

    async def _fetch(
        self,
        media_list: MediaList,
        fetchers: dict[Provider, MediaFetcher],
        credentials: dict[Provider, str | None],
    ) -> list[MediaItem]:
        if media_list.provider not in fetchers:
            fetchers[media_list.provider] = self.registry.create(
                media_list.provider, timeout=self.request_timeout
            )
        fetcher = fetchers[media_list.provider]
        return await asyncio.wait_for(
            fetcher.fetch_items(
                media_list.url, media_list.max_items, credentials[media_list.provider]
            ),
            fetcher.fetch_timeout,
        )

    async def run(self, trigger_type: TriggerType, owner_id: str) -> BatchResult:
        """Process the owner's lists.

        Args:
            trigger_type (TriggerType): What triggered the run.
            owner_id (str): Owner whose lists are processed.

        Returns:
            BatchResult: Run-wide counters and one execution per processed list.

        Raises:
            JellyseerrNotConfiguredError: If there are lists to process but no
                Jellyseerr connection is configured. No execution is created.
        """
        trigger_type = TriggerType(trigger_type)
        media_lists, credentials = self._select_lists(owner_id, trigger_type)
        if not media_lists:
            log.info(f"[{owner_id}] No lists to process")
            return BatchResult()

        jellyseerr = self.configs.find_jellyseerr(owner_id)
        if jellyseerr is None:
            raise JellyseerrNotConfiguredError(owner_id)

        batch_id = str(BatchId.generate(trigger_type))
        log.info(
            f"[{owner_id}] Starting {trigger_type} batch $${{batch_id: {batch_id}}}$$ "
            f"for {len(media_lists)} list(s)"
        )

        executions: list[ProcessingExecution] = []
        fetched: dict[int, list[MediaItem]] = {}
        fetchers: dict[Provider, MediaFetcher] = {}
        try:
            for media_list in media_lists:
                execution = self.executions.save(
                    ProcessingExecution.create(media_list.id, batch_id, trigger_type)
                )
                executions.append(execution)

                try:
                    items = await self._fetch(media_list, fetchers, credentials)
                except Exception as e:
                    error = str(e) or type(e).__name__
                    log.error(
                        f"[{owner_id}] Failed to fetch list $$'{media_list.name}'$$: "
                        f"{error}"
                    )
                    execution.mark_error(error)
                    self.executions.save(execution)
                    items = []
                else:
                    log.info(
                        f"[{owner_id}] Fetched {len(items)} item(s) from list "
                        f"$$'{media_list.name}'$$"
                    )
                fetched[media_list.id] = items

            unique_items = deduplicate(
                item for media_list in media_lists for item in fetched[media_list.id]
            )
            categorized = await self.policy.categorize(unique_items, jellyseerr)
            log.info(
                f"[{owner_id}] Categorized {len(unique_items)} unique item(s): "
                f"$${{to_request: {len(categorized.to_request)}, "
                f"previously_requested: {len(categorized.previously_requested)}, "
                f"available: {len(categorized.available)}}}$$"
            )

            results = await self.submitter.request_items(
                categorized.to_request, jellyseerr
            )
            requested_ids = {item.external_id for item in results.successful}
            for media_list in media_lists:
                self.policy.record(
                    media_list.id,
                    [
                        item
                        for item in fetched[media_list.id]
                        if item.external_id in requested_ids
                    ],
                )

            failed_ids = {failure.item.external_id for failure in results.failed}
            previous_ids = {
                item.external_id for item in categorized.previously_requested
            }
            available_ids = {item.external_id for item in categorized.available}

            for media_list, execution in zip(media_lists, executions, strict=True):
                if not execution.is_running:
                    continue
                items = fetched[media_list.id]
                list_ids = {item.external_id for item in items}
                execution.mark_success(
                    items_found=len(items),
                    items_requested=len(list_ids & requested_ids),
                    items_failed=len(list_ids & failed_ids),
                    items_skipped_available=len(list_ids & available_ids),
                    items_skipped_previously_requested=len(list_ids & previous_ids),
                )
                self.executions.save(execution)
        except asyncio.CancelledError:
            log.warning(f"[{owner_id}] Batch $${{batch_id: {batch_id}}}$$ cancelled")
            self._abort(executions, "Cancelled")
            raise
        except Exception as e:
            self._abort(executions, str(e) or type(e).__name__)
            raise
        finally:
            for fetcher in fetchers.values():
                await fetcher.close()

        result = BatchResult(
            processed_lists=len(executions),
            total_items_found=sum(len(items) for items in fetched.values()),
            items_requested=len(results.successful),
            items_failed=len(results.failed),
            items_skipped_previously_requested=len(categorized.previously_requested),
            items_skipped_available=len(categorized.available),
            executions=executions,
        )
        log.success(
            f"[{owner_id}] Batch $${{batch_id: {batch_id}}}$$ complete: "
            f"$${{lists: {result.processed_lists}, found: {result.total_items_found}, "
            f"requested: {result.items_requested}, failed: {result.items_failed}, "
            f"previously_requested: {result.items_skipped_previously_requested}, "
            f"available: {result.items_skipped_available}}}$$"
        )
        return result

    def _abort(self, executions: list[ProcessingExecution], error: str) -> None:
        """Fail every execution of the run that is still running."""
        for execution in executions:
            if execution.is_running:
                execution.mark_error(error)
                self.executions.save(execution)
