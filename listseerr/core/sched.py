"""Scheduler Module."""

import asyncio
import contextlib
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from zoneinfo import ZoneInfo

from apscheduler.triggers.cron import CronTrigger
from tzlocal import get_localzone

from listseerr import log
from listseerr.config.settings import ListSeerrConfig, ProfileConfig
from listseerr.core.service import ProcessingService
from listseerr.exceptions import ProfileNotFoundError
from listseerr.models.media import TriggerType
from listseerr.utils.cron import next_fire_time, parse_cron

__all__ = ["ProfileScheduler", "ScheduledJob", "SchedulerClient"]


@dataclass(slots=True)
class ScheduledJob:
    """A processing action fired by a cron trigger."""

    name: str
    trigger: CronTrigger
    action: Callable[[], Awaitable[None]]

    def next_run(self, now: datetime | None = None) -> datetime | None:
        """Get the next time the job fires."""
        return next_fire_time(self.trigger, now or datetime.now(self.trigger.timezone))


class ProfileScheduler:
    """Runs the scheduled jobs of one profile.

    The profile's `processing_schedule` fires a scheduled batch run, and each
    enabled list with its own `schedule` fires a scheduled single-list run.
    Runs of a profile never overlap.
    """

    def __init__(
        self,
        profile_name: str,
        profile_config: ProfileConfig,
        service: ProcessingService,
        stop_event: asyncio.Event | None = None,
    ) -> None:
        """Initialize a profile scheduler.

        Args:
            profile_name: Name of the profile
            profile_config: Configuration of the profile
            service: Processing service the jobs run through
            stop_event: Event to signal shutdown
        """
        self.profile_name = profile_name
        self.profile_config = profile_config
        self.service = service
        self.stop_event = stop_event or asyncio.Event()
        self.jobs = self._build_jobs()

        self._running = False
        self._run_lock = asyncio.Lock()
        self._tasks: set[asyncio.Task] = set()  # Prevents early GC

    def _build_jobs(self) -> list[ScheduledJob]:
        timezone = ZoneInfo(self.profile_config.timezone)
        jobs: list[ScheduledJob] = []

        if self.profile_config.processing_schedule:
            jobs.append(
                ScheduledJob(
                    name="batch",
                    trigger=parse_cron(
                        self.profile_config.processing_schedule, timezone
                    ),
                    action=self.run_batch,
                )
            )

        for list_config in self.profile_config.lists:
            if not (list_config.enabled and list_config.schedule):
                continue

            async def action(name: str = list_config.name) -> None:
                await self.run_list(name)

            jobs.append(
                ScheduledJob(
                    name=f"list:{list_config.name}",
                    trigger=parse_cron(list_config.schedule, timezone),
                    action=action,
                )
            )
        return jobs

    @property
    def is_busy(self) -> bool:
        """Whether a run of this profile is in progress."""
        return self._run_lock.locked()

    async def run_batch(
        self, trigger_type: TriggerType = TriggerType.SCHEDULED
    ) -> None:
        """Run a batch for the profile, logging instead of raising failures."""
        async with self._run_lock:
            try:
                await self.service.run_batch(self.profile_name, trigger_type)
            except Exception:
                log.error(
                    f"[{self.profile_name}] Batch processing error", exc_info=True
                )

    async def run_list(
        self, name: str, trigger_type: TriggerType = TriggerType.SCHEDULED
    ) -> None:
        """Run a single list of the profile, logging instead of raising failures."""
        async with self._run_lock:
            try:
                await self.service.run_list_by_name(
                    name, self.profile_name, trigger_type
                )
            except Exception:
                log.error(
                    f"[{self.profile_name}] Error processing list $$'{name}'$$",
                    exc_info=True,
                )

    async def start(self) -> None:
        """Start a loop for every job of the profile."""
        if self._running:
            return
        self._running = True

        for job in self.jobs:
            task = asyncio.create_task(self._job_loop(job))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def stop(self) -> None:
        """Stop the job loops, cancelling any run in progress."""
        self._running = False
        self.stop_event.set()

        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    async def _job_loop(self, job: ScheduledJob) -> None:
        """Wait for each fire time of a job and run it."""
        while self._running and not self.stop_event.is_set():
            try:
                next_run = job.next_run()
                if next_run is None:
                    log.info(f"[{self.profile_name}] Job $$'{job.name}'$$ finished")
                    break

                log.info(
                    f"[{self.profile_name}] Next $$'{job.name}'$$ run scheduled for: "
                    f"{next_run.astimezone(get_localzone())}"
                )
                delay = (next_run - datetime.now(next_run.tzinfo)).total_seconds()
                with contextlib.suppress(asyncio.TimeoutError):
                    await asyncio.wait_for(self.stop_event.wait(), max(delay, 0))
                if self.stop_event.is_set():
                    break

                await job.action()
                # Step past the fire time so it is not picked again
                await asyncio.sleep(1)
            except asyncio.CancelledError:
                log.debug(f"[{self.profile_name}] Job $$'{job.name}'$$ cancelled")
                break
            except Exception:
                log.error(
                    f"[{self.profile_name}] Scheduler error in $$'{job.name}'$$",
                    exc_info=True,
                )
                await asyncio.sleep(10)


class SchedulerClient:
    """Application scheduler that manages the schedulers of all profiles.

    The orchestrators hold no scheduling state, so reloading only rebuilds the
    job table from the configuration.
    """

    def __init__(
        self, config: ListSeerrConfig, service: ProcessingService | None = None
    ) -> None:
        """Initialize the application scheduler.

        Args:
            config (ListSeerrConfig): Application configuration.
            service (ProcessingService | None): Processing service, built from the
                configuration when not given.
        """
        self.config = config
        self.service = service or ProcessingService(config)
        self.profile_schedulers: dict[str, ProfileScheduler] = {}
        self.stop_event = asyncio.Event()
        self._running = False

    def request_shutdown(self) -> None:
        """Request application shutdown from external callers."""
        if not self.stop_event.is_set():
            self.stop_event.set()

    @property
    def is_running(self) -> bool:
        """Return whether the scheduler main loop is currently running."""
        return self._running

    async def initialize(self) -> None:
        """Sync the configured lists and build each profile's scheduler."""
        log.info("Initializing application scheduler")
        self.service.initialize()

        self.profile_schedulers = {
            profile_name: ProfileScheduler(
                profile_name=profile_name,
                profile_config=profile_config,
                service=self.service,
                stop_event=self.stop_event,
            )
            for profile_name, profile_config in self.config.profiles.items()
        }
        log.info(
            f"Application scheduler initialized with "
            f"{len(self.profile_schedulers)} profile(s)"
        )

    async def start(self) -> None:
        """Start every profile scheduler."""
        if self._running:
            return
        self._running = True

        log.info("Starting application scheduler")
        for profile_name, scheduler in self.profile_schedulers.items():
            if not scheduler.jobs:
                log.info(f"[{profile_name}] No schedules configured, manual runs only")
                continue
            log.info(
                f"[{profile_name}] Starting scheduler with "
                f"{len(scheduler.jobs)} job(s): {[job.name for job in scheduler.jobs]}"
            )
            await scheduler.start()

        if not any(scheduler.jobs for scheduler in self.profile_schedulers.values()):
            log.warning("No scheduled jobs were started")

    async def stop(self) -> None:
        """Stop all schedulers and clean up resources."""
        if not self._running:
            return
        self._running = False

        log.info("Stopping application scheduler")
        self.stop_event.set()

        await asyncio.gather(
            *(scheduler.stop() for scheduler in self.profile_schedulers.values()),
            return_exceptions=True,
        )
        await self.service.close()
        self.profile_schedulers.clear()

        log.info("Application scheduler stopped")

    async def reload(self, config: ListSeerrConfig) -> None:
        """Replace the configuration and rebuild every job.

        Args:
            config (ListSeerrConfig): The new configuration.
        """
        log.info("Reloading application scheduler")
        was_running = self._running
        await self.stop()

        self.config = config
        self.service = ProcessingService(config)
        self.stop_event = asyncio.Event()

        await self.initialize()
        if was_running:
            await self.start()

    async def wait_for_completion(self) -> None:
        """Wait for the application to complete or be stopped."""
        if not self._running:
            return

        try:
            await self.stop_event.wait()
        except asyncio.CancelledError:
            log.info("Application scheduler wait interrupted")
            raise

    def get_scheduler(self, profile_name: str) -> ProfileScheduler:
        """Get the scheduler of a profile.

        Raises:
            ProfileNotFoundError: If the profile doesn't exist.
        """
        if profile_name not in self.profile_schedulers:
            raise ProfileNotFoundError(f"Profile '{profile_name}' not found")
        return self.profile_schedulers[profile_name]

    def get_next_runs(self) -> dict[str, dict[str, datetime | None]]:
        """Get the next fire time of every job, by profile and job name."""
        return {
            profile_name: {job.name: job.next_run() for job in scheduler.jobs}
            for profile_name, scheduler in self.profile_schedulers.items()
        }
