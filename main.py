"""ListSeerr Main Application."""

import argparse
import asyncio
import signal
import sys

from pydantic import ValidationError

from listseerr import LISTSEERR_HEADER, log
from listseerr.config.settings import get_config
from listseerr.core.sched import SchedulerClient
from listseerr.core.service import ProcessingService
from listseerr.exceptions import ListSeerrError
from listseerr.models.media import TriggerType


def _setup_signal_handlers_for_scheduler(scheduler: SchedulerClient) -> None:
    """Install SIGINT/SIGTERM handlers that request scheduler shutdown."""
    loop = asyncio.get_running_loop()

    def _on_signal(sig):
        name = signal.Signals(sig).name if sig else "UNKNOWN"
        log.info(f"ListSeerr: Received {name} signal, initiating graceful shutdown...")
        scheduler.request_shutdown()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, lambda s=sig: _on_signal(s))
        except NotImplementedError:
            # Fallback for environments that don't support add_signal_handler
            signal.signal(sig, lambda s, f: _on_signal(s))


def validate_configuration() -> bool:
    """Validate the application configuration and display profile information.

    Returns:
        bool: True if configuration is valid, False otherwise
    """
    try:
        config = get_config()
    except ValidationError as e:
        log.error(f"ListSeerr: Configuration validation failed: {e}")
        return False
    except ValueError as e:
        log.error(f"ListSeerr: Configuration value error: {e}")
        return False
    except OSError as e:
        log.error(f"ListSeerr: File system error during configuration: {e}")
        return False

    for profile_name, profile_config in config.profiles.items():
        log.info(f"ListSeerr: Profile $$'{profile_name}'$$: {profile_config!s}")
        if profile_config.jellyseerr is None:
            log.warning(
                f"ListSeerr: Profile $$'{profile_name}'$$ has no Jellyseerr "
                f"connection, its runs will fail"
            )
    return True


async def run() -> int:
    """Run the scheduler until shutdown.

    Returns:
        int: Exit code (0 for success, 1 for error)
    """
    app_scheduler: SchedulerClient | None = None

    ret = 0
    try:
        log.info("\n" + LISTSEERR_HEADER)

        if not validate_configuration():
            return 1

        app_scheduler = SchedulerClient(get_config())
        await app_scheduler.initialize()
        await app_scheduler.start()

        _setup_signal_handlers_for_scheduler(app_scheduler)

        await app_scheduler.wait_for_completion()
    except KeyboardInterrupt:
        log.info("ListSeerr: Keyboard interrupt received, shutting down...")
    except ListSeerrError as e:
        log.error(f"ListSeerr: {e}")
        return 1
    except OSError as e:
        log.error(f"ListSeerr: File system error: {e}")
        return 1
    except asyncio.CancelledError:
        log.info("ListSeerr: Application cancelled")
        return 0
    except Exception as e:
        log.error(f"ListSeerr: Unexpected application error: {e}", exc_info=True)
        return 1
    finally:
        if app_scheduler:
            log.info("ListSeerr: Shutting down application...")
            try:
                await app_scheduler.stop()
                log.success("ListSeerr: Application shutdown complete")
            except Exception as e:
                log.error(f"ListSeerr: Error during shutdown: {e}", exc_info=True)
                ret = 1
    return ret


async def process(profile_name: str, list_name: str | None = None) -> int:
    """Run a manual batch for a profile, or a single list when one is named.

    Args:
        profile_name (str): Profile whose lists are processed.
        list_name (str | None): Name of the single list to process.

    Returns:
        int: Exit code (0 for success, 1 for error)
    """
    if not validate_configuration():
        return 1

    config = get_config()
    service = ProcessingService(config)
    try:
        config.get_profile(profile_name)
        service.initialize()

        if list_name is not None:
            execution = await service.run_list_by_name(
                list_name, profile_name, TriggerType.MANUAL
            )
            metrics = execution.metrics
            print(
                f"{list_name}: {execution.status} "
                f"(found {metrics.items_found}, requested {metrics.items_requested}, "
                f"failed {metrics.items_failed}, previously requested "
                f"{metrics.items_skipped_previously_requested})"
            )
        else:
            result = await service.run_batch(profile_name, TriggerType.MANUAL)
            print(
                f"{profile_name}: {result.processed_lists} list(s) "
                f"(found {result.total_items_found}, "
                f"requested {result.items_requested}, failed {result.items_failed}, "
                f"previously requested {result.items_skipped_previously_requested}, "
                f"available {result.items_skipped_available})"
            )
            for execution in result.executions:
                if execution.error_message:
                    print(f"  list {execution.list_id}: {execution.error_message}")
    except ListSeerrError as e:
        log.error(f"ListSeerr: {e}")
        return 1
    finally:
        await service.close()
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line parser."""
    parser = argparse.ArgumentParser(
        prog="listseerr", description="Request media lists through Jellyseerr"
    )
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Run the scheduler (default)")

    process_parser = subparsers.add_parser(
        "process", help="Process a profile's lists once"
    )
    process_parser.add_argument("--profile", default="default", help="Profile name")
    process_parser.add_argument(
        "--list", dest="list_name", default=None, help="Process only this list"
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Args:
        argv (list[str] | None): Command-line arguments.

    Returns:
        int: Exit code (0 for success, 1 for error)
    """
    args = build_parser().parse_args(argv)
    try:
        if args.command == "process":
            return asyncio.run(process(args.profile, args.list_name))
        return asyncio.run(run())
    except KeyboardInterrupt:
        log.info("ListSeerr: Application interrupted")
        return 0
    except Exception as e:
        log.error(f"ListSeerr: Fatal error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
