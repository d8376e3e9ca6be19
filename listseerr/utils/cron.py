"""Cron expression helpers."""

from datetime import datetime, tzinfo

from apscheduler.triggers.cron import CronTrigger

from listseerr.exceptions import InvalidScheduleError

__all__ = ["next_fire_time", "parse_cron"]


def parse_cron(expression: str, timezone: tzinfo | str) -> CronTrigger:
    """Parse a standard five-field crontab expression.

    Args:
        expression (str): Crontab expression, e.g. "0 4 * * *".
        timezone (tzinfo | str): Timezone the expression is evaluated in.

    Returns:
        CronTrigger: Trigger computing the fire times of the expression.

    Raises:
        InvalidScheduleError: If the expression cannot be parsed.
    """
    try:
        return CronTrigger.from_crontab(expression, timezone=timezone)
    except ValueError as e:
        raise InvalidScheduleError(
            f"Invalid cron expression '{expression}': {e}"
        ) from e


def next_fire_time(trigger: CronTrigger, now: datetime) -> datetime | None:
    """Get the first fire time of a trigger at or after `now`."""
    return trigger.get_next_fire_time(None, now)
