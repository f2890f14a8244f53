"""Time-triggered automation scheduling."""

from spritehooks.scheduler.cron_scheduler import (
    CronScheduler,
    SyncResult,
    parse_schedule,
    validate_schedule,
)

__all__ = [
    "CronScheduler",
    "SyncResult",
    "parse_schedule",
    "validate_schedule",
]
