"""Cron scheduler for time-based automations.

Keeps one APScheduler job per cron automation and reconciles that set
against the automation catalog on startup and whenever the catalog changes.
The catalog is the source of truth; the job map only tracks live timers.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass

from apscheduler.job import Job
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from spritehooks.catalog import AutomationCatalog
from spritehooks.engine.executor import SpriteExecutor
from spritehooks.models import Automation, is_cron_source

logger = logging.getLogger(__name__)

_CRON_FIELDS = ("minute", "hour", "day", "month", "day_of_week")
_RANGE_RE = re.compile(r"^(\d+)-(\d+)$")


def _crontab_day_of_week(field: str) -> str:
    """Translate crontab weekdays (0/7 = Sunday) to APScheduler's (0 = Monday).

    Named days and ``*`` mean the same thing in both and pass through.
    """
    if field == "*":
        return field

    converted: list[str] = []
    for item in field.split(","):
        base, _, step_text = item.partition("/")
        if base == "*":
            values = list(range(0, 7))
        elif base.isdigit():
            start = int(base)
            values = list(range(start, 7)) if step_text else [start]
        elif _RANGE_RE.match(base):
            first, last = (int(v) for v in _RANGE_RE.match(base).groups())
            if first > last:
                raise ValueError(f"Invalid day of week range: {base}")
            values = list(range(first, last + 1))
        else:
            converted.append(item)
            continue

        if any(v > 7 for v in values):
            raise ValueError(f"Day of week out of range: {item}")
        step = int(step_text) if step_text else 1
        if step < 1:
            raise ValueError(f"Invalid step: {item}")
        weekdays = sorted({(v - 1) % 7 for v in values[::step]})
        converted.append(",".join(str(v) for v in weekdays))

    return ",".join(converted)


def parse_schedule(schedule: str) -> CronTrigger:
    """Build a trigger from a 5-field crontab, or 6 fields with leading seconds.

    Raises:
        ValueError: if the expression is not a valid schedule
    """
    if not isinstance(schedule, str):
        raise ValueError("Schedule must be a string")

    fields = schedule.split()
    if len(fields) == 5:
        second = "0"
    elif len(fields) == 6:
        second, fields = fields[0], fields[1:]
    else:
        raise ValueError(f"Wrong number of fields; got {len(fields)}, expected 5 or 6")

    values = dict(zip(_CRON_FIELDS, fields, strict=True))
    values["day_of_week"] = _crontab_day_of_week(values["day_of_week"])
    return CronTrigger(second=second, **values)


def validate_schedule(schedule: str) -> bool:
    try:
        parse_schedule(schedule)
    except ValueError:
        return False
    return True


@dataclass(frozen=True)
class SyncResult:
    registered: int = 0
    failed: int = 0
    removed: int = 0


class CronScheduler:
    """Owns the live timers for cron automations."""

    def __init__(
        self,
        catalog: AutomationCatalog,
        executor: SpriteExecutor,
        scheduler: AsyncIOScheduler | None = None,
    ):
        self.catalog = catalog
        self.executor = executor
        self.scheduler = scheduler or AsyncIOScheduler()
        self._jobs: dict[str, Job] = {}
        self._automations: dict[str, Automation] = {}
        # Only one reconciliation may touch the job map at a time
        self._sync_lock = asyncio.Lock()

    def start(self) -> None:
        """Start the scheduler. Needs a running event loop."""
        if not self.scheduler.running:
            self.scheduler.start()
            logger.info("Cron scheduler started")

    def shutdown(self) -> None:
        self.stop_all()
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Cron scheduler shutdown")

    @staticmethod
    def _job_id(automation_id: str) -> str:
        return f"cron_{automation_id}"

    def _stop_job(self, automation_id: str) -> bool:
        job = self._jobs.pop(automation_id, None)
        self._automations.pop(automation_id, None)
        if job is None:
            return False
        try:
            job.remove()
        except JobLookupError:
            logger.debug(f"[{automation_id}] Cron job was already gone")
        return True

    async def _fire(self, automation: Automation) -> None:
        """Run a cron automation; failures are logged, never raised."""
        log_extra = {"automation_id": automation.id}
        logger.info(
            f"[{automation.id}] Cron triggered: {automation.source.schedule}", extra=log_extra
        )
        try:
            result = await self.executor.execute(automation)
            if not result.success:
                logger.error(
                    f"[{automation.id}] Cron execution failed: {result.error}", extra=log_extra
                )
        except Exception as e:
            logger.error(f"[{automation.id}] Cron execution error: {e}", extra=log_extra)

    def register(self, automation: Automation) -> bool:
        """Register (or replace) the timer for one cron automation."""
        if not is_cron_source(automation.source):
            return False

        schedule = automation.source.schedule
        try:
            trigger = parse_schedule(schedule)
        except ValueError as e:
            logger.error(
                f"[{automation.id}] Invalid cron schedule: {schedule} ({e})",
                extra={"automation_id": automation.id},
            )
            return False

        # Stop the existing timer before creating its replacement
        self._stop_job(automation.id)

        job = self.scheduler.add_job(
            self._fire,
            trigger=trigger,
            id=self._job_id(automation.id),
            args=[automation],
            name=automation.id,
            replace_existing=True,
            coalesce=True,
        )
        self._jobs[automation.id] = job
        self._automations[automation.id] = automation
        logger.info(f"[{automation.id}] Cron job registered: {schedule}")
        return True

    def unregister(self, automation_id: str) -> bool:
        """Stop and remove a scheduled cron job."""
        if self._stop_job(automation_id):
            logger.info(f"[{automation_id}] Cron job unregistered")
            return True
        return False

    def stop_all(self) -> None:
        for automation_id in list(self._jobs):
            self._stop_job(automation_id)
            logger.info(f"[{automation_id}] Cron job stopped")

    def active_jobs(self) -> list[str]:
        """IDs of automations with a live timer."""
        return sorted(self._jobs)

    async def sync(self) -> SyncResult:
        """Reconcile live timers with the catalog.

        Timers for automations that are gone (or no longer cron) are stopped.
        Every cron automation gets a timer; one whose definition is unchanged
        keeps its existing timer.
        """
        async with self._sync_lock:
            logger.info("Syncing cron jobs from catalog...")
            try:
                automations = await self.catalog.load_all()
            except Exception as e:
                logger.error(f"Failed to load automations for cron sync: {e}")
                return SyncResult()

            cron_automations = [a for a in automations if is_cron_source(a.source)]
            cron_ids = {a.id for a in cron_automations}

            removed = 0
            for automation_id in list(self._jobs):
                if automation_id not in cron_ids:
                    self.unregister(automation_id)
                    removed += 1

            registered = 0
            failed = 0
            for automation in cron_automations:
                if self._automations.get(automation.id) == automation:
                    registered += 1
                    continue
                if self.register(automation):
                    registered += 1
                else:
                    # A now-invalid schedule must not keep firing the old one
                    self.unregister(automation.id)
                    failed += 1

            logger.info(
                f"Cron sync complete: {registered} registered, {failed} failed, {removed} removed"
            )
            return SyncResult(registered=registered, failed=failed, removed=removed)
