"""Tests for the cron scheduler."""

import sys
from unittest.mock import AsyncMock, MagicMock

import pytest
from apscheduler.schedulers.asyncio import AsyncIOScheduler

sys.path.insert(0, "src")

from spritehooks.models import ExecutionResult
from spritehooks.scheduler import CronScheduler, parse_schedule, validate_schedule
from spritehooks.scheduler.cron_scheduler import _crontab_day_of_week


def cron_automation(make_automation, automation_id="nightly", schedule="0 2 * * *", **kw):
    return make_automation(
        automation_id, source={"type": "cron", "schedule": schedule}, run="Nightly run", **kw
    )


class TestParseSchedule:
    """Tests for schedule parsing."""

    def test_five_fields(self):
        trigger = parse_schedule("*/15 9-17 * * 1-5")
        fields = {f.name: str(f) for f in trigger.fields}
        assert fields["second"] == "0"
        assert fields["minute"] == "*/15"
        assert fields["hour"] == "9-17"
        # Monday-Friday in crontab numbering is 0-4 in APScheduler
        assert fields["day_of_week"] == "0,1,2,3,4"

    def test_six_fields_take_seconds(self):
        trigger = parse_schedule("30 0 2 * * *")
        fields = {f.name: str(f) for f in trigger.fields}
        assert fields["second"] == "30"
        assert fields["hour"] == "2"

    @pytest.mark.parametrize("schedule", ["", "* * *", "1 2 3 4 5 6 7", "61 * * * *", "* * * * 9"])
    def test_invalid(self, schedule):
        with pytest.raises(ValueError):
            parse_schedule(schedule)
        assert validate_schedule(schedule) is False

    def test_validate_schedule(self):
        assert validate_schedule("0 2 * * *") is True


class TestCrontabDayOfWeek:
    """Tests for crontab weekday translation."""

    @pytest.mark.parametrize(
        "field,expected",
        [
            ("*", "*"),
            ("0", "6"),
            ("7", "6"),
            ("1", "0"),
            ("1-5", "0,1,2,3,4"),
            ("0,6", "6,5"),
            ("mon-fri", "mon-fri"),
            ("*/2", "1,3,5,6"),
        ],
    )
    def test_translation(self, field, expected):
        assert _crontab_day_of_week(field) == expected

    def test_out_of_range(self):
        with pytest.raises(ValueError):
            _crontab_day_of_week("8")

    def test_reversed_range(self):
        with pytest.raises(ValueError):
            _crontab_day_of_week("5-1")


class TestCronScheduler:
    """Tests for CronScheduler."""

    @pytest.fixture
    def executor(self):
        executor = MagicMock()
        executor.execute = AsyncMock(
            return_value=ExecutionResult(automation_id="nightly", success=True)
        )
        return executor

    @pytest.fixture
    def cron(self, memory_catalog, executor):
        # Never started: jobs stay pending, no event loop needed
        return CronScheduler(memory_catalog, executor, scheduler=AsyncIOScheduler())

    def test_register(self, cron, make_automation):
        assert cron.register(cron_automation(make_automation))
        assert cron.active_jobs() == ["nightly"]
        jobs = cron.scheduler.get_jobs()
        assert len(jobs) == 1
        assert jobs[0].id == "cron_nightly"

    def test_register_ignores_webhook_automations(self, cron, make_automation):
        assert cron.register(make_automation()) is False
        assert cron.active_jobs() == []

    def test_register_invalid_schedule(self, cron, make_automation):
        assert cron.register(cron_automation(make_automation, schedule="bad")) is False
        assert cron.active_jobs() == []

    def test_reregister_replaces_job(self, cron, make_automation):
        cron.register(cron_automation(make_automation, schedule="0 2 * * *"))
        cron.register(cron_automation(make_automation, schedule="0 3 * * *"))

        jobs = cron.scheduler.get_jobs()
        assert len(jobs) == 1
        fields = {f.name: str(f) for f in jobs[0].trigger.fields}
        assert fields["hour"] == "3"

    def test_unregister(self, cron, make_automation):
        cron.register(cron_automation(make_automation))
        assert cron.unregister("nightly") is True
        assert cron.unregister("nightly") is False
        assert cron.active_jobs() == []
        assert cron.scheduler.get_jobs() == []

    def test_stop_all(self, cron, make_automation):
        cron.register(cron_automation(make_automation, "a"))
        cron.register(cron_automation(make_automation, "b"))
        cron.stop_all()
        assert cron.active_jobs() == []
        assert cron.scheduler.get_jobs() == []

    @pytest.mark.asyncio
    async def test_sync_registers_cron_automations(self, cron, memory_catalog, make_automation):
        memory_catalog.automations = {
            "nightly": cron_automation(make_automation),
            "hook": make_automation("hook"),
        }
        result = await cron.sync()
        assert result.registered == 1
        assert result.failed == 0
        assert result.removed == 0
        assert cron.active_jobs() == ["nightly"]

    @pytest.mark.asyncio
    async def test_sync_removes_deleted(self, cron, memory_catalog, make_automation):
        memory_catalog.automations = {
            "a": cron_automation(make_automation, "a"),
            "b": cron_automation(make_automation, "b"),
        }
        await cron.sync()

        del memory_catalog.automations["a"]
        result = await cron.sync()

        assert result.removed == 1
        assert cron.active_jobs() == ["b"]
        assert [job.id for job in cron.scheduler.get_jobs()] == ["cron_b"]

    @pytest.mark.asyncio
    async def test_sync_keeps_unchanged_job(self, cron, memory_catalog, make_automation):
        memory_catalog.automations = {"nightly": cron_automation(make_automation)}
        await cron.sync()
        job = cron.scheduler.get_jobs()[0]

        await cron.sync()

        assert cron.scheduler.get_jobs()[0] is job

    @pytest.mark.asyncio
    async def test_sync_replaces_changed_job(self, cron, memory_catalog, make_automation):
        memory_catalog.automations = {"nightly": cron_automation(make_automation)}
        await cron.sync()

        memory_catalog.automations["nightly"] = cron_automation(
            make_automation, schedule="0 5 * * *"
        )
        await cron.sync()

        jobs = cron.scheduler.get_jobs()
        assert len(jobs) == 1
        assert {f.name: str(f) for f in jobs[0].trigger.fields}["hour"] == "5"

    @pytest.mark.asyncio
    async def test_sync_stops_job_whose_schedule_became_invalid(
        self, cron, memory_catalog, make_automation
    ):
        memory_catalog.automations = {"nightly": cron_automation(make_automation)}
        await cron.sync()

        memory_catalog.automations["nightly"] = cron_automation(make_automation, schedule="nope")
        result = await cron.sync()

        assert result.failed == 1
        assert cron.active_jobs() == []

    @pytest.mark.asyncio
    async def test_sync_removes_automation_switched_to_webhook(
        self, cron, memory_catalog, make_automation
    ):
        memory_catalog.automations = {"nightly": cron_automation(make_automation)}
        await cron.sync()

        memory_catalog.automations["nightly"] = make_automation("nightly")
        result = await cron.sync()

        assert result.removed == 1
        assert cron.active_jobs() == []

    @pytest.mark.asyncio
    async def test_sync_catalog_failure_keeps_jobs(self, cron, memory_catalog, make_automation):
        memory_catalog.automations = {"nightly": cron_automation(make_automation)}
        await cron.sync()

        memory_catalog.fail_load = True
        result = await cron.sync()

        assert result.registered == 0
        assert cron.active_jobs() == ["nightly"]

    @pytest.mark.asyncio
    async def test_fire_executes_without_payload(self, cron, executor, make_automation):
        automation = cron_automation(make_automation)
        await cron._fire(automation)
        executor.execute.assert_awaited_once_with(automation)

    @pytest.mark.asyncio
    async def test_fire_swallows_failures(self, cron, executor, make_automation):
        executor.execute.side_effect = RuntimeError("network down")
        await cron._fire(cron_automation(make_automation))

        executor.execute.side_effect = None
        executor.execute.return_value = ExecutionResult(
            automation_id="nightly", success=False, error="Sprites API error: 500 - boom"
        )
        await cron._fire(cron_automation(make_automation))
        assert executor.execute.await_count == 2
