"""Tests for the Sprites API executor."""

import asyncio
import sys

import httpx
import pytest

sys.path.insert(0, "src")

from spritehooks.config import Settings
from spritehooks.engine.executor import SpriteExecutor, build_exec_params

API_BASE = "https://sprites.test/v1"


def make_executor(handler, token="sprite-token"):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SpriteExecutor(token, API_BASE, client=client)


class TestBuildExecParams:
    """Tests for build_exec_params()."""

    def test_all_fields(self, make_automation):
        automation = make_automation(
            sprite={"name": "dev", "path": "claude", "cmd": "-p", "workdir": "/repo"}
        )
        assert build_exec_params(automation) == {
            "path": "claude",
            "cmd": "-p",
            "dir": "/repo",
            "stdin": "true",
        }

    def test_optional_fields_omitted(self, make_automation):
        automation = make_automation(sprite={"name": "dev", "path": "claude"})
        assert build_exec_params(automation) == {"path": "claude", "stdin": "true"}


class TestSpriteExecutor:
    """Tests for SpriteExecutor."""

    @pytest.mark.asyncio
    async def test_successful_dispatch(self, make_automation):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["request"] = request
            return httpx.Response(200, json={"ok": True})

        executor = make_executor(handler)
        automation = make_automation(
            sprite={"name": "dev sprite", "path": "claude", "cmd": "-p", "workdir": "/repo"}
        )
        result = await executor.execute(automation, {"action": "opened"})

        assert result.success is True
        assert result.error is None
        assert result.automation_id == automation.id

        request = captured["request"]
        assert request.method == "POST"
        assert str(request.url).startswith("https://sprites.test/v1/sprites/dev%20sprite/exec?")
        assert dict(request.url.params) == {
            "path": "claude",
            "cmd": "-p",
            "dir": "/repo",
            "stdin": "true",
        }
        assert request.headers["Authorization"] == "Bearer sprite-token"
        assert request.headers["Content-Type"] == "text/plain; charset=utf-8"
        assert request.content == b"Handle opened"

    @pytest.mark.asyncio
    async def test_missing_token_makes_no_call(self, make_automation):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200)

        executor = make_executor(handler, token=None)
        result = await executor.execute(make_automation())

        assert result.success is False
        assert result.error == "SPRITES_TOKEN not configured"
        assert calls == []

    @pytest.mark.asyncio
    async def test_api_error(self, make_automation):
        executor = make_executor(lambda request: httpx.Response(503, text="sprite asleep"))
        result = await executor.execute(make_automation())

        assert result.success is False
        assert result.error == "Sprites API error: 503 - sprite asleep"

    @pytest.mark.asyncio
    async def test_transport_error(self, make_automation):
        def handler(request):
            raise httpx.ConnectError("connection refused")

        executor = make_executor(handler)
        result = await executor.execute(make_automation())

        assert result.success is False
        assert "connection refused" in result.error

    @pytest.mark.asyncio
    async def test_cron_run_renders_without_payload(self, make_automation):
        bodies = []

        def handler(request):
            bodies.append(request.content)
            return httpx.Response(200)

        executor = make_executor(handler)
        automation = make_automation(
            source={"type": "cron", "schedule": "0 2 * * *"}, run="Nightly {{payload.x}}report"
        )
        result = await executor.execute(automation)

        assert result.success
        assert bodies == [b"Nightly report"]

    @pytest.mark.asyncio
    async def test_execute_all_preserves_order_and_isolates_failures(self, make_automation):
        async def handler(request: httpx.Request) -> httpx.Response:
            if "slow" in request.url.path:
                await asyncio.sleep(0.05)
            if "broken" in request.url.path:
                return httpx.Response(500, text="boom")
            return httpx.Response(200)

        executor = make_executor(handler)
        automations = [
            make_automation("first", sprite={"name": "slow", "path": "claude"}),
            make_automation("second", sprite={"name": "broken", "path": "claude"}),
            make_automation("third", sprite={"name": "fast", "path": "claude"}),
        ]
        results = await executor.execute_all(automations, {"action": "opened"})

        assert [r.automation_id for r in results] == ["first", "second", "third"]
        assert [r.success for r in results] == [True, False, True]
        assert results[1].error == "Sprites API error: 500 - boom"

    @pytest.mark.asyncio
    async def test_execute_all_runs_concurrently(self, make_automation):
        in_flight = 0
        peak = 0

        async def handler(request: httpx.Request) -> httpx.Response:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.05)
            in_flight -= 1
            return httpx.Response(200)

        executor = make_executor(handler)
        automations = [
            make_automation(f"auto-{i}", sprite={"name": f"sprite-{i}", "path": "claude"})
            for i in range(3)
        ]
        results = await executor.execute_all(automations, {"action": "opened"})

        assert all(r.success for r in results)
        assert peak == len(automations)

    @pytest.mark.asyncio
    async def test_execute_all_empty(self):
        executor = make_executor(lambda request: httpx.Response(200))
        assert await executor.execute_all([]) == []

    def test_from_settings(self):
        settings = Settings(sprites_token="tok", sprites_api_base="https://example.test/api/")
        executor = SpriteExecutor.from_settings(settings)
        assert executor.token == "tok"
        assert executor.exec_url("a/b") == "https://example.test/api/sprites/a%2Fb/exec"
