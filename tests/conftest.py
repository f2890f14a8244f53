"""Pytest configuration and fixtures."""

import os
import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from spritehooks.config import get_settings  # noqa: E402
from spritehooks.models import Automation  # noqa: E402


class InMemoryCatalog:
    """Dict-backed automation catalog for tests."""

    def __init__(self, automations=None):
        self.automations = {a.id: a for a in automations or []}
        self.load_calls = 0
        self.fail_load = False

    async def load_all(self):
        self.load_calls += 1
        if self.fail_load:
            raise RuntimeError("catalog unavailable")
        return list(self.automations.values())

    async def get(self, automation_id):
        return self.automations.get(automation_id)

    async def put(self, automation_id, yaml_content):
        from spritehooks.catalog import parse_automation_yaml

        self.automations[automation_id] = parse_automation_yaml(yaml_content)

    async def delete(self, automation_id):
        return self.automations.pop(automation_id, None) is not None

    async def list_ids(self):
        return sorted(self.automations)


def build_automation(automation_id="test-automation", **overrides) -> Automation:
    data = {
        "id": automation_id,
        "sprite": {"name": "dev-sprite", "path": "claude", "cmd": "-p"},
        "source": {"type": "github", "events": ["push"]},
        "run": "Handle {{payload.action}}",
    }
    data.update(overrides)
    return Automation.model_validate(data)


@pytest.fixture
def make_automation():
    """Factory for Automation models with sensible defaults."""
    return build_automation


@pytest.fixture
def memory_catalog():
    return InMemoryCatalog()


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch, tmp_path):
    """Keep tests away from real env secrets, .env files and cached settings."""
    for key in (
        "SPRITES_TOKEN",
        "SPRITES_API_BASE",
        "ADMIN_TOKEN",
        "CATALOG_BACKEND",
        "AUTOMATIONS_DIR",
        "WEBHOOK_RATE_LIMIT",
        "CF_ACCOUNT_ID",
        "CF_API_TOKEN",
        "CF_KV_NAMESPACE_ID",
        "HOST",
        "PORT",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
    for key in [k for k in os.environ if k.endswith("_WEBHOOK_SECRET")]:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
