"""Automation catalog interface and YAML parsing."""

from __future__ import annotations

from typing import Any, Protocol

import yaml
from pydantic import ValidationError

from spritehooks.errors import AutomationValidationError
from spritehooks.models import CRON_SOURCE_TYPE, Automation


class AutomationCatalog(Protocol):
    """Read/write access to stored automation definitions.

    Values are stored as the YAML text the operator uploaded.
    """

    async def load_all(self) -> list[Automation]: ...

    async def get(self, automation_id: str) -> Automation | None: ...

    async def put(self, automation_id: str, yaml_content: str) -> None: ...

    async def delete(self, automation_id: str) -> bool: ...

    async def list_ids(self) -> list[str]: ...


def _require_fields(data: dict[str, Any]) -> None:
    """Readable errors for the mistakes people actually make in YAML."""
    if not isinstance(data.get("id"), str) or not data["id"]:
        raise AutomationValidationError('Automation must have a valid "id" field')

    sprite = data.get("sprite")
    if not isinstance(sprite, dict) or not sprite.get("name"):
        raise AutomationValidationError('Automation must have a "sprite.name" field')

    source = data.get("source")
    if not isinstance(source, dict) or not source.get("type"):
        raise AutomationValidationError('Automation must have a "source.type" field')

    if source["type"] == CRON_SOURCE_TYPE:
        if not source.get("schedule"):
            raise AutomationValidationError('Cron automation must have a "source.schedule" field')
    elif not isinstance(source.get("events"), list):
        raise AutomationValidationError('Webhook automation must have a "source.events" array')

    if not isinstance(data.get("run"), str) or not data["run"]:
        raise AutomationValidationError('Automation must have a "run" command')


def parse_automation_yaml(yaml_content: str) -> Automation:
    """Parse and validate one automation definition."""
    try:
        data = yaml.safe_load(yaml_content)
    except yaml.YAMLError as e:
        raise AutomationValidationError(f"Invalid YAML: {e}") from e

    if not isinstance(data, dict):
        raise AutomationValidationError("Automation YAML must be a mapping")

    _require_fields(data)

    try:
        return Automation.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise AutomationValidationError(
            f"Invalid automation {data['id']!r}: {problems}", {"id": data["id"]}
        ) from e
