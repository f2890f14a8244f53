"""Automation catalog stored as YAML files in a local directory."""

from __future__ import annotations

import asyncio
import logging
import re
from pathlib import Path

from spritehooks.catalog.base import parse_automation_yaml
from spritehooks.errors import AutomationValidationError, CatalogError
from spritehooks.models import Automation

logger = logging.getLogger(__name__)

_SAFE_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


class DirectoryCatalog:
    """One ``<id>.yaml`` file per automation."""

    def __init__(self, directory: Path | str):
        self.directory = Path(directory)

    @staticmethod
    def _is_storable(automation_id: str) -> bool:
        return bool(_SAFE_ID_RE.match(automation_id))

    def _path(self, automation_id: str) -> Path:
        if not self._is_storable(automation_id):
            raise CatalogError(f"Invalid automation id for file storage: {automation_id!r}")
        return self.directory / f"{automation_id}.yaml"

    def _read(self, path: Path) -> Automation:
        try:
            return parse_automation_yaml(path.read_text(encoding="utf-8"))
        except (OSError, AutomationValidationError) as e:
            raise CatalogError(f"Failed to load automation from {path.name}: {e}") from e

    def _load_all_sync(self) -> list[Automation]:
        if not self.directory.is_dir():
            return []
        return [self._read(path) for path in sorted(self.directory.glob("*.yaml"))]

    async def load_all(self) -> list[Automation]:
        return await asyncio.to_thread(self._load_all_sync)

    async def get(self, automation_id: str) -> Automation | None:
        # Ids that could never have been stored simply do not exist
        if not self._is_storable(automation_id):
            return None
        path = self._path(automation_id)
        if not path.is_file():
            return None
        return await asyncio.to_thread(self._read, path)

    async def put(self, automation_id: str, yaml_content: str) -> None:
        path = self._path(automation_id)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            await asyncio.to_thread(path.write_text, yaml_content, encoding="utf-8")
        except OSError as e:
            raise CatalogError(f"Failed to write automation {automation_id}: {e}") from e

    async def delete(self, automation_id: str) -> bool:
        if not self._is_storable(automation_id):
            return False
        path = self._path(automation_id)
        if not path.is_file():
            return False
        try:
            path.unlink()
        except OSError as e:
            raise CatalogError(f"Failed to delete automation {automation_id}: {e}") from e
        return True

    async def list_ids(self) -> list[str]:
        if not self.directory.is_dir():
            return []
        return sorted(path.stem for path in self.directory.glob("*.yaml"))
