"""Automation storage backends."""

from __future__ import annotations

from spritehooks.catalog.base import AutomationCatalog, parse_automation_yaml
from spritehooks.catalog.directory import DirectoryCatalog
from spritehooks.catalog.kv import KVCatalog, KVConfig
from spritehooks.config import Settings


def create_catalog(settings: Settings) -> AutomationCatalog:
    """Build the catalog selected by ``settings.catalog_backend``."""
    if settings.catalog_backend == "directory":
        return DirectoryCatalog(settings.automations_dir)
    return KVCatalog(KVConfig.from_settings(settings))


__all__ = [
    "AutomationCatalog",
    "DirectoryCatalog",
    "KVCatalog",
    "KVConfig",
    "create_catalog",
    "parse_automation_yaml",
]
