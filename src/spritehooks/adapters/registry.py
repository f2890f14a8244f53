"""Name-keyed registry of source adapters."""

from __future__ import annotations

from collections.abc import Iterator

from spritehooks.adapters.agentmail import AgentMailAdapter
from spritehooks.adapters.base import SourceAdapter
from spritehooks.adapters.generic import GenericAdapter
from spritehooks.adapters.github import GitHubAdapter
from spritehooks.adapters.slack import SlackAdapter


class AdapterRegistry:
    def __init__(self, adapters: list[SourceAdapter] | None = None) -> None:
        self._adapters: dict[str, SourceAdapter] = {}
        for adapter in adapters or []:
            self.register(adapter)

    def register(self, adapter: SourceAdapter) -> None:
        if not adapter.name:
            raise ValueError(f"Adapter {adapter!r} has no name")
        self._adapters[adapter.name] = adapter

    def get(self, name: str) -> SourceAdapter | None:
        return self._adapters.get(name)

    def names(self) -> list[str]:
        return sorted(self._adapters)

    def __contains__(self, name: object) -> bool:
        return name in self._adapters

    def __iter__(self) -> Iterator[SourceAdapter]:
        return iter(self._adapters.values())


def default_registry() -> AdapterRegistry:
    """Registry with every built-in adapter."""
    return AdapterRegistry(
        [GitHubAdapter(), SlackAdapter(), AgentMailAdapter(), GenericAdapter()]
    )
