"""Webhook source adapters."""

from spritehooks.adapters.agentmail import AgentMailAdapter
from spritehooks.adapters.base import InboundRequest, SourceAdapter
from spritehooks.adapters.generic import GenericAdapter
from spritehooks.adapters.github import GitHubAdapter
from spritehooks.adapters.registry import AdapterRegistry, default_registry
from spritehooks.adapters.slack import SlackAdapter

__all__ = [
    "AdapterRegistry",
    "AgentMailAdapter",
    "GenericAdapter",
    "GitHubAdapter",
    "InboundRequest",
    "SlackAdapter",
    "SourceAdapter",
    "default_registry",
]
