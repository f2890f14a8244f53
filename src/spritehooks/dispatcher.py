"""Webhook dispatch: validate, classify, select automations and execute them."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from spritehooks.adapters import AdapterRegistry, InboundRequest
from spritehooks.catalog import AutomationCatalog
from spritehooks.config import webhook_secret_env_key
from spritehooks.engine.executor import SpriteExecutor
from spritehooks.engine.matcher import evaluate_matches
from spritehooks.errors import (
    CatalogError,
    ConfigurationError,
    InvalidSignatureError,
    UnknownSourceError,
)
from spritehooks.models import Automation, is_webhook_source

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchOutcome:
    """HTTP-ready result of one webhook dispatch."""

    status_code: int
    body: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status_code < 400


def select_automations(
    automations: Iterable[Automation], source_name: str, event_type: str, payload: Any
) -> list[Automation]:
    """Automations triggered by ``event_type`` from ``source_name`` whose match rules pass."""
    selected = []
    for automation in automations:
        if not is_webhook_source(automation.source):
            continue
        if automation.source.type != source_name:
            continue
        if event_type not in automation.source.events:
            continue
        if not evaluate_matches(automation.match, payload):
            continue
        selected.append(automation)
    return selected


class WebhookDispatcher:
    """Runs one inbound webhook through validation, matching and execution."""

    def __init__(
        self,
        adapters: AdapterRegistry,
        catalog: AutomationCatalog,
        executor: SpriteExecutor,
        secret_lookup: Callable[[str], str | None],
    ):
        self.adapters = adapters
        self.catalog = catalog
        self.executor = executor
        self.secret_lookup = secret_lookup

    async def dispatch(self, source_name: str, request: InboundRequest) -> DispatchOutcome:
        """Handle a webhook from ``source_name``.

        Raises:
            UnknownSourceError: no adapter for the source
            ConfigurationError: the source has no secret configured
            InvalidSignatureError: the request failed validation
            PayloadDecodeError: the body is not valid JSON
            CatalogError: automations could not be loaded
        """
        adapter = self.adapters.get(source_name)
        if adapter is None:
            logger.warning(f"Unknown webhook source: {source_name}")
            raise UnknownSourceError(source_name)

        secret = self.secret_lookup(source_name)
        if not secret:
            env_key = webhook_secret_env_key(source_name)
            logger.error(f"Webhook secret not configured: {env_key}")
            raise ConfigurationError("Webhook secret not configured", {"setting": env_key})

        if not adapter.validate(request, secret):
            logger.warning(f"Invalid webhook signature for source: {source_name}")
            raise InvalidSignatureError(source_name)

        payload = adapter.parse_payload(request)

        handshake = adapter.handshake(payload)
        if handshake is not None:
            logger.info(f"Responding to {source_name} handshake")
            return DispatchOutcome(200, handshake)

        event_type = adapter.get_event_type(request, payload)
        log_extra = {"source": source_name, "event_type": event_type}
        logger.info(f"Received {source_name}/{event_type} webhook", extra=log_extra)

        try:
            automations = await self.catalog.load_all()
        except Exception as e:
            logger.error(f"Failed to load automations: {e}", extra=log_extra)
            raise CatalogError("Failed to load automations") from e

        matching = select_automations(automations, source_name, event_type, payload)
        logger.info(
            f"Found {len(matching)} matching automation(s) for {source_name}/{event_type}",
            extra={**log_extra, "matched": len(matching)},
        )

        if not matching:
            return DispatchOutcome(200, {"message": "No matching automations", "matched": 0})

        results = await self.executor.execute_all(matching, payload)
        serialized = [r.model_dump() for r in results]

        failures = [r for r in results if not r.success]
        if failures:
            logger.error(
                f"{len(failures)} automation(s) failed: "
                + ", ".join(f"{r.automation_id} ({r.error})" for r in failures),
                extra=log_extra,
            )
            return DispatchOutcome(
                500,
                {
                    "error": "One or more automations failed",
                    "matched": len(matching),
                    "results": serialized,
                },
            )

        return DispatchOutcome(
            200,
            {
                "message": "All automations executed successfully",
                "matched": len(matching),
                "results": serialized,
            },
        )
