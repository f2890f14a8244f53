"""Sprites API executor.

Dispatches rendered prompts to sprites through the Sprites exec API. Calls
are fire-and-forget: a successful result means the API accepted the request,
not that the command finished.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any
from urllib.parse import quote

import httpx

from spritehooks.config import Settings
from spritehooks.config.settings import DEFAULT_SPRITES_API_BASE
from spritehooks.engine.template import build_context, render
from spritehooks.http import get_shared_async_client
from spritehooks.models import Automation, ExecutionResult

logger = logging.getLogger(__name__)

_PROMPT_PREVIEW_CHARS = 100


def build_exec_params(automation: Automation) -> dict[str, str]:
    """Query parameters for the exec endpoint."""
    sprite = automation.sprite
    params = {"path": sprite.path}
    if sprite.cmd:
        params["cmd"] = sprite.cmd
    if sprite.workdir:
        params["dir"] = sprite.workdir
    # The prompt is delivered on stdin via the request body
    params["stdin"] = "true"
    return params


class SpriteExecutor:
    """Turns matched automations into Sprites exec calls."""

    def __init__(
        self,
        token: str | None,
        api_base: str = DEFAULT_SPRITES_API_BASE,
        client: httpx.AsyncClient | None = None,
    ):
        self.token = token
        self.api_base = api_base.rstrip("/")
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings, client: httpx.AsyncClient | None = None):
        return cls(settings.sprites_token, settings.sprites_api_base, client=client)

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = await get_shared_async_client()
        return self._client

    def exec_url(self, sprite_name: str) -> str:
        return f"{self.api_base}/sprites/{quote(sprite_name, safe='')}/exec"

    async def execute(self, automation: Automation, payload: Any = None) -> ExecutionResult:
        """Render an automation's prompt and dispatch it to its sprite.

        Args:
            automation: The automation to execute
            payload: Webhook payload for template rendering; None for cron runs

        Returns:
            ExecutionResult indicating whether the Sprites API accepted the call
        """
        log_extra = {"automation_id": automation.id, "sprite": automation.sprite.name}

        if not self.token:
            logger.error(f"[{automation.id}] SPRITES_TOKEN not configured", extra=log_extra)
            return ExecutionResult(
                automation_id=automation.id,
                success=False,
                error="SPRITES_TOKEN not configured",
            )

        try:
            prompt = render(automation.run, build_context(automation.sprite, payload))

            workdir_info = (
                f" (in {automation.sprite.workdir})" if automation.sprite.workdir else ""
            )
            logger.info(
                f"[{automation.id}] Executing {automation.sprite.path} on sprite "
                f'"{automation.sprite.name}"{workdir_info}',
                extra=log_extra,
            )
            preview = prompt[:_PROMPT_PREVIEW_CHARS]
            ellipsis = "..." if len(prompt) > _PROMPT_PREVIEW_CHARS else ""
            logger.debug(f"[{automation.id}] Prompt: {preview}{ellipsis}", extra=log_extra)

            client = await self._get_client()
            response = await client.post(
                self.exec_url(automation.sprite.name),
                params=build_exec_params(automation),
                headers={
                    "Authorization": f"Bearer {self.token}",
                    "Content-Type": "text/plain; charset=utf-8",
                },
                content=prompt.encode("utf-8"),
            )

            if not response.is_success:
                error = f"Sprites API error: {response.status_code} - {response.text}"
                logger.error(
                    f"[{automation.id}] {error}",
                    extra={**log_extra, "status_code": response.status_code},
                )
                return ExecutionResult(automation_id=automation.id, success=False, error=error)

            logger.info(f"[{automation.id}] Successfully dispatched to sprite", extra=log_extra)
            return ExecutionResult(automation_id=automation.id, success=True)

        except Exception as e:
            message = str(e) or e.__class__.__name__
            logger.error(f"[{automation.id}] Execution failed: {message}", extra=log_extra)
            return ExecutionResult(automation_id=automation.id, success=False, error=message)

    async def execute_all(
        self, automations: Sequence[Automation], payload: Any = None
    ) -> list[ExecutionResult]:
        """Execute several automations concurrently and collect every result.

        Results come back in the same order as ``automations``; one failure
        never cancels the others.
        """
        if not automations:
            return []
        return list(
            await asyncio.gather(*(self.execute(automation, payload) for automation in automations))
        )
