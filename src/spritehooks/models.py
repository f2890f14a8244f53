"""Automation definitions and execution results."""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, field_validator

CRON_SOURCE_TYPE = "cron"


class SpriteConfig(BaseModel):
    """Target sprite and the executable to run on it."""

    name: str = Field(..., min_length=1, description="Sprite name (same as its ID in the Sprites API)")
    path: str = Field(..., min_length=1, description="Executable to run (e.g. 'claude')")
    cmd: str | None = Field(None, description="Command-line arguments (e.g. '-p')")
    workdir: str | None = Field(None, description="Working directory on the sprite")


class WebhookSource(BaseModel):
    """Webhook trigger: an adapter name plus the event types to react to."""

    type: str = Field(..., min_length=1, description="Adapter name (e.g. 'github')")
    events: list[str] = Field(..., min_length=1, description="Event types to trigger on")


class CronSource(BaseModel):
    """Time trigger driven by a cron expression."""

    type: Literal["cron"] = CRON_SOURCE_TYPE
    schedule: str = Field(..., min_length=1, description="Cron expression (e.g. '0 2 * * *')")


def _source_variant(value: Any) -> str:
    if isinstance(value, dict):
        source_type = value.get("type")
    else:
        source_type = getattr(value, "type", None)
    return "cron" if source_type == CRON_SOURCE_TYPE else "webhook"


AutomationSource = Annotated[
    Annotated[CronSource, Tag("cron")] | Annotated[WebhookSource, Tag("webhook")],
    Discriminator(_source_variant),
]


class Automation(BaseModel):
    """A single automation rule."""

    id: str = Field(..., min_length=1, description="Unique identifier for this automation")
    description: str | None = Field(None, description="What this automation does")
    sprite: SpriteConfig
    source: AutomationSource
    match: list[str] = Field(
        default_factory=list,
        description='Match conditions, all must pass (e.g. \'payload.action == "opened"\')',
    )
    run: str = Field(..., min_length=1, description="Prompt sent via stdin, supports {{payload.x}}")

    @field_validator("match", mode="before")
    @classmethod
    def _none_means_no_conditions(cls, value: Any) -> Any:
        return [] if value is None else value


def is_webhook_source(source: WebhookSource | CronSource) -> bool:
    return isinstance(source, WebhookSource) and source.type != CRON_SOURCE_TYPE


def is_cron_source(source: WebhookSource | CronSource) -> bool:
    return isinstance(source, CronSource)


class ExecutionResult(BaseModel):
    """Outcome of dispatching one automation to its sprite."""

    model_config = ConfigDict(frozen=True)

    automation_id: str
    success: bool
    error: str | None = None
