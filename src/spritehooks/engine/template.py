"""Template rendering for automation prompts.

``{{path.to.value}}`` tokens are replaced by the value found at that path in
the template context. Output is fed to a shell or a model prompt, so values
are substituted raw with no escaping.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any

from spritehooks.engine.paths import MISSING, resolve
from spritehooks.models import SpriteConfig

TemplateContext = Mapping[str, Any]

_TOKEN_RE = re.compile(r"\{\{\s*([^{}\s][^{}]*?)\s*\}\}")


def build_context(sprite: SpriteConfig, payload: Any = None) -> dict[str, Any]:
    """Context available to templates: the event payload and sprite fields."""
    return {"payload": payload, "sprite": sprite.model_dump()}


def _stringify(value: Any) -> str:
    if value is MISSING or value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (Mapping, list, tuple)):
        try:
            return json.dumps(value, separators=(",", ":"), default=str)
        except (TypeError, ValueError):
            return str(value)
    return str(value)


def render(template: str, context: TemplateContext) -> str:
    """Substitute every ``{{dotted.path}}`` in ``template`` from ``context``.

    Unresolved paths render as empty strings. Text that is not a well-formed
    token is left alone.
    """
    if not isinstance(template, str):
        return ""
    return _TOKEN_RE.sub(lambda m: _stringify(resolve(context, m.group(1))), template)
