"""Matching, rendering and dispatch of automations."""

from spritehooks.engine.executor import SpriteExecutor, build_exec_params
from spritehooks.engine.matcher import evaluate_matches, parse_literal
from spritehooks.engine.paths import MISSING, resolve
from spritehooks.engine.template import build_context, render

__all__ = [
    "MISSING",
    "SpriteExecutor",
    "build_context",
    "build_exec_params",
    "evaluate_matches",
    "parse_literal",
    "render",
    "resolve",
]
