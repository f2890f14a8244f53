"""Shared helpers for CLI modules."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import typer
from rich.console import Console

from spritehooks.catalog import parse_automation_yaml
from spritehooks.errors import AutomationValidationError
from spritehooks.models import Automation

console = Console()


def load_automation_file(path: Path) -> Automation:
    """Read and validate one automation YAML file, exiting on failure."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        console.print(f"[red]Cannot read {path}:[/red] {e}")
        raise typer.Exit(1)
    try:
        return parse_automation_yaml(text)
    except AutomationValidationError as e:
        console.print(f"[red]{path}:[/red] {e.message}")
        raise typer.Exit(1)


def parse_payload_option(payload: str | None) -> Any:
    """Decode a ``--payload`` value: inline JSON, or ``@file`` to read JSON from a file."""
    if payload is None:
        return None
    text = payload
    if payload.startswith("@"):
        try:
            text = Path(payload[1:]).read_text(encoding="utf-8")
        except OSError as e:
            console.print(f"[red]Cannot read payload file:[/red] {e}")
            raise typer.Exit(1)
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        console.print(f"[red]Invalid payload JSON:[/red] {e}")
        raise typer.Exit(1)
