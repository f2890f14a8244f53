"""Config commands - view configuration."""

from __future__ import annotations

import json
import os
from pathlib import Path

import typer
from rich.panel import Panel
from rich.table import Table

from ..helpers import console

config_app = typer.Typer(help="View configuration")

_SENSITIVE = ("key", "secret", "password", "token")


def mask_settings(config_dict: dict) -> dict:
    """Replace sensitive values with ``****`` (or None when unset)."""
    masked = {}
    for key, value in config_dict.items():
        if any(s in key.lower() for s in _SENSITIVE):
            masked[key] = "****" if value else None
        else:
            masked[key] = value
    return masked


@config_app.command("show")
def config_show(
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Show current configuration with secrets masked."""
    from spritehooks.config import get_config

    try:
        config_dict = get_config().model_dump()
    except Exception as e:
        console.print(f"[red]Error loading config:[/red] {e}")
        raise typer.Exit(1)

    masked = mask_settings(config_dict)

    if json_output:
        print(json.dumps(masked, indent=2, default=str))
        return

    console.print(Panel("[bold]spritehooks Configuration[/bold]", border_style="blue"))

    table = Table(show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    for key, value in sorted(masked.items()):
        display_value = str(value) if value is not None else "[dim]not set[/dim]"
        if display_value == "****":
            display_value = "[green]****[/green]"
        table.add_row(key, display_value)

    console.print(table)

    env_secrets = sorted(k for k in os.environ if k.endswith("_WEBHOOK_SECRET"))
    if env_secrets:
        console.print(f"\nWebhook secrets from environment: {', '.join(env_secrets)}")


@config_app.command("path")
def config_path() -> None:
    """Show configuration file paths."""
    from spritehooks.config.settings import _find_yaml_config

    console.print("[bold]Configuration Sources[/bold]\n")

    yaml_path = _find_yaml_config()
    if yaml_path:
        console.print(f"[green]✓[/green] spritehooks.yaml: {yaml_path.absolute()}")
    else:
        console.print("[yellow]○[/yellow] spritehooks.yaml: not found")

    env_path = Path(".env")
    if env_path.exists():
        console.print(f"[green]✓[/green] .env: {env_path.absolute()}")
    else:
        console.print("[yellow]○[/yellow] .env: not found")
