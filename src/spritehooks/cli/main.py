"""spritehooks CLI - Main entry point."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Annotated

import typer
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from spritehooks import __version__
from spritehooks.engine.executor import build_exec_params
from spritehooks.engine.matcher import evaluate_expression
from spritehooks.engine.template import build_context, render
from spritehooks.models import is_cron_source
from spritehooks.scheduler import parse_schedule

from .helpers import console, load_automation_file, parse_payload_option

app = typer.Typer(
    name="spritehooks",
    help="Route webhooks and cron schedules to sprites.",
    add_completion=True,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"[bold cyan]spritehooks[/bold cyan] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
):
    """spritehooks - webhook and cron automations for sprites.

    [bold]Quick Start:[/bold]

        spritehooks serve              Run the HTTP server
        spritehooks validate FILE...   Check automation definitions
        spritehooks preview FILE       Dry-run matching and rendering
    """


@app.command()
def serve(
    host: Annotated[str | None, typer.Option(help="Bind address (default from settings)")] = None,
    port: Annotated[int | None, typer.Option(help="Port (default from settings)")] = None,
    reload: Annotated[bool, typer.Option(help="Reload on code changes")] = False,
):
    """Run the webhook server."""
    import uvicorn

    from spritehooks.config import get_settings

    settings = get_settings()
    uvicorn.run(
        "spritehooks.api:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        log_config=None,
    )


@app.command()
def validate(
    files: Annotated[list[Path], typer.Argument(help="Automation YAML files")],
):
    """Validate automation definitions."""
    from spritehooks.catalog import parse_automation_yaml
    from spritehooks.errors import AutomationValidationError

    failed = 0
    for path in files:
        try:
            automation = parse_automation_yaml(path.read_text(encoding="utf-8"))
        except OSError as e:
            console.print(f"[red]✗[/red] {path}: {e}")
            failed += 1
            continue
        except AutomationValidationError as e:
            console.print(f"[red]✗[/red] {path}: {e.message}")
            failed += 1
            continue

        if is_cron_source(automation.source):
            try:
                parse_schedule(automation.source.schedule)
            except ValueError as e:
                console.print(f"[red]✗[/red] {path}: invalid schedule ({e})")
                failed += 1
                continue

        console.print(f"[green]✓[/green] {path}: {automation.id}")

    if failed:
        console.print(f"\n[red]{failed} of {len(files)} file(s) invalid[/red]")
        raise typer.Exit(1)


@app.command()
def preview(
    file: Annotated[Path, typer.Argument(help="Automation YAML file")],
    payload: Annotated[
        str | None,
        typer.Option("--payload", "-p", help="Sample payload as JSON, or @file.json"),
    ] = None,
):
    """Show how an automation would match and render, without dispatching."""
    automation = load_automation_file(file)
    sample = parse_payload_option(payload)

    console.print(Panel(f"[bold]{automation.id}[/bold]", border_style="blue"))
    if automation.description:
        console.print(automation.description)

    if is_cron_source(automation.source):
        try:
            trigger = parse_schedule(automation.source.schedule)
        except ValueError as e:
            console.print(f"[red]Invalid schedule:[/red] {e}")
            raise typer.Exit(1)
        next_fire = trigger.get_next_fire_time(None, datetime.now(trigger.timezone))
        console.print(f"Schedule: {automation.source.schedule} (next: {next_fire})")
    else:
        console.print(
            f"Source: {automation.source.type} events={', '.join(automation.source.events)}"
        )
        if automation.match:
            context = {"payload": sample if sample is not None else {}}
            table = Table(show_header=True)
            table.add_column("Condition", style="cyan")
            table.add_column("Result")
            for expression in automation.match:
                passed = evaluate_expression(expression, context)
                table.add_row(expression, "[green]pass[/green]" if passed else "[red]fail[/red]")
            console.print(table)

    params = build_exec_params(automation)
    console.print(f"\nSprite: {automation.sprite.name}")
    console.print("Exec params: " + " ".join(f"{k}={v}" for k, v in params.items()))

    prompt = render(automation.run, build_context(automation.sprite, sample))
    console.print(Panel(Text(prompt), title="Rendered prompt", border_style="green"))


# =============================================================================
# Register sub-app commands
# =============================================================================

from .commands.config import config_app  # noqa: E402

app.add_typer(config_app, name="config")


if __name__ == "__main__":
    app()
