"""Diagnostic command showing what the wrapper would export, without launching."""

import json

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from display_env_wrapper.cli.common import load_settings
from display_env_wrapper.config import APP_NAME
from display_env_wrapper.core.pipeline import prepare_environment
from display_env_wrapper.core.system_probe import SystemProbe
from display_env_wrapper.logging_setup import setup_logging
from display_env_wrapper.paths import get_log_file_path

app = typer.Typer(name=f"{APP_NAME}-probe", add_completion=False)
console = Console()


@app.command()
def probe(
    json_output: bool = typer.Option(False, "--json", help="Output raw JSON instead of formatted panel"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every detection step to stderr"),
):
    """Detect the active user, DISPLAY and XDG_RUNTIME_DIR and print them."""
    settings = load_settings()
    setup_logging(
        enabled=settings.logging.enabled,
        log_file=get_log_file_path(None, settings.logging.log_dir),
        log_level=settings.logging.level,
        max_bytes=settings.logging.max_bytes,
        console=verbose or settings.logging.console,
    )

    ctx = prepare_environment(settings, probe=SystemProbe.from_settings(settings))
    data = ctx.as_dict()

    if json_output:
        typer.echo(json.dumps(data, indent=2))
        return

    table = Table(show_header=False, box=None)
    table.add_column(style="cyan")
    table.add_column()
    for key, value in data.items():
        table.add_row(key, "[dim]unset[/dim]" if value is None else str(value))
    console.print(Panel(table, title="Session environment", border_style="cyan"))
