"""The wrapper command: ``display-env-wrapper [program [args...]]``."""

import typer

from display_env_wrapper.cli.common import err_console, load_settings
from display_env_wrapper.config import APP_NAME
from display_env_wrapper.core.launcher import EXIT_CANNOT_EXECUTE, EXIT_PROGRAM_NOT_FOUND, launch
from display_env_wrapper.core.pipeline import prepare_environment
from display_env_wrapper.core.system_probe import SystemProbe
from display_env_wrapper.logging_setup import get_logger, setup_logging
from display_env_wrapper.paths import get_log_file_path

app = typer.Typer(name=APP_NAME, add_completion=False)
logger = get_logger(__name__)

# Everything after the program name belongs to the program, options included.
PASSTHROUGH_CONTEXT = {
    "ignore_unknown_options": True,
    "allow_interspersed_args": False,
    "help_option_names": [],
}


@app.command(context_settings=PASSTHROUGH_CONTEXT)
def run(
    command: list[str] | None = typer.Argument(None, help="Program to launch, followed by its arguments"),
):
    """Set DISPLAY and XDG_RUNTIME_DIR for the active user, then exec a program.

    Without a program, print the detected user as ACTUAL_DISPLAY_USER=<name>.
    """
    program = command[0] if command else None
    settings = load_settings()

    log_file = get_log_file_path(program, settings.logging.log_dir)
    setup_logging(
        enabled=settings.logging.enabled,
        log_file=log_file,
        log_level=settings.logging.level,
        max_bytes=settings.logging.max_bytes,
        console=settings.logging.console,
    )
    logger.info("=================== wrapper started ===================")
    logger.info("Log file: {path}", path=log_file)

    ctx = prepare_environment(settings, probe=SystemProbe.from_settings(settings))

    if program is None:
        logger.info("No program given, reporting active user {user}", user=ctx.active_user)
        typer.echo(f"ACTUAL_DISPLAY_USER={ctx.active_user}")
        return

    code = launch(program, command[1:], ctx.exported_environ())
    if code == EXIT_PROGRAM_NOT_FOUND:
        err_console.print(f"[red]Program not found:[/red] {program}")
    elif code == EXIT_CANNOT_EXECUTE:
        err_console.print(f"[red]Cannot execute:[/red] {program}")
    raise typer.Exit(code=code)
