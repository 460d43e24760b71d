"""Helpers shared by the CLI entry points."""

from pydantic import ValidationError
from rich.console import Console

from display_env_wrapper.config import Settings, get_settings
from display_env_wrapper.paths import get_config_file_path

err_console = Console(stderr=True)


def load_settings() -> Settings:
    """Load settings from the environment and the system config file.

    An invalid or unreadable configuration must never block the launch: the
    errors are reported on stderr and the defaults are used instead.
    """
    config_path = get_config_file_path()
    try:
        if config_path.exists():
            return get_settings(config_path)
        return get_settings()
    except (ValidationError, ValueError, OSError) as e:
        err_console.print(f"[yellow]Cannot load configuration, using defaults:[/yellow] {e}")
        return Settings.model_construct()
