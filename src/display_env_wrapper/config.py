"""Configuration management for display-env-wrapper using pydantic-settings.

Supports hierarchical configuration from:
1. Environment variables (highest priority)
2. JSON config file
3. Default values (lowest priority)

Environment variables use the format: DISPLAY_ENV_WRAPPER_<SECTION>__<FIELD>
Example: DISPLAY_ENV_WRAPPER_LOGGING__ENABLED=true
"""

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict


APP_NAME = "display-env-wrapper"

# Ordered by lookup priority
DEFAULT_DESKTOP_PROCESSES = [
    "gnome-session",
    "plasmashell",
    "xfce4-session",
    "lxqt-session",
    "cinnamon-session",
    "mate-session",
    "unity-panel-service",
]

DEFAULT_INSTALLER_MARKERS = ["-installer", ".deb", ".rpm"]


class JsonConfigSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source for loading from JSON file."""

    def __init__(self, settings_cls: type[BaseSettings], json_file: Path):
        super().__init__(settings_cls)
        self.json_file = json_file

    def get_field_value(
        self, field: Any, field_name: str
    ) -> tuple[Any, str, bool]:
        """Get field value - required by base class but not used in v2."""
        return None, "", False

    def __call__(self) -> dict[str, Any]:
        """Load configuration from JSON file."""
        if self.json_file.exists():
            with open(self.json_file, encoding="utf-8") as f:
                return _strip_comment_fields(json.load(f))
        return {}


class LoggingConfig(BaseModel):
    """Log sink configuration section."""

    enabled: bool = False
    console: bool = False
    level: str = "DEBUG"
    log_dir: str | None = None  # None = system temp dir
    max_bytes: int = Field(default=1_048_576, ge=1)  # 1 MiB


class DetectionConfig(BaseModel):
    """Session detection configuration section."""

    privileged_user: str = "root"
    home_root: str = "/home"
    x11_socket_dir: str = "/tmp/.X11-unix"
    proc_root: str = "/proc"
    runtime_root: str = "/run/user"
    default_display: str = ":0"
    installer_markers: list[str] = Field(default_factory=lambda: list(DEFAULT_INSTALLER_MARKERS))
    desktop_processes: list[str] = Field(default_factory=lambda: list(DEFAULT_DESKTOP_PROCESSES))
    command_timeout: float | None = Field(default=None, gt=0)  # None = block until done

    @field_validator('privileged_user')
    @classmethod
    def privileged_user_must_not_be_empty(cls, v: str) -> str:
        """Validate that privileged_user is not empty or whitespace-only."""
        if not v or not v.strip():
            raise ValueError('privileged_user must be a non-empty string')
        return v

    @field_validator('default_display')
    @classmethod
    def default_display_must_be_x11(cls, v: str) -> str:
        """Validate that default_display looks like ':N'."""
        if not v.startswith(':') or not v[1:].split('.')[0].isdigit():
            raise ValueError("default_display must have the form ':N'")
        return v


# Module-level variables
_json_config_file: Path | None = None  # For settings_customise_sources
_settings_cache: "Settings | None" = None  # For singleton pattern


def _strip_comment_fields(data: Any) -> Any:
    """Recursively strip keys starting with _ or $ from dict.

    Args:
        data: Dictionary to clean (or any other type, which is returned as-is)

    Returns:
        Dictionary with comment fields removed, or original value if not a dict
    """
    if not isinstance(data, dict):
        return data
    return {
        k: _strip_comment_fields(v) if isinstance(v, dict) else v
        for k, v in data.items()
        if not k.startswith('_') and not k.startswith('$')
    }


class Settings(BaseSettings):
    """Root configuration model with nested sections.

    Loads configuration from (in priority order):
    1. Environment variables with DISPLAY_ENV_WRAPPER_ prefix
    2. JSON config file (if provided)
    3. Default values
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    detection: DetectionConfig = Field(default_factory=DetectionConfig)

    model_config = SettingsConfigDict(
        env_prefix="DISPLAY_ENV_WRAPPER_",
        env_nested_delimiter="__",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to add JSON config file support.

        Priority order (highest to lowest):
        1. Environment variables
        2. JSON config file (if _json_config_file module variable is set)
        3. Default values
        """
        global _json_config_file
        if _json_config_file is not None:
            json_source = JsonConfigSettingsSource(settings_cls, json_file=_json_config_file)
            return (env_settings, json_source, init_settings)
        return (env_settings, init_settings)


def get_settings(config_path: Path | str | None = None, *, _force_reload: bool = False) -> Settings:
    """Load settings from optional JSON config file and environment variables.

    Implements singleton pattern - returns cached settings unless _force_reload=True
    or config_path is provided.

    Args:
        config_path: Optional path to JSON config file. If provided, bypasses cache.
        _force_reload: If True, bypasses cache and creates fresh Settings instance

    Returns:
        Settings instance with merged configuration
    """
    global _json_config_file, _settings_cache

    if _settings_cache is not None and not _force_reload and config_path is None:
        return _settings_cache

    if config_path:
        _json_config_file = Path(config_path)
        try:
            settings = Settings()
        finally:
            _json_config_file = None  # Reset after use
    else:
        settings = Settings()

    if config_path is None:
        _settings_cache = settings

    return settings
