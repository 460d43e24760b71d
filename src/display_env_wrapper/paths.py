"""Path helpers for display-env-wrapper.

This module provides functions for locating the log file, its rotation
sibling, the system-wide configuration file and per-user runtime directories.

All functions return Path objects. Nothing is created automatically; the
runtime directory in particular is only ever exported, never made.
"""

import os
import re
import tempfile
from pathlib import Path

# Local APP_NAME constant as fallback
_APP_NAME_DEFAULT = 'display-env-wrapper'

try:
    from .config import APP_NAME
except ImportError:
    APP_NAME = _APP_NAME_DEFAULT

ROTATED_SUFFIX = '.old'

__all__ = [
    'APP_NAME',
    'ROTATED_SUFFIX',
    'get_config_dir',
    'get_config_file_path',
    'get_log_dir',
    'get_log_file_path',
    'get_rotated_log_path',
    'get_runtime_dir',
    'program_log_name',
]


def get_config_dir() -> Path:
    """Get the system-wide configuration directory.

    The wrapper usually runs as root from an installer, so the per-user XDG
    config location of the invoker is meaningless here.

    Returns:
        /etc/display-env-wrapper
    """
    return Path('/etc') / APP_NAME


def get_config_file_path() -> Path:
    """Get the configuration file path.

    Returns:
        Path to config.json file (not created automatically).
    """
    return get_config_dir() / 'config.json'


def get_log_dir(log_dir: str | os.PathLike | None = None) -> Path:
    """Get the directory log files are written to.

    Args:
        log_dir: Explicit directory; None means the system temp dir.
    """
    if log_dir:
        return Path(log_dir)
    return Path(tempfile.gettempdir())


def program_log_name(program: str | None) -> str | None:
    """Reduce a target program path to its base name without its last extension.

    Example:
        >>> program_log_name('/opt/pantum/bin/pantum-installer.sh')
        'pantum-installer'
    """
    if not program:
        return None
    base = os.path.basename(program.rstrip('/'))
    return re.sub(r'\.[^.]*$', '', base)


def get_log_file_path(program: str | None = None, log_dir: str | os.PathLike | None = None) -> Path:
    """Get the log file path for a wrapped program.

    Args:
        program: Target program as given on the command line, or None.
        log_dir: Directory override (default: system temp dir).

    Returns:
        <log_dir>/display-env-wrapper_<program>.log, or
        <log_dir>/display-env-wrapper.log when no program is given.
    """
    name = program_log_name(program)
    filename = f'{APP_NAME}_{name}.log' if name else f'{APP_NAME}.log'
    return get_log_dir(log_dir) / filename


def get_rotated_log_path(log_file: Path) -> Path:
    """Get the single rotation sibling of a log file (``<file>.old``)."""
    return log_file.with_name(log_file.name + ROTATED_SUFFIX)


def get_runtime_dir(uid: int, runtime_root: str | os.PathLike = '/run/user') -> Path:
    """Get the XDG runtime directory of a user.

    Args:
        uid: Numeric user id.
        runtime_root: Parent of the per-user directories.

    Returns:
        Path such as /run/user/1000
    """
    return Path(runtime_root) / str(uid)
