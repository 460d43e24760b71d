"""Detection pipeline for display-env-wrapper.

- Active user resolution (login table, process table)
- DISPLAY resolution (loginctl, desktop process, X11 socket, who)
- XDG_RUNTIME_DIR derivation
- Launching the target program
"""

from .context import AlreadyResolvedError, SessionContext
from .display_resolver import detect_display, resolve_display
from .launcher import EXIT_CANNOT_EXECUTE, EXIT_PROGRAM_NOT_FOUND, ProgramNotFoundError, exec_program, launch, locate_program
from .pipeline import build_context, prepare_environment
from .runtime_dir import resolve_runtime_dir
from .system_probe import SystemProbe
from .user_resolver import detect_active_user, get_logged_in_users, resolve_active_user

__all__ = [
    'AlreadyResolvedError',
    'EXIT_CANNOT_EXECUTE',
    'EXIT_PROGRAM_NOT_FOUND',
    'ProgramNotFoundError',
    'SessionContext',
    'SystemProbe',
    'build_context',
    'detect_active_user',
    'detect_display',
    'exec_program',
    'get_logged_in_users',
    'launch',
    'locate_program',
    'prepare_environment',
    'resolve_active_user',
    'resolve_display',
    'resolve_runtime_dir',
]
