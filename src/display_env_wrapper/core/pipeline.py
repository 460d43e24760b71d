"""The detection pipeline: user, then DISPLAY, then XDG_RUNTIME_DIR."""

import os
from collections.abc import Mapping

from ..config import Settings
from ..logging_setup import get_logger
from .context import SessionContext
from .display_resolver import resolve_display
from .runtime_dir import resolve_runtime_dir
from .system_probe import SystemProbe
from .user_resolver import get_logged_in_users, resolve_active_user

logger = get_logger(__name__)

_UNSET = "unset"


def build_context(probe: SystemProbe, settings: Settings, environ: Mapping[str, str] | None = None) -> SessionContext:
    return SessionContext(
        invoking_user=probe.current_user(),
        invoking_uid=probe.current_uid(),
        environ=os.environ if environ is None else environ,
        privileged_user=settings.detection.privileged_user,
    )


def prepare_environment(
    settings: Settings,
    probe: SystemProbe | None = None,
    environ: Mapping[str, str] | None = None,
) -> SessionContext:
    """Run every resolver once and return the filled-in context."""
    if probe is None:
        probe = SystemProbe.from_settings(settings)
    ctx = build_context(probe, settings, environ)
    detection = settings.detection

    logger.info("Current user: {user}, pid: {pid}", user=ctx.invoking_user, pid=os.getpid())
    logger.info(
        "Initial environment: DISPLAY={display}, WAYLAND={wayland}, XDG_RUNTIME_DIR={xdg}",
        display=ctx.env("DISPLAY") or _UNSET,
        wayland=ctx.env("WAYLAND_DISPLAY") or _UNSET,
        xdg=ctx.env("XDG_RUNTIME_DIR") or _UNSET,
    )
    logger.info(
        "Logged-in users: {users}",
        users=" ".join(get_logged_in_users(probe.who_lines(), privileged_user="")),
    )

    resolve_active_user(ctx, probe, detection)
    resolve_display(ctx, probe, detection)
    resolve_runtime_dir(ctx, detection)

    final = ctx.exported_environ()
    logger.info(
        "Final environment: DISPLAY={display}, XDG_RUNTIME_DIR={xdg}, active user={user}",
        display=final.get("DISPLAY") or _UNSET,
        xdg=final.get("XDG_RUNTIME_DIR") or _UNSET,
        user=ctx.active_user,
    )
    return ctx
