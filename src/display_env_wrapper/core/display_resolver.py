"""DISPLAY detection for the active user.

Methods are tried in a fixed order and the first one producing a value wins:

- ``loginctl``: the Display property of the user's logind session
- ``desktop-process``: DISPLAY from the environment of the user's desktop shell
- ``x11-socket-owner``: the first X11 socket owned by the user
- ``who-command``: a ``(:N)`` host field in the user's login rows

If none succeeds, or the active user is the privileged user, the default
(``:0``) is used and tagged ``default-fallback``.
"""

import re
from collections.abc import Iterable, Sequence

from ..config import DetectionConfig
from ..logging_setup import get_logger
from .context import SessionContext
from .fallback import first_result
from .system_probe import SystemProbe

logger = get_logger(__name__)

METHOD_LOGINCTL = "loginctl"
METHOD_DESKTOP_PROCESS = "desktop-process"
METHOD_X11_SOCKET = "x11-socket-owner"
METHOD_WHO = "who-command"
METHOD_DEFAULT = "default-fallback"

_WHO_DISPLAY_RE = re.compile(r"\(:(\d+)\)")


def display_from_loginctl(probe: SystemProbe, user: str) -> str | None:
    if not probe.command_exists("loginctl"):
        logger.debug("✗ loginctl is not available")
        return None

    session_id = None
    for row in probe.loginctl_sessions():
        # SESSION UID USER SEAT ...
        fields = row.split()
        if len(fields) >= 3 and fields[2] == user:
            session_id = fields[0]
            break
    if session_id is None:
        logger.debug("✗ loginctl has no session for {user}", user=user)
        return None

    display = probe.loginctl_display(session_id)
    if not display:
        logger.debug("✗ loginctl session {sid} has no Display", sid=session_id)
        return None
    logger.debug("✓ loginctl session {sid} has DISPLAY={display}", sid=session_id, display=display)
    return display


def display_from_desktop_process(probe: SystemProbe, user: str, desktop_processes: Sequence[str]) -> str | None:
    pid = None
    for name in desktop_processes:
        pids = probe.pgrep(user, name)
        if pids:
            pid = pids[0]
            logger.debug("  Found desktop process {name} (pid {pid})", name=name, pid=pid)
            break
    if pid is None:
        logger.debug("✗ No desktop session process for {user}", user=user)
        return None

    environ = probe.process_environ(pid)
    if environ is None:
        logger.debug("✗ Cannot read the environment of pid {pid}", pid=pid)
        return None

    display = environ.get("DISPLAY")
    if not display:
        logger.debug("✗ No DISPLAY in the environment of pid {pid}", pid=pid)
        return None
    logger.debug("✓ Desktop process {pid} has DISPLAY={display}", pid=pid, display=display)
    return display


def display_from_x11_sockets(probe: SystemProbe, user: str) -> str | None:
    for socket in probe.x11_sockets():
        number = socket.name.replace("X", "", 1)
        owner = probe.owner_name(socket) or "unknown"
        logger.debug("    Socket X{number} (owner: {owner})", number=number, owner=owner)
        if owner == user:
            logger.debug("✓ X11 socket owner matches: DISPLAY=:{number}", number=number)
            return f":{number}"
    logger.debug("✗ No X11 socket owned by {user}", user=user)
    return None


def display_from_who(who_lines: Iterable[str], user: str) -> str | None:
    for line in who_lines:
        if not line.startswith(f"{user} "):
            continue
        match = _WHO_DISPLAY_RE.search(line)
        if match:
            display = f":{match.group(1)}"
            logger.debug("✓ who lists DISPLAY={display}", display=display)
            return display
    logger.debug("✗ who lists no display for {user}", user=user)
    return None


def detect_display(probe: SystemProbe, user: str, detection: DetectionConfig) -> tuple[str, str] | None:
    """Try every method in order for ``user``.

    Returns:
        ``(method, display)`` for the first method that succeeded, or None.
    """
    return first_result([
        (METHOD_LOGINCTL, lambda: display_from_loginctl(probe, user)),
        (METHOD_DESKTOP_PROCESS, lambda: display_from_desktop_process(
            probe, user, detection.desktop_processes)),
        (METHOD_X11_SOCKET, lambda: display_from_x11_sockets(probe, user)),
        (METHOD_WHO, lambda: display_from_who(probe.who_lines(), user)),
    ])


def resolve_display(ctx: SessionContext, probe: SystemProbe, detection: DetectionConfig) -> str | None:
    """Resolve DISPLAY into ``ctx`` unless a display is already inherited.

    Returns:
        The resolved value, or None when DISPLAY/WAYLAND_DISPLAY was set on entry.
    """
    if ctx.env("DISPLAY") or ctx.env("WAYLAND_DISPLAY"):
        logger.info("DISPLAY already set, nothing to detect")
        return None
    if ctx.display is not None:
        return ctx.display

    logger.info("DISPLAY is not set, detecting")
    user = ctx.active_user
    result = None
    if user and user != detection.privileged_user:
        logger.info("Detecting DISPLAY for {user}", user=user)
        result = detect_display(probe, user, detection)
        if result is None:
            logger.info("❌ All DISPLAY detection methods failed")

    if result is None:
        ctx.set_display(detection.default_display, METHOD_DEFAULT)
        logger.info("🔄 Using default DISPLAY {display}", display=ctx.display)
    else:
        method, display = result
        ctx.set_display(display, method)
        logger.info("🎯 DISPLAY detected via {method}: {display}", method=method, display=display)
    return ctx.display
