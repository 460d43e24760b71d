"""Active user detection.

When the wrapper runs unprivileged, the invoker is the active user. When it
runs as the privileged user (typically root, from a package installer), the
user owning the graphical session has to be guessed from the login table and
the process table:

1. exactly one non-privileged user logged in: take it;
2. otherwise the owner of a running installer process;
3. otherwise the owner of the most recently started process;
4. otherwise the first user in the login table;
5. otherwise the first logged-in user, or the invoker as a last resort.

Owners with a directory under the home root are preferred over system
accounts in steps 2 and 3.
"""

from collections.abc import Iterable, Sequence

from ..config import DetectionConfig
from ..logging_setup import get_logger
from .context import SessionContext
from .fallback import first_result
from .system_probe import SystemProbe

logger = get_logger(__name__)

# ps -ef columns: UID PID PPID C STIME TTY TIME CMD
_PS_CMD_FIELD = 7


def row_owner(row: str) -> str:
    """First whitespace separated field of a ``who``/``ps`` row."""
    fields = row.split(None, 1)
    return fields[0] if fields else ""


def get_logged_in_users(who_lines: Iterable[str], privileged_user: str = "root") -> list[str]:
    """Unique, sorted names of the non-privileged users in the login table."""
    users = {row_owner(line) for line in who_lines}
    users.discard("")
    users.discard(privileged_user)
    return sorted(users)


def _prefer_home_owner(rows: Iterable[str], home_users: Sequence[str]) -> str | None:
    owners = [row_owner(row) for row in rows]
    for owner in owners:
        if owner in home_users:
            return owner
    return owners[0] if owners else None


def find_installer_owner(
    ps_lines: Sequence[str],
    markers: Sequence[str],
    home_users: Sequence[str],
    privileged_user: str = "root",
) -> str | None:
    """Owner of the first non-privileged process whose row mentions an installer."""
    rows = [
        line for line in ps_lines
        if row_owner(line) != privileged_user and any(marker in line for marker in markers)
    ]
    return _prefer_home_owner(rows, home_users)


def find_recent_owner(
    ps_lines: Sequence[str],
    home_users: Sequence[str],
    privileged_user: str = "root",
) -> str | None:
    """Owner of the newest non-privileged process."""
    rows = [line for line in reversed(ps_lines) if row_owner(line) != privileged_user]
    return _prefer_home_owner(rows, home_users)


def first_session_user(who_lines: Iterable[str], privileged_user: str = "root") -> str | None:
    for line in who_lines:
        owner = row_owner(line)
        if owner and owner != privileged_user:
            return owner
    return None


def detect_active_user(
    probe: SystemProbe,
    detection: DetectionConfig,
    ps_lines: Sequence[str] | None = None,
    who_lines: Sequence[str] | None = None,
) -> str | None:
    """Run the process-based fallback chain.

    Returns:
        The chosen user name, or None when there is no evidence of any
        non-privileged user at all.
    """
    privileged = detection.privileged_user
    if ps_lines is None:
        ps_lines = probe.ps_lines()
    home_users = probe.home_users()

    result = first_result([
        ("installer-process", lambda: find_installer_owner(
            ps_lines, detection.installer_markers, home_users, privileged)),
        ("recent-process", lambda: find_recent_owner(ps_lines, home_users, privileged)),
        ("who-session", lambda: first_session_user(
            probe.who_lines() if who_lines is None else who_lines, privileged)),
    ])
    if result is None:
        return None

    method, user = result
    logger.info("Active user {user} found via {method}", user=user, method=method)
    return user


def _log_process_evidence(ps_lines: Sequence[str], detection: DetectionConfig) -> None:
    privileged = detection.privileged_user
    others = [line for line in ps_lines if row_owner(line) != privileged]

    logger.debug("Installer processes:")
    for line in others:
        if any(marker in line for marker in detection.installer_markers):
            logger.debug("  [installer] {line}", line=line)

    logger.debug("Latest bash processes:")
    bash_rows = [
        line for line in reversed(others)
        if len(line.split()) > _PS_CMD_FIELD and line.split()[_PS_CMD_FIELD] == "/bin/bash"
    ]
    for line in bash_rows[:5]:
        logger.debug("  [bash] {line}", line=line)

    logger.debug("Latest non-{user} processes:", user=privileged)
    for line in others[-20:]:
        logger.debug("  {line}", line=line)


def resolve_active_user(ctx: SessionContext, probe: SystemProbe, detection: DetectionConfig) -> str:
    """Resolve the active user into ``ctx`` and return its name."""
    if ctx.active_user is not None:
        return ctx.active_user

    if not ctx.is_privileged:
        ctx.set_active_user(ctx.invoking_user, ctx.invoking_uid)
        return ctx.invoking_user

    logger.info("Running as {user}, looking for the active non-{user} user", user=ctx.invoking_user)
    who_lines = probe.who_lines()
    logged_in = get_logged_in_users(who_lines, detection.privileged_user)
    logger.info("Found {count} logged-in user(s): [{users}]", count=len(logged_in), users=" ".join(logged_in))

    if len(logged_in) == 1:
        user = logged_in[0]
        logger.info("Only one logged-in user, using {user}", user=user)
    else:
        if logged_in:
            logger.info("Several users logged in, inspecting processes")
        else:
            logger.info("No logged-in users, inspecting processes")

        ps_lines = probe.ps_lines()
        _log_process_evidence(ps_lines, detection)

        user = detect_active_user(probe, detection, ps_lines=ps_lines, who_lines=who_lines)
        if user is None and logged_in:
            user = logged_in[0]
            logger.warning("No active user detected, using first logged-in user {user}", user=user)
        elif user is None:
            user = ctx.invoking_user
            logger.warning("No non-{priv} user found, keeping {user}", priv=detection.privileged_user, user=user)

    uid = probe.uid_of(user)
    if uid is None:
        logger.debug("No uid for {user}, keeping {uid}", user=user, uid=ctx.invoking_uid)
        uid = ctx.invoking_uid

    ctx.set_active_user(user, uid)
    return user
