"""Read-only access to the session and process evidence of the host.

Every external data source the resolvers look at goes through
:class:`SystemProbe`: ``who``, ``ps -ef``, ``loginctl``, ``pgrep``,
``/proc/<pid>/environ``, the X11 socket directory, the home-directory
listing and the passwd database. Tests swap in a probe with canned output.

Failures never raise. A missing command, a non-zero exit status or an
unreadable file all come back as an empty result.
"""

import os
import pwd
import shutil
import stat
import subprocess
from pathlib import Path

from ..logging_setup import get_logger

logger = get_logger(__name__)


class SystemProbe:
    """Subprocess and filesystem backed probe."""

    def __init__(
        self,
        home_root: str | os.PathLike = "/home",
        x11_socket_dir: str | os.PathLike = "/tmp/.X11-unix",
        proc_root: str | os.PathLike = "/proc",
        timeout: float | None = None,
    ) -> None:
        self.home_root = Path(home_root)
        self.x11_socket_dir = Path(x11_socket_dir)
        self.proc_root = Path(proc_root)
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings) -> "SystemProbe":
        detection = settings.detection
        return cls(
            home_root=detection.home_root,
            x11_socket_dir=detection.x11_socket_dir,
            proc_root=detection.proc_root,
            timeout=detection.command_timeout,
        )

    # -- commands ---------------------------------------------------------

    def _run(self, args: list[str]) -> str | None:
        """Run a command and return its stdout, or None on any failure."""
        try:
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self.timeout,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug("Command {cmd} could not run: {err}", cmd=" ".join(args), err=e)
            return None
        if result.returncode != 0:
            logger.debug("Command {cmd} exited with {rc}", cmd=" ".join(args), rc=result.returncode)
            return None
        return result.stdout

    @staticmethod
    def _lines(output: str | None) -> list[str]:
        if not output:
            return []
        return [line for line in output.splitlines() if line.strip()]

    def command_exists(self, name: str) -> bool:
        return shutil.which(name) is not None

    def who_lines(self) -> list[str]:
        """Rows of ``who``, in the order it prints them."""
        return self._lines(self._run(["who"]))

    def ps_lines(self) -> list[str]:
        """Rows of ``ps -ef`` without the header, oldest process first."""
        return self._lines(self._run(["ps", "-ef"]))[1:]

    def loginctl_sessions(self) -> list[str]:
        """Rows of ``loginctl list-sessions --no-legend``."""
        return self._lines(self._run(["loginctl", "list-sessions", "--no-legend"]))

    def loginctl_display(self, session_id: str) -> str | None:
        """Display property of a logind session, or None when empty."""
        output = self._run(["loginctl", "show-session", session_id, "-p", "Display"])
        for line in self._lines(output):
            key, sep, value = line.partition("=")
            if sep and key.strip() == "Display":
                return value.strip() or None
        return None

    def pgrep(self, user: str, name: str) -> list[int]:
        """Pids of processes named ``name`` owned by ``user``."""
        pids = []
        for line in self._lines(self._run(["pgrep", "-u", user, name])):
            try:
                pids.append(int(line.strip()))
            except ValueError:
                continue
        return pids

    # -- filesystem -------------------------------------------------------

    def process_environ(self, pid: int) -> dict[str, str] | None:
        """Environment block of a process, or None if it cannot be read."""
        path = self.proc_root / str(pid) / "environ"
        try:
            raw = path.read_bytes()
        except OSError as e:
            logger.debug("Cannot read {path}: {err}", path=path, err=e)
            return None

        environ = {}
        for entry in raw.split(b"\0"):
            key, sep, value = entry.decode("utf-8", errors="replace").partition("=")
            if sep:
                environ[key] = value
        return environ

    def x11_sockets(self) -> list[Path]:
        """Local X11 sockets (``X<n>``) in name order."""
        try:
            candidates = sorted(self.x11_socket_dir.glob("X*"))
        except OSError:
            return []

        sockets = []
        for path in candidates:
            try:
                if stat.S_ISSOCK(path.stat().st_mode):
                    sockets.append(path)
            except OSError:
                continue
        return sockets

    def owner_name(self, path: Path) -> str | None:
        """User name owning ``path``, or None if it cannot be resolved."""
        try:
            uid = path.stat().st_uid
            return pwd.getpwuid(uid).pw_name
        except (OSError, KeyError):
            return None

    def home_users(self) -> list[str]:
        """Names of the directories under the home root."""
        try:
            return sorted(entry.name for entry in self.home_root.iterdir())
        except OSError:
            return []

    # -- identities -------------------------------------------------------

    def current_user(self) -> str:
        uid = os.geteuid()
        try:
            return pwd.getpwuid(uid).pw_name
        except KeyError:
            return str(uid)

    def current_uid(self) -> int:
        return os.geteuid()

    def uid_of(self, user: str) -> int | None:
        try:
            return pwd.getpwnam(user).pw_uid
        except KeyError:
            return None
