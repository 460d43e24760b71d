"""Per-invocation session context threaded through the resolvers."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


class AlreadyResolvedError(RuntimeError):
    """Raised when a value that is resolved once per run is assigned twice."""


@dataclass
class SessionContext:
    """What the wrapper knows about the invocation and what it resolved.

    ``environ`` is a read-only view of the environment the wrapper started
    with. Only ``display`` and ``xdg_runtime_dir`` are handed on to the target,
    and only when they were unset on entry.
    """

    invoking_user: str
    invoking_uid: int
    environ: Mapping[str, str] = field(default_factory=dict)
    privileged_user: str = "root"

    active_user: str | None = field(default=None, init=False)
    active_uid: int | None = field(default=None, init=False)
    display: str | None = field(default=None, init=False)
    display_method: str | None = field(default=None, init=False)
    xdg_runtime_dir: str | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        self.environ = MappingProxyType(dict(self.environ))

    @property
    def is_privileged(self) -> bool:
        return self.invoking_user == self.privileged_user

    def env(self, name: str) -> str | None:
        """Value of an inherited variable, treating empty as unset."""
        return self.environ.get(name) or None

    def set_active_user(self, user: str, uid: int | None) -> None:
        if self.active_user is not None:
            raise AlreadyResolvedError(f"active user already resolved as {self.active_user!r}")
        self.active_user = user
        self.active_uid = uid

    def set_display(self, display: str, method: str) -> None:
        if self.display is not None:
            raise AlreadyResolvedError(f"DISPLAY already resolved as {self.display!r}")
        self.display = display
        self.display_method = method

    def set_xdg_runtime_dir(self, path: str) -> None:
        if self.xdg_runtime_dir is not None:
            raise AlreadyResolvedError(f"XDG_RUNTIME_DIR already resolved as {self.xdg_runtime_dir!r}")
        self.xdg_runtime_dir = path

    def exported_environ(self) -> dict[str, str]:
        """Environment for the target: the inherited one plus resolved values."""
        environ = dict(self.environ)
        if self.display is not None:
            environ["DISPLAY"] = self.display
        if self.xdg_runtime_dir is not None:
            environ["XDG_RUNTIME_DIR"] = self.xdg_runtime_dir
        return environ

    def as_dict(self) -> dict:
        return {
            "invoking_user": self.invoking_user,
            "invoking_uid": self.invoking_uid,
            "active_user": self.active_user,
            "active_uid": self.active_uid,
            "display": self.env("DISPLAY") if self.display is None else self.display,
            "display_method": self.display_method or ("inherited" if self.env("DISPLAY") else None),
            "wayland_display": self.env("WAYLAND_DISPLAY"),
            "xdg_runtime_dir": self.env("XDG_RUNTIME_DIR") if self.xdg_runtime_dir is None else self.xdg_runtime_dir,
        }
