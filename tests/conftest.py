"""Shared fixtures: a probe with canned system evidence and a clean environment."""

from pathlib import Path

import pytest
from loguru import logger

from display_env_wrapper import config
from display_env_wrapper.core.system_probe import SystemProbe


class FakeProbe(SystemProbe):
    """SystemProbe answering from canned data and recording what was asked."""

    def __init__(
        self,
        *,
        user="root",
        uid=0,
        who=(),
        ps=(),
        home=(),
        uids=None,
        commands=("loginctl",),
        sessions=(),
        session_displays=None,
        pgrep=None,
        environs=None,
        sockets=None,
    ):
        super().__init__()
        self.user = user
        self.uid = uid
        self.who = list(who)
        self.ps = list(ps)
        self.home = list(home)
        self.uids = dict(uids or {})
        self.commands = set(commands)
        self.sessions = list(sessions)
        self.session_displays = dict(session_displays or {})
        self.pgrep_results = dict(pgrep or {})
        self.environs = dict(environs or {})
        self.sockets = dict(sockets or {})
        self.calls = []

    def command_exists(self, name):
        self.calls.append(("command_exists", name))
        return name in self.commands

    def who_lines(self):
        self.calls.append(("who",))
        return list(self.who)

    def ps_lines(self):
        self.calls.append(("ps",))
        return list(self.ps)

    def loginctl_sessions(self):
        self.calls.append(("loginctl_sessions",))
        return list(self.sessions)

    def loginctl_display(self, session_id):
        self.calls.append(("loginctl_display", session_id))
        return self.session_displays.get(session_id)

    def pgrep(self, user, name):
        self.calls.append(("pgrep", user, name))
        return list(self.pgrep_results.get((user, name), []))

    def process_environ(self, pid):
        self.calls.append(("process_environ", pid))
        return self.environs.get(pid)

    def x11_sockets(self):
        self.calls.append(("x11_sockets",))
        return [Path("/tmp/.X11-unix") / name for name in sorted(self.sockets)]

    def owner_name(self, path):
        return self.sockets.get(path.name)

    def home_users(self):
        self.calls.append(("home",))
        return list(self.home)

    def current_user(self):
        return self.user

    def current_uid(self):
        return self.uid

    def uid_of(self, user):
        return self.uids.get(user)

    def called(self, name):
        return any(call[0] == name for call in self.calls)


@pytest.fixture
def make_probe():
    """Factory for FakeProbe instances."""
    return FakeProbe


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Isolate tests from the caller's session and settings cache."""
    import os

    for name in ("DISPLAY", "WAYLAND_DISPLAY", "XDG_RUNTIME_DIR"):
        monkeypatch.delenv(name, raising=False)
    for name in list(os.environ):
        if name.startswith("DISPLAY_ENV_WRAPPER_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config, "_settings_cache", None)
    yield
    logger.remove()
