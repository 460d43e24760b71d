"""Loguru logging setup for display-env-wrapper.

The wrapper is silent by default. When the log switch is on, every line goes
to a single append-only file next to the other temp files, and that file is
size-capped by renaming it to ``<file>.old`` once it grows past the limit.

Usage:
    from .logging_setup import setup_logging, get_logger

    # At startup
    setup_logging(enabled=True, log_file=Path("/tmp/display-env-wrapper.log"))

    # In modules
    logger = get_logger(__name__)
    logger.info("Resolved user {user}", user="alice")

Requirements:
    pip install loguru
"""

import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Any

from loguru import logger

from .paths import get_rotated_log_path

# Default console format with colors
CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

# Plain "timestamp - message" lines for the log file
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} - {message}"

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

DEFAULT_MAX_BYTES = 1_048_576


class RotatingLogSink:
    """Callable loguru sink with an on/off switch and single-file rotation.

    Both the switch and the size check are evaluated on every message. When
    the file is larger than ``max_bytes`` it is renamed to ``<file>.old``
    (replacing any earlier rotation) and a new file is started with a
    rotation notice, followed by the message that triggered it.
    """

    def __init__(self, path: Path | str, max_bytes: int = DEFAULT_MAX_BYTES, enabled: bool = True) -> None:
        self.path = Path(path)
        self.max_bytes = max_bytes
        self.enabled = enabled

    @property
    def rotated_path(self) -> Path:
        return get_rotated_log_path(self.path)

    def __call__(self, message: Any) -> None:
        if not self.enabled:
            return

        record = getattr(message, "record", None)
        when = record["time"] if record else datetime.now()
        self._rotate_if_needed(when)

        with open(self.path, "a", encoding="utf-8") as f:
            f.write(str(message))

    def _rotate_if_needed(self, when: datetime) -> None:
        try:
            size = self.path.stat().st_size
        except FileNotFoundError:
            return
        if size <= self.max_bytes:
            return

        try:
            os.replace(self.path, self.rotated_path)
        except OSError:
            pass  # truncated below either way
        with open(self.path, "w", encoding="utf-8") as f:
            f.write(
                f"{when.strftime(TIMESTAMP_FORMAT)} - "
                f"Log file exceeded {self.max_bytes} bytes, rotated to {self.rotated_path.name}\n"
            )


def setup_logging(
    enabled: bool = False,
    log_file: Path | str | None = None,
    log_level: str | None = None,
    max_bytes: int = DEFAULT_MAX_BYTES,
    console: bool = False,
) -> RotatingLogSink | None:
    """Configure logging with an optional console handler and the file sink.

    Writes are synchronous: the wrapper replaces its own process image right
    after the last message, so nothing may be left in a queue.

    Args:
        enabled: Log switch for the file sink. Off means nothing is written.
        log_file: Target log file; None disables the file sink.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Defaults to DEBUG.
        max_bytes: Size above which the file is rotated.
        console: Also log to stderr (interactive debugging only).

    Returns:
        The file sink (so callers can flip ``enabled``), or None without a log file.

    Example:
        >>> setup_logging()  # Silent
        >>> setup_logging(enabled=True, log_file="/tmp/x.log")
    """
    # Remove default handler
    logger.remove()

    if log_level is None:
        log_level = "DEBUG"

    if console:
        logger.add(
            sys.stderr,
            format=CONSOLE_FORMAT,
            level=log_level,
            colorize=True,
            backtrace=True,
            diagnose=True,
        )

    if log_file is None:
        return None

    sink = RotatingLogSink(log_file, max_bytes=max_bytes, enabled=enabled)
    logger.add(
        sink,
        level=log_level,
        format=FILE_FORMAT,
        colorize=False,
        backtrace=True,
        diagnose=False,
    )
    return sink


def get_logger(name: str, **context: Any) -> "logger":
    """Get a context-bound logger.

    Args:
        name: Logger name (usually __name__)
        **context: Additional context to bind to all log messages

    Returns:
        Logger instance with bound context
    """
    return logger.bind(name=name, **context)
