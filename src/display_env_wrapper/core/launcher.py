"""Hand the process over to the target program."""

import os
import shutil
from collections.abc import Mapping, Sequence

from ..logging_setup import get_logger

logger = get_logger(__name__)

EXIT_PROGRAM_NOT_FOUND = 1
EXIT_CANNOT_EXECUTE = 126


class ProgramNotFoundError(FileNotFoundError):
    """Raised when the target is neither a file nor a command on PATH."""


def locate_program(program: str, path: str | None = None) -> str:
    """Check that ``program`` can be executed.

    Args:
        program: File path or bare command name.
        path: Search path override (default: PATH of this process).

    Returns:
        ``program`` unchanged; ``exec`` resolves it again against PATH.

    Raises:
        ProgramNotFoundError: If it is neither an existing file nor on PATH.
    """
    if os.path.isfile(program) or shutil.which(program, path=path) is not None:
        return program
    raise ProgramNotFoundError(f"Program not found: {program}")


def exec_program(program: str, args: Sequence[str], environ: Mapping[str, str]) -> None:
    """Replace the current process image with ``program``.

    Never returns on success. Nothing registered in this process (atexit
    handlers, buffered output, finally blocks) runs afterwards.
    """
    logger.info("Executing: {cmd}", cmd=" ".join([program, *args]))
    logger.info("=================== wrapper done ===================")
    os.execvpe(program, [program, *args], dict(environ))


def launch(program: str, args: Sequence[str], environ: Mapping[str, str]) -> int:
    """Locate and exec ``program``.

    Returns:
        EXIT_PROGRAM_NOT_FOUND when the target cannot be located,
        EXIT_CANNOT_EXECUTE when exec fails (no exec bit, bad interpreter).
        On success control never comes back.
    """
    try:
        locate_program(program, path=environ.get("PATH"))
    except ProgramNotFoundError as e:
        logger.error("{err}", err=e)
        return EXIT_PROGRAM_NOT_FOUND
    try:
        exec_program(program, args, environ)
    except OSError as e:
        logger.error("Cannot execute {program}: {err}", program=program, err=e)
        return EXIT_CANNOT_EXECUTE
    return 0  # unreachable once exec succeeds
