"""XDG_RUNTIME_DIR derivation from the active user's uid."""

from ..config import DetectionConfig
from ..logging_setup import get_logger
from ..paths import get_runtime_dir
from .context import SessionContext

logger = get_logger(__name__)


def resolve_runtime_dir(ctx: SessionContext, detection: DetectionConfig) -> str | None:
    """Set ``/run/user/<uid>`` in ``ctx`` when XDG_RUNTIME_DIR is unset.

    The directory is neither created nor checked. A missing or zero uid
    leaves the variable unset.
    """
    if ctx.env("XDG_RUNTIME_DIR"):
        logger.info("XDG_RUNTIME_DIR already set, leaving it alone")
        return None
    if ctx.xdg_runtime_dir is not None:
        return ctx.xdg_runtime_dir

    uid = ctx.active_uid
    if uid is None or uid == 0:
        logger.info("Cannot set XDG_RUNTIME_DIR, no usable uid ({uid})", uid=uid)
        return None

    ctx.set_xdg_runtime_dir(str(get_runtime_dir(uid, detection.runtime_root)))
    logger.info("Set XDG_RUNTIME_DIR={path}", path=ctx.xdg_runtime_dir)
    return ctx.xdg_runtime_dir
