import logging
import os
from typing import Mapping, Optional

LOG_LEVEL_ENV = "GEOCOIN_LOG_LEVEL"
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def resolve_log_level(
    debug: bool = False,
    default_level: int = logging.WARNING,
    environ: Optional[Mapping[str, str]] = None,
) -> int:
    """Pick the level for the geocoin loggers.

    ``--debug`` wins. Otherwise GEOCOIN_LOG_LEVEL is used when it names a level
    ("info", "DEBUG") or gives a number ("20"). Anything else falls back to
    ``default_level``.
    """
    if debug:
        return logging.DEBUG
    env = os.environ if environ is None else environ
    raw = env.get(LOG_LEVEL_ENV, "").strip()
    if not raw:
        return default_level
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.upper())
    if isinstance(level, int):
        return level
    logger.warning("Ignoring unknown %s=%r", LOG_LEVEL_ENV, raw)
    return default_level


def configure_logging(debug: bool = False, default_level: int = logging.WARNING) -> int:
    """Set up root handlers and the ``geocoin`` logger level; returns the level.

    The package logger level is set even when the root logger already has
    handlers, in which case ``basicConfig`` leaves them alone.
    """
    level = resolve_log_level(debug, default_level)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("geocoin").setLevel(level)
    return level
