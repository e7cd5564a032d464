"""Logging setup for the headless runner."""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_DATEFMT = "%H:%M:%S"
LEVEL_ENV_VAR = "IDLEFARM_LOG_LEVEL"


def configure_logging(*, level: str | None = None, fmt: str = LOG_FORMAT) -> logging.Logger:
    """Configure the root handler and the ``idlefarm`` logger.

    ``level`` wins over ``$IDLEFARM_LOG_LEVEL``; INFO when neither is set.
    Per-tick chatter is logged at DEBUG, so INFO shows only run milestones.
    """
    resolved = (level or os.getenv(LEVEL_ENV_VAR) or "INFO").upper()
    logging.basicConfig(level=resolved, format=fmt, datefmt=LOG_DATEFMT)
    package_logger = logging.getLogger("idlefarm")
    package_logger.setLevel(resolved)
    package_logger.debug(f"Logging configured at {resolved}")
    return package_logger
