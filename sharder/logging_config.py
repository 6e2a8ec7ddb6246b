"""Console logging setup for sharder runs."""

from __future__ import annotations

import logging
import os
import sys
from typing import TextIO

# Shared application logger used across modules.
log = logging.getLogger("sharder")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"
_HANDLER_NAME = "sharder-console"


def configure_logging(level: str | int | None = None, stream: TextIO | None = None) -> logging.Logger:
    """Route sharder log records to the console at the requested level.

    The console handler lives on the ``sharder`` logger, not the root logger,
    and calling this again replaces it instead of stacking a second one.
    Records go to stderr by default so stdout only carries ``Wrote <path>``.

    Args:
        level: Level name or number. ``None`` reads ``LOG_LEVEL`` from the
            environment and defaults to ``INFO``.
        stream: Text stream for the handler; defaults to ``sys.stderr``.

    Returns:
        logging.Logger: The ``sharder`` application logger.
    """
    resolved = resolve_level(level if level is not None else os.getenv("LOG_LEVEL"))

    for existing in [h for h in log.handlers if h.get_name() == _HANDLER_NAME]:
        log.removeHandler(existing)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    log.addHandler(handler)
    log.setLevel(resolved)
    log.debug("Logging configured at level %s", logging.getLevelName(resolved))
    return log


def resolve_level(level: str | int | None) -> int:
    """Map ``"debug"``, ``"10"``, ``logging.DEBUG`` and friends to a level number.

    Unknown names and ``None`` resolve to ``logging.INFO``.
    """
    if isinstance(level, int):
        return level
    text = (level or "").strip()
    if text.isdigit():
        return int(text)
    value = getattr(logging, text.upper(), None) if text else None
    return value if isinstance(value, int) else logging.INFO
