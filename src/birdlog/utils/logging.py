"""Package logger for birdlog.

Modules log through ``logging.getLogger(__name__)`` or :func:`get_logger`;
records propagate to the ``birdlog`` logger configured here.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

LOGGER_NAME = "birdlog"
LOG_LEVEL_ENV = "BIRDLOG_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_configured = False


def _level_from_env() -> int:
    name = os.environ.get(LOG_LEVEL_ENV, "").strip().upper()
    if not name:
        return logging.INFO
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the package logger, or its child called *name*.

    The first call attaches a stream handler and applies the level from
    ``BIRDLOG_LOG_LEVEL`` (INFO when unset or unknown).
    """

    global _configured
    package_logger = logging.getLogger(LOGGER_NAME)
    if not _configured:
        if not package_logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            package_logger.addHandler(handler)
        package_logger.setLevel(_level_from_env())
        _configured = True
    return package_logger.getChild(name) if name else package_logger
