from __future__ import annotations
from pathlib import Path
import sys

from loguru import logger

import config as cfg

_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}"


def setup_logging(level: str | None = None, log_file: str | Path | None = None) -> None:
    """
    Configure the global loguru logger: stderr sink, plus an optional file sink
    rotated daily. Safe to call more than once; earlier sinks are dropped.
    """
    level = cfg.LOG_LEVEL if level is None else level.upper()

    logger.remove()
    logger.add(sys.stderr, level=level, format=_FORMAT)

    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            path,
            level=level,
            format=_FORMAT,
            rotation="1 day",
            retention="7 days",
            enqueue=True,  # worker thread logs too
        )
