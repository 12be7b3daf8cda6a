from __future__ import annotations

import logging
import sys

LOGGER_NAME = "chat_relay"

logger = logging.getLogger(LOGGER_NAME)

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str | int = "INFO") -> logging.Logger:
    """
    Configure the shared relay logger.

    Safe to call more than once: the stream handler is only attached the
    first time, later calls just adjust the level.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    if not any(getattr(h, "_chat_relay", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        handler._chat_relay = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    logger.setLevel(level)
    return logger


__all__ = ["LOGGER_NAME", "logger", "setup_logging"]
