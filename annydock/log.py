"""Logging configuration for the dock.

Records carry the thread name, since the event socket is read on its own
``annydock-ipc`` thread while everything else runs on the GTK main loop.
"""

from __future__ import annotations

import logging
import os

LEVEL_ENV = "ANNYDOCK_LOG_LEVEL"
DEFAULT_LEVEL = logging.WARNING


def level_from_env(value: str | None) -> int:
    """Map a level name (case-insensitive) or number to a logging level."""
    if not value:
        return DEFAULT_LEVEL
    value = value.strip()
    if value.isdigit():
        return int(value)
    level = logging.getLevelName(value.upper())
    return level if isinstance(level, int) else DEFAULT_LEVEL


logging.basicConfig(
    format="%(asctime)s.%(msecs)03d %(threadName)-12s %(name)-20s "
    "%(levelname)-5s %(message)s",
    datefmt="%H:%M:%S",
    level=level_from_env(os.environ.get(LEVEL_ENV)),
)


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the 'annydock.' namespace.

    Level controlled by ANNYDOCK_LOG_LEVEL (name or number, default WARNING).
    """
    return logging.getLogger(f"annydock.{name}")
