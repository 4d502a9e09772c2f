"""Logging setup driven by :class:`~truthvote.config.schema.LoggingConfig`."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from truthvote.config.schema import LoggingConfig

_PLAIN_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_STRUCTURED_FORMAT = (
    "ts=%(asctime)s level=%(levelname)s logger=%(name)s msg=%(message)r"
)


def configure_logging(config: LoggingConfig) -> logging.Handler:
    """Install a single root handler according to *config*.

    Re-running replaces the handler installed by a previous call, so the
    app factory can be invoked repeatedly (tests, reload).

    Returns:
        The handler that was installed.
    """
    level = logging.getLevelName(config.level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler: logging.Handler
    if config.file:
        path = Path(config.file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)

    fmt = _STRUCTURED_FORMAT if config.structured else _PLAIN_FORMAT
    handler.setFormatter(logging.Formatter(fmt))
    handler.set_name("truthvote")

    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == "truthvote":
            root.removeHandler(existing)
            existing.close()
    root.addHandler(handler)
    root.setLevel(level)
    return handler
