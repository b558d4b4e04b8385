"""Logging setup.

The terminal belongs to the TUI, so records only ever go to a file. Without
a log file a NullHandler keeps them off the terminal.
"""

from __future__ import annotations

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(log_file: Path | None, *, debug: bool = False) -> logging.Handler | None:
    """Attach a file handler to the ``mongotab`` logger.

    Returns the handler that was installed, or None when logging stays off.
    """
    root = logging.getLogger("mongotab")
    root.setLevel(logging.DEBUG if debug else logging.INFO)
    if log_file is None:
        root.addHandler(logging.NullHandler())
        return None
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_file, encoding="utf-8")
    except OSError:
        root.addHandler(logging.NullHandler())
        return None
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    return handler
