# farmdesk/logging_config.py
"""Logging setup for the console. Call configure_logging() once at startup."""

from __future__ import annotations

import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"

_handler: Optional[logging.Handler] = None


def configure_logging(level: Optional[str] = None, stream=None) -> None:
    global _handler

    root = logging.getLogger()
    resolved = logging.getLevelName((level or "INFO").upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO
    root.setLevel(resolved)

    if _handler is not None:
        return

    _handler = logging.StreamHandler(stream or sys.stderr)
    _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(_handler)

    # urllib3 is chatty at INFO about connection pools
    logging.getLogger("urllib3").setLevel(logging.WARNING)

