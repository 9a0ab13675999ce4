"""Centralized logging helpers.

Provides a single ``configure_logging`` entry point plus small utilities used
for structured DEBUG traces around external commands.
"""

from __future__ import annotations

import logging
import os
import sys
import time
from typing import Any, Dict, Optional

from jspkgmgr.constants import Constants

_HANDLER_NAME = "jspkgmgr-console"


def configure_logging(level: Optional[str] = None) -> None:
    """Install the console handler on the root logger.

    The level comes from ``level``, then ``JSPKGMGR_LOG_LEVEL``, then INFO.
    Calling this twice does not add a second handler.
    """
    level_name = (level or os.environ.get(Constants.ENV_LOG_LEVEL) or "INFO").upper()
    level_value = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    root.setLevel(level_value)
    for handler in root.handlers:
        if handler.get_name() == _HANDLER_NAME:
            handler.setLevel(level_value)
            return

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
    handler.setLevel(level_value)
    root.addHandler(handler)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records from ``logger`` would be emitted."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra=`` mapping for structured log records.

    ``None`` values are dropped so formatters only see populated fields.
    """
    return {key: value for key, value in fields.items() if value is not None}


class Timer:
    """Context manager measuring wall-clock duration."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.monotonic()
        self._end = None
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self._end = time.monotonic()

    def duration_ms(self) -> int:
        """Elapsed milliseconds, up to now while the block is still running."""
        end = self._end if self._end is not None else time.monotonic()
        return int((end - self._start) * 1000)
