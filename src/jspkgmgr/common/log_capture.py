"""Scoped log file for risky package manager commands.

``capture_log`` opens a temporary file that a subprocess can write its output
into. Leaving the block normally deletes the file; leaving it with an
exception moves the file to a stable path so the user can inspect it.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from typing import IO, Any, Iterator

logger = logging.getLogger(__name__)


class CapturedLog:
    """Handle to the temporary log file of one command."""

    def __init__(self, stream: IO[Any], temp_path: str, final_path: str):
        self.stream = stream
        self.temp_path = temp_path
        self.final_path = final_path

    def read(self) -> str:
        """Return everything written so far; never raises."""
        try:
            self.stream.flush()
            with open(self.temp_path, "r", encoding="utf-8", errors="replace") as f:
                return f.read()
        except (OSError, ValueError) as exc:
            logger.debug("Unable to read captured log %s: %s", self.temp_path, exc)
            return ""

    def _close(self) -> None:
        if not self.stream.closed:
            self.stream.close()

    def remove(self) -> None:
        self._close()
        try:
            os.unlink(self.temp_path)
        except OSError:
            logger.debug("Failed to remove temp log file: %s", self.temp_path)

    def preserve(self) -> None:
        self._close()
        try:
            shutil.move(self.temp_path, self.final_path)
        except OSError as exc:
            logger.warning(
                "Could not move log file %s to %s: %s", self.temp_path, self.final_path, exc
            )


@contextmanager
def capture_log(final_path: str) -> Iterator[CapturedLog]:
    """Yield a :class:`CapturedLog` whose file is cleaned up on every exit path.

    Args:
        final_path: Where the log is kept when the block raises.
    """
    fd, temp_path = tempfile.mkstemp(prefix="jspkgmgr-", suffix=".log")
    log = CapturedLog(os.fdopen(fd, "w+", encoding="utf-8"), temp_path, final_path)
    try:
        yield log
    except BaseException:
        log.preserve()
        raise
    log.remove()
