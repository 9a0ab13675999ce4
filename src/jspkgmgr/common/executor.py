"""Run external package manager binaries.

Every subprocess the library starts goes through :class:`CommandExecutor`,
which offers a blocking and an asyncio variant with the same arguments.
"""

from __future__ import annotations

import asyncio
import logging
import os
import subprocess
from typing import IO, Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from jspkgmgr.common.logging_utils import Timer, extra_context, is_debug_enabled
from jspkgmgr.errors import ExternalToolError

logger = logging.getLogger(__name__)

# "inherit", "pipe", "ignore" or an open file receiving stdout and stderr.
Stdio = Union[str, IO[Any]]

_STDIO_MODES = ("inherit", "pipe", "ignore")
_MISSING_BINARY_EXIT_CODE = 127


def _resolve_stdio(stdio: Stdio) -> Tuple[Any, Any, Any]:
    """Map a stdio mode onto (stdin, stdout, stderr) for subprocess."""
    if stdio == "inherit":
        return None, None, None
    if stdio == "pipe":
        return subprocess.DEVNULL, subprocess.PIPE, subprocess.PIPE
    if stdio == "ignore":
        return subprocess.DEVNULL, subprocess.DEVNULL, subprocess.DEVNULL
    if isinstance(stdio, str):
        raise ValueError(f"Unknown stdio mode '{stdio}', expected one of {_STDIO_MODES}")
    return subprocess.DEVNULL, stdio, stdio


def _decode(data: Optional[Union[bytes, str]]) -> str:
    if data is None:
        return ""
    if isinstance(data, bytes):
        return data.decode("utf-8", errors="replace")
    return data


class CommandExecutor:
    """Runs commands with a default working directory and environment."""

    def __init__(self, cwd: Optional[str] = None, env: Optional[Mapping[str, str]] = None):
        self.cwd = cwd
        self.env: Dict[str, str] = dict(env or {})

    def _build_env(self, env: Optional[Mapping[str, str]]) -> Dict[str, str]:
        merged = os.environ.copy()
        merged.update(self.env)
        if env:
            merged.update(env)
        return merged

    def _trace(self, event: str, command: List[str], cwd: Optional[str], **fields: Any) -> None:
        if is_debug_enabled(logger):
            logger.debug(
                "Command %s",
                event,
                extra=extra_context(
                    event=f"command_{event}",
                    component="executor",
                    target=" ".join(command),
                    cwd=cwd,
                    **fields,
                ),
            )

    def execute_command_sync(
        self,
        command: str,
        args: Sequence[str] = (),
        cwd: Optional[str] = None,
        stdio: Stdio = "pipe",
        env: Optional[Mapping[str, str]] = None,
    ) -> str:
        """Run ``command args`` and block until it exits.

        Returns:
            Stripped stdout when ``stdio`` is "pipe", otherwise an empty string.

        Raises:
            ExternalToolError: If the process exits non-zero or cannot start.
        """
        argv = [command, *args]
        workdir = cwd or self.cwd
        stdin, stdout, stderr = _resolve_stdio(stdio)
        self._trace("start", argv, workdir)
        with Timer() as t:
            try:
                result = subprocess.run(  # noqa: S603
                    argv,
                    cwd=workdir,
                    env=self._build_env(env),
                    stdin=stdin,
                    stdout=stdout,
                    stderr=stderr,
                    check=False,
                )
            except OSError as exc:
                logger.error("Unable to run %s: %s", command, exc)
                raise ExternalToolError(argv, _MISSING_BINARY_EXIT_CODE, stderr=str(exc)) from exc
        return self._finish(argv, workdir, result.returncode, result.stdout, result.stderr, t)

    async def execute_command(
        self,
        command: str,
        args: Sequence[str] = (),
        cwd: Optional[str] = None,
        stdio: Stdio = "pipe",
        env: Optional[Mapping[str, str]] = None,
    ) -> str:
        """Async variant of :meth:`execute_command_sync`."""
        argv = [command, *args]
        workdir = cwd or self.cwd
        stdin, stdout, stderr = _resolve_stdio(stdio)
        self._trace("start", argv, workdir)
        with Timer() as t:
            try:
                proc = await asyncio.create_subprocess_exec(
                    *argv,
                    cwd=workdir,
                    env=self._build_env(env),
                    stdin=stdin,
                    stdout=stdout,
                    stderr=stderr,
                )
            except OSError as exc:
                logger.error("Unable to run %s: %s", command, exc)
                raise ExternalToolError(argv, _MISSING_BINARY_EXIT_CODE, stderr=str(exc)) from exc
            out, err = await proc.communicate()
        return self._finish(argv, workdir, proc.returncode, out, err, t)

    def _finish(
        self,
        argv: List[str],
        workdir: Optional[str],
        returncode: Optional[int],
        out: Optional[Union[bytes, str]],
        err: Optional[Union[bytes, str]],
        timer: Timer,
    ) -> str:
        stdout_text = _decode(out)
        stderr_text = _decode(err)
        exit_code = returncode if returncode is not None else 1
        self._trace("finish", argv, workdir, exit_code=exit_code, duration_ms=timer.duration_ms())
        if exit_code != 0:
            raise ExternalToolError(argv, exit_code, stdout=stdout_text, stderr=stderr_text)
        return stdout_text.strip()
