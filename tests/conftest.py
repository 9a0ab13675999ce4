"""Shared fixtures: a scripted stand-in for the command executor."""

import json
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import pytest

from jspkgmgr.common.executor import CommandExecutor
from jspkgmgr.errors import ExternalToolError

Response = Union[str, ExternalToolError, Callable[..., str]]


class FakeExecutor(CommandExecutor):
    """Records every call and answers from a table keyed by argument prefix."""

    def __init__(self):
        super().__init__()
        self.calls: List[Dict[str, Any]] = []
        self._responses: List[Tuple[Tuple[str, ...], Response]] = []

    def respond(self, args_prefix, response: Response) -> None:
        self._responses.append((tuple(args_prefix), response))

    def fail(self, args_prefix, exit_code: int = 1, output: str = "", stdout: str = "") -> None:
        """Make matching calls write ``output`` to their log sink and fail."""

        def _failing(command, args, stdio, **_):
            if output and hasattr(stdio, "write"):
                stdio.write(output)
                stdio.flush()
            raise ExternalToolError([command, *args], exit_code, stdout=stdout)

        self.respond(args_prefix, _failing)

    def _answer(self, command, args, cwd, stdio, env) -> str:
        self.calls.append(
            {"command": command, "args": list(args), "cwd": cwd, "stdio": stdio, "env": env}
        )
        for prefix, response in self._responses:
            if tuple(args[: len(prefix)]) == prefix:
                if isinstance(response, ExternalToolError):
                    raise response
                if callable(response):
                    return response(command=command, args=list(args), stdio=stdio, cwd=cwd, env=env)
                return response
        return ""

    def execute_command_sync(self, command, args=(), cwd=None, stdio="pipe", env=None) -> str:
        return self._answer(command, list(args), cwd, stdio, env)

    async def execute_command(self, command, args=(), cwd=None, stdio="pipe", env=None) -> str:
        return self._answer(command, list(args), cwd, stdio, env)


@pytest.fixture
def fake_executor():
    return FakeExecutor()


@pytest.fixture(autouse=True)
def _no_ci(monkeypatch):
    """Tests assume a local terminal unless they set CI themselves."""
    monkeypatch.delenv("CI", raising=False)
    monkeypatch.delenv("JSPKGMGR_PACKAGE_MANAGER", raising=False)
    monkeypatch.delenv("JSPKGMGR_CONFIG", raising=False)


def write_json(path, data) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2))


def install_fake_package(root, name: str, version: str) -> None:
    """Create node_modules/<name>/package.json under ``root``."""
    write_json(root / "node_modules" / name / "package.json", {"name": name, "version": version})


@pytest.fixture
def make_package():
    return install_fake_package
