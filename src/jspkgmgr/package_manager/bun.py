"""Bun backend.

``bun pm ls`` only prints the Yarn 1 text format and bun has no registry
info command, so dependency listing and version lookup are reported as
unsupported: the facade returns ``None`` and ``""``/``[""]`` for them.
"""

from __future__ import annotations

from typing import List, Sequence

from jspkgmgr.constants import PackageManagers

from .base import PackageManagerBackend


class BunBackend(PackageManagerBackend):
    """Bun's built-in package manager."""

    name = PackageManagers.BUN.value
    binary = "bun"
    capabilities = frozenset()
    resolutions_field = "overrides"
    remote_run_command = "bunx"
    info_command = "bun pm ls"
    dedupe_command = "bun install"

    def add_args(self, dependencies: Sequence[str], dev: bool = False) -> List[str]:
        args = ["add"]
        if dev:
            args.append("--dev")
        return [*args, *dependencies]
