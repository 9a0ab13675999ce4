"""pnpm backend."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Sequence

from jspkgmgr.constants import Constants, PackageManagers
from jspkgmgr.errors import VersionLookupError

from .base import PackageManagerBackend, Versions
from .models import Capability, DependencyNode
from .tree import nodes_from_nested


class PnpmBackend(PackageManagerBackend):
    """pnpm: ``pnpm list --json`` returns one entry per workspace project."""

    name = PackageManagers.PNPM.value
    binary = "pnpm"
    capabilities = frozenset({Capability.VERSION_LOOKUP, Capability.DEPENDENCY_LISTING})
    resolutions_field = "overrides"
    remote_run_command = "pnpm dlx"
    info_command = "pnpm list --depth=1"
    dedupe_command = "pnpm dedupe"

    def add_args(self, dependencies: Sequence[str], dev: bool = False) -> List[str]:
        args = ["add"]
        if dev:
            args.append("-D")
        return [*args, *dependencies]

    def list_args(self, patterns: Sequence[str]) -> List[str]:
        return ["list", *patterns, "--json", f"--depth={Constants.LIST_DEPTH}"]

    def info_args(self, package_name: str, fetch_all: bool) -> List[str]:
        return ["info", package_name, "versions" if fetch_all else "version", "--json"]

    def parse_versions_output(self, package_name: str, raw: str, fetch_all: bool) -> Versions:
        parsed = self._load_json(package_name, raw)
        if isinstance(parsed, dict) and parsed.get("error"):
            error = parsed["error"]
            summary = error.get("summary") if isinstance(error, dict) else str(error)
            raise VersionLookupError(package_name, self.name, summary or "")
        return self._coerce_versions(package_name, parsed, fetch_all)

    def parse_dependency_tree(self, raw: str) -> List[DependencyNode]:
        parsed = json.loads(raw)
        if isinstance(parsed, dict):
            parsed = [parsed]
        if not isinstance(parsed, list):
            raise ValueError("pnpm list output is not a JSON array")

        roots: List[DependencyNode] = []
        for project in parsed:
            if not isinstance(project, dict):
                continue
            merged: Dict[str, Any] = {}
            for section in ("devDependencies", "dependencies", "peerDependencies"):
                merged.update(project.get(section) or {})
            roots.extend(nodes_from_nested(merged, location_key="path"))
        return roots
