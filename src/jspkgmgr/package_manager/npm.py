"""npm backend."""

from __future__ import annotations

import json
from typing import List, Sequence

from jspkgmgr.constants import Constants, PackageManagers
from jspkgmgr.errors import VersionLookupError

from .base import PackageManagerBackend, Versions
from .models import Capability, DependencyNode
from .tree import nodes_from_nested


class NpmBackend(PackageManagerBackend):
    """npm: nested JSON from ``npm ls``, ``overrides`` for pinning."""

    name = PackageManagers.NPM.value
    binary = "npm"
    capabilities = frozenset({Capability.VERSION_LOOKUP, Capability.DEPENDENCY_LISTING})
    resolutions_field = "overrides"
    remote_run_command = "npx"
    info_command = "npm ls --depth=1"
    dedupe_command = "npm dedupe"

    def init_args(self) -> List[str]:
        return ["init", "-y"]

    def add_args(self, dependencies: Sequence[str], dev: bool = False) -> List[str]:
        args = ["install"]
        if dev:
            args.append("-D")
        return [*args, *dependencies]

    def remove_args(self, dependencies: Sequence[str]) -> List[str]:
        return ["uninstall", *dependencies]

    def list_args(self, patterns: Sequence[str]) -> List[str]:
        # npm ls filters by exact name only, so list everything and match globs locally.
        return ["ls", "--json", f"--depth={Constants.LIST_DEPTH}"]

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
        if not isinstance(parsed, dict):
            raise ValueError("npm ls output is not a JSON object")
        return nodes_from_nested(parsed.get("dependencies") or {}, location_key="resolved")
