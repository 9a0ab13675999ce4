"""Yarn classic (v1) backend.

Yarn 1 prints newline-delimited JSON events with ``--json``; the payload we
want is the ``inspect`` event for ``yarn info`` and the ``tree`` event for
``yarn list``.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Iterator, List, Sequence, Tuple

import semantic_version

from jspkgmgr.constants import PackageManagers
from jspkgmgr.errors import VersionLookupError

from .base import PackageManagerBackend, Versions
from .models import Capability, DependencyNode, PackageIdentity, get_package_details


def iter_json_events(raw: str) -> Iterator[Dict[str, Any]]:
    """Yield every JSON object line of ``raw``, skipping anything else."""
    for line in (raw or "").splitlines():
        line = line.strip()
        if not line.startswith("{"):
            continue
        try:
            event = json.loads(line)
        except ValueError:
            continue
        if isinstance(event, dict):
            yield event


def _is_exact_version(version: str) -> bool:
    try:
        semantic_version.Version(version)
    except ValueError:
        return False
    return True


class Yarn1Backend(PackageManagerBackend):
    """Yarn 1.x."""

    name = PackageManagers.YARN1.value
    binary = "yarn"
    capabilities = frozenset({Capability.VERSION_LOOKUP, Capability.DEPENDENCY_LISTING})
    resolutions_field = "resolutions"
    remote_run_command = "npx"
    info_command = "yarn why"
    dedupe_command = "npx yarn-deduplicate"

    def init_args(self) -> List[str]:
        return ["init", "-y"]

    def run_command(self, script: str) -> str:
        return f"yarn {script}"

    def add_args(self, dependencies: Sequence[str], dev: bool = False) -> List[str]:
        args = ["add", "--ignore-workspace-root-check"]
        if dev:
            args.append("-D")
        return [*args, *dependencies]

    def install_args(self) -> List[str]:
        return ["install", "--ignore-workspace-root-check"]

    def list_args(self, patterns: Sequence[str]) -> List[str]:
        # --pattern is single-valued, so every pattern goes into one value.
        return ["list", "--pattern", " ".join(patterns), "--recursive", "--json"]

    def info_args(self, package_name: str, fetch_all: bool) -> List[str]:
        return ["info", package_name, "versions" if fetch_all else "version", "--json"]

    def parse_versions_output(self, package_name: str, raw: str, fetch_all: bool) -> Versions:
        for event in iter_json_events(raw):
            event_type = event.get("type")
            if event_type == "inspect":
                return self._coerce_versions(package_name, event.get("data"), fetch_all)
            if event_type == "error":
                raise VersionLookupError(package_name, self.name, str(event.get("data") or ""))
        raise VersionLookupError(package_name, self.name, "unparsable output")

    def parse_dependency_tree(self, raw: str) -> List[DependencyNode]:
        for event in iter_json_events(raw):
            if event.get("type") != "tree":
                continue
            data = event.get("data") or {}
            return self._build_nodes(data.get("trees") or [])
        raise ValueError("yarn list output has no tree event")

    @staticmethod
    def _build_nodes(trees: List[Any]) -> List[DependencyNode]:
        roots: List[DependencyNode] = []
        stack: List[Tuple[List[Any], List[DependencyNode]]] = [(trees, roots)]
        while stack:
            entries, sink = stack.pop()
            for entry in entries:
                # Shadow entries are hoisted duplicates named by the requested range.
                if not isinstance(entry, dict) or entry.get("shadow"):
                    continue
                name, version = get_package_details(str(entry.get("name") or ""))
                if not name or not _is_exact_version(version):
                    continue
                node = DependencyNode(
                    identity=PackageIdentity(name=name, version=version),
                    resolved_version=version,
                )
                sink.append(node)
                children = entry.get("children")
                if isinstance(children, list) and children:
                    stack.append((children, node.children))
        return roots
