"""Yarn Berry (v2 and later) backend."""

from __future__ import annotations

import re
from typing import List, Optional, Sequence, Tuple

from jspkgmgr.constants import PackageManagers
from jspkgmgr.errors import VersionLookupError

from .base import PackageManagerBackend, Versions
from .models import Capability, DependencyNode, PackageIdentity

# "react@npm:17.0.2", "@scope/pkg@npm:1.0.0", "resolve@patch:resolve@npm%3A1.22.1#..."
_LOCATOR_RE = re.compile(r"^(?P<name>@?[^@\s]+)@(?P<reference>\S+)$")
_PATCHED_NPM_RE = re.compile(r"npm%3A(?P<version>[^#&]+)")
_TREE_GLYPHS = "├└│─ \t\"'"


def parse_locator(line: str) -> Optional[Tuple[str, str]]:
    """Split a Yarn locator into ``(name, version)``.

    The ``npm:`` protocol prefix is dropped; patched packages report the
    version they patch. Returns ``None`` for lines that are not locators.
    """
    match = _LOCATOR_RE.match(line.strip(_TREE_GLYPHS))
    if not match:
        return None
    name, reference = match.group("name"), match.group("reference")
    if reference.startswith("npm:"):
        return name, reference[len("npm:"):]
    if reference.startswith("patch:"):
        patched = _PATCHED_NPM_RE.search(reference)
        if patched:
            return name, patched.group("version")
    return name, reference


class Yarn2Backend(PackageManagerBackend):
    """Yarn 2+: plain-text listing, ``resolutions`` for pinning."""

    name = PackageManagers.YARN2.value
    binary = "yarn"
    capabilities = frozenset({Capability.VERSION_LOOKUP, Capability.DEPENDENCY_LISTING})
    resolutions_field = "resolutions"
    remote_run_command = "yarn dlx"
    info_command = "yarn why"
    dedupe_command = "yarn dedupe"

    def run_command(self, script: str) -> str:
        return f"yarn {script}"

    def add_args(self, dependencies: Sequence[str], dev: bool = False) -> List[str]:
        args = ["add"]
        if dev:
            args.append("-D")
        return [*args, *dependencies]

    def list_args(self, patterns: Sequence[str]) -> List[str]:
        return ["info", "--name-only", "--recursive", *patterns]

    def info_args(self, package_name: str, fetch_all: bool) -> List[str]:
        field = "versions" if fetch_all else "version"
        return ["npm", "info", package_name, "--fields", field, "--json"]

    def parse_versions_output(self, package_name: str, raw: str, fetch_all: bool) -> Versions:
        parsed = self._load_json(package_name, raw)
        if not isinstance(parsed, dict):
            raise VersionLookupError(package_name, self.name, "unexpected output shape")
        return self._coerce_versions(
            package_name, parsed.get("versions" if fetch_all else "version"), fetch_all
        )

    def parse_dependency_tree(self, raw: str) -> List[DependencyNode]:
        roots: List[DependencyNode] = []
        for line in (raw or "").splitlines():
            locator = parse_locator(line)
            if locator is None:
                continue
            name, version = locator
            roots.append(
                DependencyNode(
                    identity=PackageIdentity(name=name, version=version),
                    resolved_version=version,
                )
            )
        return roots
