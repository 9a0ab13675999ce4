"""Abstract base class for package manager backends."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, FrozenSet, List, Mapping, Optional, Sequence, Union

from jspkgmgr.errors import VersionLookupError

from .models import Capability, DependencyNode, PackageJson
from .signatures import ErrorSignatureTable, load_signature_tables

logger = logging.getLogger(__name__)

Versions = Union[str, List[str]]


class PackageManagerBackend(ABC):
    """Tool-specific primitives for one JavaScript package manager.

    A backend only knows how to talk to its tool: which arguments to pass and
    how to read the output. Process execution, log handling and tree
    flattening live in :class:`~jspkgmgr.package_manager.facade.JsPackageManager`.
    """

    name: str = ""
    binary: str = ""
    capabilities: FrozenSet[Capability] = frozenset()
    # Field of package.json that pins transitive versions.
    resolutions_field: str = "overrides"
    remote_run_command: str = "npx"
    info_command: str = ""
    dedupe_command: str = ""

    def __init__(self, signatures: Optional[ErrorSignatureTable] = None):
        if signatures is None:
            signatures = load_signature_tables()[self.name]
        self.signatures = signatures

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"

    def supports(self, capability: Capability) -> bool:
        """Whether this backend implements ``capability``.

        Error parsing is available as soon as the signature table has a
        pattern, so it can be enabled from configuration.
        """
        if capability is Capability.ERROR_PARSING:
            return bool(self.signatures.patterns)
        return capability in self.capabilities

    # ---------- argument construction ----------

    def init_args(self) -> List[str]:
        return ["init"]

    def run_command(self, script: str) -> str:
        return f"{self.binary} run {script}"

    def run_args(self, script: str, args: Sequence[str] = ()) -> List[str]:
        return ["run", script, *args]

    @abstractmethod
    def add_args(self, dependencies: Sequence[str], dev: bool = False) -> List[str]:
        """Arguments adding ``dependencies`` to the manifest and installing them."""

    def remove_args(self, dependencies: Sequence[str]) -> List[str]:
        return ["remove", *dependencies]

    def install_args(self) -> List[str]:
        return ["install"]

    def list_args(self, patterns: Sequence[str]) -> List[str]:
        """Arguments for the dependency listing command."""
        raise NotImplementedError(f"{self.name} cannot list installed dependencies")

    def info_args(self, package_name: str, fetch_all: bool) -> List[str]:
        """Arguments for the registry version query."""
        raise NotImplementedError(f"{self.name} cannot query package versions")

    # ---------- output parsing ----------

    def parse_versions_output(self, package_name: str, raw: str, fetch_all: bool) -> Versions:
        """Read the version query output.

        Raises:
            VersionLookupError: The tool reported an error or the output is unusable.
        """
        raise NotImplementedError(f"{self.name} cannot query package versions")

    def parse_dependency_tree(self, raw: str) -> List[DependencyNode]:
        """Turn listing output into dependency tree roots.

        Raises:
            ValueError: The output does not have the expected shape.
        """
        raise NotImplementedError(f"{self.name} cannot list installed dependencies")

    def parse_error_from_logs(self, logs: str) -> str:
        """Short summary of the failure recorded in ``logs``, or ``""``."""
        try:
            return self.signatures.summarize(logs)
        except Exception as exc:  # pylint: disable=broad-except
            logger.debug("Error signature matching failed for %s: %s", self.name, exc)
            return ""

    def get_resolutions(
        self, package_json: Mapping[str, Any], versions: Mapping[str, str]
    ) -> PackageJson:
        """Override field merged with ``versions``; caller versions win."""
        existing = package_json.get(self.resolutions_field) or {}
        return {self.resolutions_field: {**existing, **versions}}

    # ---------- helpers for subclasses ----------

    def _load_json(self, package_name: str, raw: str) -> Any:
        try:
            return json.loads(raw)
        except (TypeError, ValueError) as exc:
            raise VersionLookupError(package_name, self.name, "unparsable output") from exc

    def _coerce_versions(self, package_name: str, value: Any, fetch_all: bool) -> Versions:
        if fetch_all:
            if isinstance(value, str):
                return [value]
            if isinstance(value, list) and all(isinstance(v, str) for v in value):
                return list(value)
        elif isinstance(value, str):
            return value
        raise VersionLookupError(package_name, self.name, "unexpected output shape")
