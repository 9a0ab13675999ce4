"""Data models shared by every package manager backend."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Tuple

# package.json is handled as an opaque JSON object.
PackageJson = Dict[str, Any]


class Capability(Enum):
    """Optional features a backend may or may not implement."""
    VERSION_LOOKUP = "version_lookup"
    DEPENDENCY_LISTING = "dependency_listing"
    ERROR_PARSING = "error_parsing"


def get_package_details(spec: str) -> Tuple[str, str]:
    """Split ``name@version`` into its parts, keeping scoped names intact.

    >>> get_package_details("@storybook/react@^7.0.0")
    ('@storybook/react', '^7.0.0')
    >>> get_package_details("left-pad")
    ('left-pad', '')
    """
    spec = spec.strip()
    idx = spec.rfind("@")
    if idx <= 0:
        return spec, ""
    return spec[:idx], spec[idx + 1:]


@dataclass(frozen=True)
class PackageIdentity:
    """A package name plus the version specifier it was requested with."""
    name: str
    version: str = ""

    @classmethod
    def parse(cls, spec: str) -> "PackageIdentity":
        name, version = get_package_details(spec)
        return cls(name=name, version=version)

    def __str__(self) -> str:
        return f"{self.name}@{self.version}" if self.version else self.name


@dataclass
class DependencyNode:
    """One resolved package occurrence inside a dependency tree."""
    identity: PackageIdentity
    resolved_version: str
    location: str = ""
    children: List["DependencyNode"] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.identity.name

    @property
    def version(self) -> str:
        return self.resolved_version

    def to_dict(self) -> Dict[str, Any]:
        return {"version": self.resolved_version, "location": self.location}


@dataclass
class InstallationMetadata:
    """Normalized result of a dependency introspection query."""
    dependencies: Dict[str, List[DependencyNode]] = field(default_factory=dict)
    duplicated_dependencies: Dict[str, List[str]] = field(default_factory=dict)
    info_command: str = ""
    dedupe_command: str = ""

    def versions_of(self, name: str) -> List[str]:
        return [node.version for node in self.dependencies.get(name, [])]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dependencies": {
                name: [node.to_dict() for node in nodes]
                for name, nodes in self.dependencies.items()
            },
            "duplicatedDependencies": {
                name: list(versions) for name, versions in self.duplicated_dependencies.items()
            },
            "infoCommand": self.info_command,
            "dedupeCommand": self.dedupe_command,
        }
