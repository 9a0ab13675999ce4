"""Flatten dependency trees into :class:`InstallationMetadata`.

Each backend turns its tool's listing output into ``DependencyNode`` roots;
this module does the rest: name matching against glob patterns, collection
of distinct versions per name and duplicate detection.
"""

from __future__ import annotations

import re
from collections import deque
from typing import Any, Deque, Dict, Iterable, List, Mapping, Pattern, Sequence, Tuple

from .models import DependencyNode, InstallationMetadata, PackageIdentity


def compile_pattern(pattern: str) -> Pattern[str]:
    """Turn a glob such as ``@storybook/*`` into an anchored regex.

    Only ``*`` is special; every other character matches literally.
    """
    body = ".*".join(re.escape(part) for part in pattern.split("*"))
    return re.compile(f"^{body}$")


def compile_patterns(patterns: Iterable[str]) -> List[Pattern[str]]:
    return [compile_pattern(p) for p in patterns if p]


def matches_any(name: str, compiled: Sequence[Pattern[str]]) -> bool:
    if not name:
        return False
    return any(regex.match(name) for regex in compiled)


def nodes_from_nested(entries: Any, location_key: str = "resolved") -> List[DependencyNode]:
    """Build nodes from the ``{name: {version, dependencies: {...}}}`` shape.

    Used for npm and pnpm JSON listings. Entries without a version (missing
    or unmet dependencies) are skipped together with their subtree.
    """
    roots: List[DependencyNode] = []
    stack: List[Tuple[Any, List[DependencyNode]]] = [(entries, roots)]
    while stack:
        mapping, sink = stack.pop()
        if not isinstance(mapping, Mapping):
            continue
        for name, info in mapping.items():
            if not isinstance(info, Mapping):
                continue
            version = str(info.get("version") or "")
            if not name or not version:
                continue
            node = DependencyNode(
                identity=PackageIdentity(name=name, version=version),
                resolved_version=version,
                location=str(info.get(location_key) or ""),
            )
            sink.append(node)
            if info.get("dependencies"):
                stack.append((info["dependencies"], node.children))
    return roots


def map_dependencies(
    roots: Iterable[DependencyNode],
    patterns: Sequence[str],
    info_command: str = "",
    dedupe_command: str = "",
) -> InstallationMetadata:
    """Collect every node matching ``patterns`` from the trees under ``roots``.

    The walk is breadth-first over an explicit queue, so top-level
    dependencies are recorded before nested ones and deep trees do not
    consume Python stack frames. Non-matching nodes are still descended into.
    """
    compiled = compile_patterns(patterns)
    result = InstallationMetadata(info_command=info_command, dedupe_command=dedupe_command)
    seen_versions: Dict[str, List[str]] = {}

    queue: Deque[DependencyNode] = deque(roots)
    while queue:
        node = queue.popleft()
        queue.extend(node.children)

        name = node.name
        if not matches_any(name, compiled):
            continue

        versions = seen_versions.setdefault(name, [])
        if node.version in versions:
            continue
        versions.append(node.version)
        result.dependencies.setdefault(name, []).append(node)
        if len(versions) > 1:
            result.duplicated_dependencies[name] = list(versions)

    return result
