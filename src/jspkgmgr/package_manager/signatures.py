"""Error-signature tables used to summarize failed package manager runs."""

from __future__ import annotations

import copy
import functools
import logging
import re
from dataclasses import dataclass, field
from importlib import resources
from typing import Any, Dict, List, Mapping, Optional, Pattern

import yaml

from jspkgmgr.errors import ConfigError

logger = logging.getLogger(__name__)

_DEFAULTS_RESOURCE = "error_signatures.yaml"


@dataclass
class ErrorSignatureTable:
    """Regexes and code descriptions for one tool."""

    label: str
    patterns: List[Pattern[str]] = field(default_factory=list)
    codes: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, tool: str, data: Mapping[str, Any]) -> "ErrorSignatureTable":
        """Build a table from its YAML form.

        Raises:
            ConfigError: If a pattern is not a valid regex.
        """
        compiled = []
        for raw in data.get("patterns") or []:
            try:
                compiled.append(re.compile(str(raw), re.MULTILINE))
            except re.error as exc:
                raise ConfigError(f"Invalid error pattern for {tool}: {raw!r} ({exc})") from exc
        codes = {str(k): str(v) for k, v in (data.get("codes") or {}).items()}
        return cls(
            label=str(data.get("label") or f"{tool.upper()} error"),
            patterns=compiled,
            codes=codes,
        )

    def summarize(self, logs: Optional[str]) -> str:
        """Return a short summary of the first recognized failure, or ``""``."""
        if not logs or not isinstance(logs, str):
            return ""
        for pattern in self.patterns:
            match = pattern.search(logs)
            if not match:
                continue
            groups = match.groupdict()
            code = (groups.get("code") or "").strip()
            detail = (groups.get("detail") or "").strip()
            message = self.label
            if code:
                message = f"{message} {code}"
                description = self.codes.get(code)
                if description:
                    message = f"{message} - {description}"
            if detail:
                message = f"{message}: {detail}"
            return message.strip()
        return ""


def _merge_tool_data(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    if "label" in override:
        merged["label"] = override["label"]
    if "patterns" in override:
        merged["patterns"] = list(override.get("patterns") or [])
    if "codes" in override:
        codes = dict(base.get("codes") or {})
        codes.update(override.get("codes") or {})
        merged["codes"] = codes
    return merged


@functools.lru_cache(maxsize=1)
def _read_defaults() -> Dict[str, Any]:
    text = resources.files(__package__).joinpath(_DEFAULTS_RESOURCE).read_text(encoding="utf-8")
    return yaml.safe_load(text) or {}


def load_default_signatures() -> Dict[str, Any]:
    """Read the packaged signature data as plain mappings."""
    return copy.deepcopy(_read_defaults())


def load_signature_tables(
    overrides: Optional[Mapping[str, Mapping[str, Any]]] = None,
) -> Dict[str, ErrorSignatureTable]:
    """Build every tool's table from the packaged defaults plus ``overrides``.

    Override entries replace ``label`` and ``patterns`` and extend ``codes``.
    """
    data = load_default_signatures()
    for tool, tool_override in (overrides or {}).items():
        if not isinstance(tool_override, Mapping):
            raise ConfigError(f"error_signatures.{tool} must be a mapping")
        data[tool] = _merge_tool_data(data.get(tool) or {}, tool_override)
    tables = {tool: ErrorSignatureTable.from_mapping(tool, spec or {}) for tool, spec in data.items()}
    logger.debug("Loaded error signatures for: %s", ", ".join(sorted(tables)))
    return tables
