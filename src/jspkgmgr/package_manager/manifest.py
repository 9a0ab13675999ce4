"""package.json reading and writing."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from jspkgmgr.constants import Constants
from jspkgmgr.errors import MalformedManifestError

from .models import PackageJson

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


def read_manifest(path: PathLike) -> PackageJson:
    """Parse the package.json at ``path``.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        MalformedManifestError: If the file is not a JSON object.
    """
    with open(path, "r", encoding="utf-8") as f:
        content = f.read()
    try:
        data = json.loads(content)
    except ValueError as exc:
        raise MalformedManifestError(str(path), str(exc)) from exc
    if not isinstance(data, dict):
        raise MalformedManifestError(str(path), "top-level value is not an object")
    return data


def write_manifest(path: PathLike, package_json: Mapping[str, Any]) -> None:
    """Write ``package_json`` with two-space indentation.

    Empty dependency sections are left out of the written file.
    """
    to_write = dict(package_json)
    for section in Constants.DEPENDENCY_FIELDS:
        if section in to_write and not to_write[section]:
            del to_write[section]
    with open(path, "w", encoding="utf-8") as f:
        f.write(json.dumps(to_write, indent=2) + "\n")
    logger.debug("Wrote %s", path)


def find_installed_manifest(package_name: str, base_path: PathLike) -> Optional[PackageJson]:
    """Look for ``node_modules/<package_name>/package.json`` from ``base_path`` upwards.

    Returns ``None`` when no directory up to the filesystem root has one.
    """
    start = Path(base_path).resolve()
    for directory in (start, *start.parents):
        candidate = directory / Constants.NODE_MODULES_DIR / package_name / Constants.PACKAGE_JSON_FILE
        if candidate.is_file():
            logger.debug("Found manifest for %s at %s", package_name, candidate)
            return read_manifest(candidate)
    return None
