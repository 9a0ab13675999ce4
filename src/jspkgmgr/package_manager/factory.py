"""Select the package manager backend for a project."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Dict, Optional, Type

from jspkgmgr.common.executor import CommandExecutor
from jspkgmgr.config import Settings
from jspkgmgr.constants import Constants, Lockfiles, PackageManagers
from jspkgmgr.errors import ExternalToolError, PackageManagerNotFoundError

from .base import PackageManagerBackend
from .bun import BunBackend
from .facade import JsPackageManager
from .npm import NpmBackend
from .pnpm import PnpmBackend
from .signatures import load_signature_tables
from .yarn1 import Yarn1Backend
from .yarn2 import Yarn2Backend

logger = logging.getLogger(__name__)

BACKENDS: Dict[str, Type[PackageManagerBackend]] = {
    PackageManagers.NPM.value: NpmBackend,
    PackageManagers.YARN1.value: Yarn1Backend,
    PackageManagers.YARN2.value: Yarn2Backend,
    PackageManagers.PNPM.value: PnpmBackend,
    PackageManagers.BUN.value: BunBackend,
}

# Checked in this order inside each directory while walking upwards.
_LOCKFILE_PRIORITY = [
    Lockfiles.YARN.value,
    Lockfiles.PNPM.value,
    Lockfiles.NPM.value,
    Lockfiles.BUN.value,
    Lockfiles.BUN_TEXT.value,
]


def find_closest_lockfile(cwd: str) -> Optional[str]:
    """Name of the nearest lockfile from ``cwd`` upwards, if any."""
    start = Path(cwd).resolve()
    for directory in (start, *start.parents):
        for name in _LOCKFILE_PRIORITY:
            if (directory / name).is_file():
                logger.debug("Closest lockfile: %s", directory / name)
                return name
    return None


def has_command(binary: str) -> bool:
    return shutil.which(binary) is not None


def get_yarn_version(executor: CommandExecutor, cwd: str) -> Optional[int]:
    """Major version of the yarn selected for ``cwd``, or ``None`` without yarn."""
    try:
        output = executor.execute_command_sync("yarn", ["--version"], cwd=cwd)
    except ExternalToolError:
        return None
    try:
        return int(output.strip().split(".")[0])
    except ValueError:
        logger.debug("Unexpected yarn --version output: %r", output)
        return None


def create_backend(name: str, settings: Optional[Settings] = None) -> PackageManagerBackend:
    """Instantiate the backend ``name`` with configured error signatures.

    Raises:
        PackageManagerNotFoundError: If ``name`` is not a known backend.
    """
    backend_cls = BACKENDS.get(name)
    if backend_cls is None:
        raise PackageManagerNotFoundError(
            f"Unknown package manager '{name}', expected one of "
            + ", ".join(Constants.SUPPORTED_MANAGERS)
        )
    settings = settings or Settings()
    tables = load_signature_tables(settings.error_signatures)
    return backend_cls(signatures=tables[name])


def detect_package_manager(cwd: str, executor: Optional[CommandExecutor] = None) -> str:
    """Pick a backend name from the closest lockfile and installed tools.

    Raises:
        PackageManagerNotFoundError: If no supported tool is usable.
    """
    executor = executor or CommandExecutor(cwd=cwd)
    lockfile = find_closest_lockfile(cwd)
    has_npm = has_command("npm")
    has_pnpm = has_command("pnpm")
    has_bun = has_command("bun")
    yarn_version = get_yarn_version(executor, cwd) if has_command("yarn") else None

    if yarn_version and (lockfile == Lockfiles.YARN.value or (not has_npm and not has_pnpm)):
        return PackageManagers.YARN1.value if yarn_version == 1 else PackageManagers.YARN2.value
    if has_pnpm and lockfile == Lockfiles.PNPM.value:
        return PackageManagers.PNPM.value
    if has_bun and lockfile in (Lockfiles.BUN.value, Lockfiles.BUN_TEXT.value):
        return PackageManagers.BUN.value
    if has_npm or lockfile == Lockfiles.NPM.value:
        return PackageManagers.NPM.value
    raise PackageManagerNotFoundError(
        "Unable to find a usable package manager within npm, pnpm, yarn and bun"
    )


def get_package_manager(
    force: Optional[str] = None,
    cwd: Optional[str] = None,
    settings: Optional[Settings] = None,
    executor: Optional[CommandExecutor] = None,
) -> JsPackageManager:
    """Build a :class:`JsPackageManager` for ``cwd``.

    ``force`` (or ``settings.package_manager``) skips detection.
    """
    settings = settings or Settings()
    cwd = os.path.abspath(cwd or os.getcwd())
    executor = executor or CommandExecutor(cwd=cwd)
    name = force or settings.package_manager or detect_package_manager(cwd, executor)
    logger.info("Using package manager: %s", name)
    return JsPackageManager(create_backend(name, settings), cwd=cwd, executor=executor, settings=settings)
