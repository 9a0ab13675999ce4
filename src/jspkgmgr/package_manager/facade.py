"""Tool-agnostic entry point for JavaScript package management."""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Iterable, List, Mapping, Optional, Sequence, Union

from jspkgmgr.common.executor import CommandExecutor, Stdio
from jspkgmgr.common.log_capture import capture_log
from jspkgmgr.common.logging_utils import extra_context, is_debug_enabled
from jspkgmgr.config import Settings
from jspkgmgr.constants import Constants
from jspkgmgr.errors import ExternalToolError, VersionLookupError

from .base import PackageManagerBackend, Versions
from .manifest import find_installed_manifest, read_manifest, write_manifest
from .models import (
    Capability,
    InstallationMetadata,
    PackageIdentity,
    PackageJson,
    get_package_details,
)
from .tree import map_dependencies
from .versions import max_satisfying

logger = logging.getLogger(__name__)

DependencySpec = Union[str, PackageIdentity]


class JsPackageManager:
    """Uniform interface over one package manager backend.

    The backend is fixed for the lifetime of the instance. Operations are
    stateless apart from the backend and the working directory; concurrent
    calls that write the same package.json must be serialized by the caller.
    """

    def __init__(
        self,
        backend: PackageManagerBackend,
        cwd: Optional[str] = None,
        executor: Optional[CommandExecutor] = None,
        settings: Optional[Settings] = None,
    ):
        self.backend = backend
        self.cwd = os.path.abspath(cwd or os.getcwd())
        self.settings = settings or Settings()
        self.executor = executor or CommandExecutor(cwd=self.cwd)

    def __repr__(self) -> str:
        return f"JsPackageManager(type={self.type!r}, cwd={self.cwd!r})"

    @property
    def type(self) -> str:
        return self.backend.name

    @property
    def log_path(self) -> str:
        """Where the output of a failed install/remove is kept."""
        return os.path.join(self.cwd, self.settings.log_file_name)

    @property
    def package_json_path(self) -> str:
        return os.path.join(self.cwd, Constants.PACKAGE_JSON_FILE)

    # ---------- commands ----------

    async def init_project(self) -> None:
        """Create a package.json in the working directory."""
        logger.info("Initializing package.json with %s", self.backend.binary)
        await self.executor.execute_command(
            self.backend.binary, self.backend.init_args(), cwd=self.cwd
        )

    def get_run_command(self, script: str) -> str:
        """Shell command a user would type to run ``script``."""
        if not script:
            raise ValueError("script name must not be empty")
        return self.backend.run_command(script)

    def get_remote_run_command(self) -> str:
        return self.backend.remote_run_command

    def run_script_sync(
        self,
        script: str,
        args: Sequence[str] = (),
        cwd: Optional[str] = None,
        stdio: Stdio = "pipe",
    ) -> str:
        """Run a package.json script and return its stdout."""
        return self.executor.execute_command_sync(
            self.backend.binary,
            self.backend.run_args(script, args),
            cwd=cwd or self.cwd,
            stdio=stdio,
        )

    async def run_script(
        self, script: str, args: Sequence[str] = (), cwd: Optional[str] = None
    ) -> str:
        """Async variant of :meth:`run_script_sync`."""
        return await self.executor.execute_command(
            self.backend.binary, self.backend.run_args(script, args), cwd=cwd or self.cwd
        )

    async def install(self, dependencies: Iterable[DependencySpec], as_dev: bool = False) -> None:
        """Add ``dependencies`` to package.json and install them.

        Raises:
            ExternalToolError: With a short summary and the preserved log path.
        """
        deps = [str(dep) for dep in dependencies]
        if not deps:
            return
        logger.info(
            "Adding %s%s with %s", ", ".join(deps), " as dev dependencies" if as_dev else "",
            self.backend.binary,
        )
        await self._run_logged(self.backend.add_args(deps, as_dev), "add")

    async def remove(self, dependencies: Iterable[str]) -> None:
        """Remove ``dependencies`` from package.json and the install tree."""
        deps = [str(dep) for dep in dependencies]
        if not deps:
            return
        logger.info("Removing %s with %s", ", ".join(deps), self.backend.binary)
        await self._run_logged(self.backend.remove_args(deps), "remove")

    async def run_install(self) -> None:
        """Install everything already declared, streaming output to the terminal."""
        logger.info("Installing dependencies with %s", self.backend.binary)
        await self.executor.execute_command(
            self.backend.binary, self.backend.install_args(), cwd=self.cwd, stdio="inherit"
        )

    async def _run_logged(self, args: List[str], action: str) -> None:
        with capture_log(self.log_path) as log:
            stdio: Stdio = "inherit" if self.settings.is_ci() else log.stream
            try:
                await self.executor.execute_command(
                    self.backend.binary, args, cwd=self.cwd, stdio=stdio
                )
            except ExternalToolError as err:
                output = log.read() or err.output
                summary = self.backend.parse_error_from_logs(output) or (
                    f"{self.backend.binary} {action} failed with exit code {err.exit_code}"
                )
                logger.error("%s", summary)
                raise ExternalToolError(
                    err.command,
                    err.exit_code,
                    stdout=output,
                    stderr=err.stderr,
                    summary=summary,
                    log_path=self.log_path,
                ) from err

    # ---------- versions ----------

    async def get_installed_versions(self, package_name: str, fetch_all: bool = False) -> Versions:
        """Latest version of ``package_name``, or every published version.

        Backends without version lookup return ``""`` or ``[""]``.

        Raises:
            VersionLookupError: The tool failed or printed something unusable.
        """
        if not self.backend.supports(Capability.VERSION_LOOKUP):
            logger.debug("%s does not support version lookup", self.backend.name)
            return [""] if fetch_all else ""

        args = self.backend.info_args(package_name, fetch_all)
        try:
            raw = await self.executor.execute_command(self.backend.binary, args, cwd=self.cwd)
        except ExternalToolError as err:
            # npm and pnpm print a JSON error object before exiting non-zero.
            self.backend.parse_versions_output(package_name, err.stdout, fetch_all)
            raise VersionLookupError(
                package_name, self.backend.name, f"exit code {err.exit_code}"
            ) from err
        return self.backend.parse_versions_output(package_name, raw, fetch_all)

    async def latest_version(self, package_name: str, constraint: Optional[str] = None) -> Optional[str]:
        """Latest published version, optionally the highest one satisfying ``constraint``."""
        if not constraint:
            version = await self.get_installed_versions(package_name)
            return version or None
        versions = await self.get_installed_versions(package_name, fetch_all=True)
        return max_satisfying(versions, constraint)

    async def get_version(self, package_name: str, constraint: Optional[str] = None) -> str:
        """Caret range for the latest matching version, e.g. ``^7.6.3``.

        Raises:
            VersionLookupError: No version could be determined.
        """
        latest = await self.latest_version(package_name, constraint)
        if not latest:
            reason = f"no version satisfies {constraint}" if constraint else "no version available"
            raise VersionLookupError(package_name, self.backend.name, reason)
        return f"^{latest}"

    async def get_versioned_packages(self, packages: Iterable[str]) -> List[str]:
        """Pin every bare package name to its latest version."""

        async def _pin(spec: str) -> str:
            name, version = get_package_details(spec)
            if version:
                return f"{name}@{version}"
            return f"{name}@{await self.get_version(name)}"

        return list(await asyncio.gather(*(_pin(p) for p in packages)))

    # ---------- installed tree ----------

    async def find_installed_packages(self, patterns: Sequence[str]) -> Optional[InstallationMetadata]:
        """Installed packages whose name matches one of the glob ``patterns``.

        Returns ``None`` when the backend cannot list dependencies or the
        listing could not be read, and an empty result when nothing matched.
        """
        if not self.backend.supports(Capability.DEPENDENCY_LISTING):
            logger.debug("%s does not support dependency listing", self.backend.name)
            return None

        args = self.backend.list_args(patterns)
        try:
            raw = await self.executor.execute_command(
                self.backend.binary, args, cwd=self.cwd, env={"FORCE_COLOR": "false"}
            )
        except ExternalToolError as err:
            # npm ls exits non-zero on peer dependency problems but still prints the tree.
            raw = err.stdout
            if not raw.strip():
                logger.warning(
                    "Unable to list dependencies with %s (exit code %s)",
                    self.backend.binary,
                    err.exit_code,
                )
                return None

        try:
            roots = self.backend.parse_dependency_tree(raw)
        except ValueError as exc:
            logger.warning("Unable to parse %s dependency listing: %s", self.backend.binary, exc)
            return None

        result = map_dependencies(
            roots, patterns, self.backend.info_command, self.backend.dedupe_command
        )
        if is_debug_enabled(logger):
            logger.debug(
                "Dependency listing parsed",
                extra=extra_context(
                    event="dependency_listing",
                    component="facade",
                    target=self.backend.name,
                    matched=len(result.dependencies),
                    duplicated=len(result.duplicated_dependencies),
                ),
            )
        return result

    async def get_installed_version(self, package_name: str) -> Optional[str]:
        """First resolved version of ``package_name`` in the install tree."""
        installations = await self.find_installed_packages([package_name])
        if not installations:
            return None
        nodes = installations.dependencies.get(package_name)
        return nodes[0].version if nodes else None

    def get_package_manifest(
        self, package_name: str, base_path: Optional[str] = None
    ) -> Optional[PackageJson]:
        """package.json of an installed package, searched upwards from ``base_path``."""
        return find_installed_manifest(package_name, base_path or self.cwd)

    # ---------- project package.json ----------

    def read_package_json(self) -> PackageJson:
        return read_manifest(self.package_json_path)

    def write_package_json(self, package_json: Mapping[str, object]) -> None:
        write_manifest(self.package_json_path, package_json)

    async def retrieve_package_json(self) -> PackageJson:
        """Project package.json, created first when missing.

        The returned copy always has the three dependency sections.
        """
        if not os.path.exists(self.package_json_path):
            await self.init_project()
        package_json = self.read_package_json()
        result = dict(package_json)
        for section in Constants.DEPENDENCY_FIELDS:
            result[section] = dict(package_json.get(section) or {})
        return result

    async def get_all_dependencies(self) -> dict:
        package_json = await self.retrieve_package_json()
        merged: dict = {}
        for section in Constants.DEPENDENCY_FIELDS:
            merged.update(package_json[section])
        return merged

    async def add_dependencies(
        self,
        dependencies: Iterable[DependencySpec],
        dev: bool = False,
        skip_install: bool = False,
        package_json: Optional[PackageJson] = None,
    ) -> None:
        """Add dependencies, either through the tool or by editing package.json only."""
        deps = [str(dep) for dep in dependencies]
        if not skip_install:
            await self.install(deps, as_dev=dev)
            return

        if package_json is None:
            package_json = await self.retrieve_package_json()
        section = "devDependencies" if dev else "dependencies"
        entries = dict(package_json.get(section) or {})
        for spec in await self.get_versioned_packages(deps):
            name, version = get_package_details(spec)
            entries[name] = version
        self.write_package_json({**package_json, section: entries})

    async def remove_dependencies(
        self,
        dependencies: Iterable[str],
        skip_install: bool = False,
        package_json: Optional[PackageJson] = None,
    ) -> None:
        """Remove dependencies, either through the tool or by editing package.json only."""
        deps = [str(dep) for dep in dependencies]
        if not skip_install:
            await self.remove(deps)
            return

        if package_json is None:
            package_json = await self.retrieve_package_json()
        updated = dict(package_json)
        for section in ("dependencies", "devDependencies"):
            entries = dict(package_json.get(section) or {})
            for dep in deps:
                entries.pop(dep, None)
            updated[section] = entries
        self.write_package_json(updated)

    def add_package_resolutions(self, versions: Mapping[str, str]) -> PackageJson:
        """Pin transitive versions in the tool's override field and write package.json."""
        package_json = self.read_package_json()
        updated = {**package_json, **self.backend.get_resolutions(package_json, versions)}
        self.write_package_json(updated)
        return updated

    def add_scripts(self, scripts: Mapping[str, str]) -> PackageJson:
        package_json = self.read_package_json()
        updated = {**package_json, "scripts": {**(package_json.get("scripts") or {}), **scripts}}
        self.write_package_json(updated)
        return updated
