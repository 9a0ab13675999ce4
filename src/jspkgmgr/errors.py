"""Exception hierarchy for the package manager layer.

"Not found" and "not supported" are never exceptions here: lookups return
``None`` (or an empty string for unsupported version queries) and callers
branch on the value.
"""

from __future__ import annotations

from typing import Optional, Sequence


class PackageManagerError(Exception):
    """Base class for every error raised by jspkgmgr."""


class ExternalToolError(PackageManagerError):
    """An external package manager process exited with a non-zero status."""

    def __init__(
        self,
        command: Sequence[str],
        exit_code: int,
        stdout: str = "",
        stderr: str = "",
        summary: str = "",
        log_path: Optional[str] = None,
    ):
        self.command = list(command)
        self.exit_code = exit_code
        self.stdout = stdout or ""
        self.stderr = stderr or ""
        self.summary = summary
        self.log_path = log_path
        super().__init__(self._build_message())

    @property
    def output(self) -> str:
        """Combined captured output, stdout first."""
        return "\n".join(part for part in (self.stdout, self.stderr) if part)

    def _build_message(self) -> str:
        headline = self.summary or (
            f"Command failed with exit code {self.exit_code}: {' '.join(self.command)}"
        )
        if self.log_path:
            return (
                f"{headline}\n\n"
                f"Please check the logfile generated at {self.log_path} "
                "for troubleshooting and try again."
            )
        return headline


class VersionLookupError(PackageManagerError):
    """A registry version query failed or returned unusable output."""

    def __init__(self, package_name: str, tool: str = "", reason: str = ""):
        self.package_name = package_name
        self.tool = tool
        self.reason = reason
        message = f"Unable to find versions of {package_name}"
        if tool:
            message = f"{message} using {tool}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class MalformedManifestError(PackageManagerError):
    """A package.json file exists but does not hold a JSON object."""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        message = f"Malformed package manifest at {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class PackageManagerNotFoundError(PackageManagerError):
    """No usable package manager could be selected for a project."""


class ConfigError(PackageManagerError):
    """A configuration file could not be loaded."""
