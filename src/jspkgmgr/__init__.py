"""jspkgmgr - one interface over npm, yarn, pnpm and bun."""

from jspkgmgr.errors import (
    ConfigError,
    ExternalToolError,
    MalformedManifestError,
    PackageManagerError,
    PackageManagerNotFoundError,
    VersionLookupError,
)
from jspkgmgr.package_manager import JsPackageManager, get_package_manager

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "ConfigError",
    "ExternalToolError",
    "JsPackageManager",
    "MalformedManifestError",
    "PackageManagerError",
    "PackageManagerNotFoundError",
    "VersionLookupError",
    "get_package_manager",
]
