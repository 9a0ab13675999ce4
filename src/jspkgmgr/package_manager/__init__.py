"""Package manager backends and the facade that drives them.

One backend exists per supported tool (npm, yarn 1, yarn 2+, pnpm, bun);
:class:`JsPackageManager` wraps exactly one of them.
"""

from .base import PackageManagerBackend
from .bun import BunBackend
from .facade import JsPackageManager
from .factory import BACKENDS, create_backend, detect_package_manager, get_package_manager
from .models import (
    Capability,
    DependencyNode,
    InstallationMetadata,
    PackageIdentity,
    PackageJson,
    get_package_details,
)
from .npm import NpmBackend
from .pnpm import PnpmBackend
from .yarn1 import Yarn1Backend
from .yarn2 import Yarn2Backend

__all__ = [
    "BACKENDS",
    "BunBackend",
    "Capability",
    "DependencyNode",
    "InstallationMetadata",
    "JsPackageManager",
    "NpmBackend",
    "PackageIdentity",
    "PackageJson",
    "PackageManagerBackend",
    "PnpmBackend",
    "Yarn1Backend",
    "Yarn2Backend",
    "create_backend",
    "detect_package_manager",
    "get_package_details",
    "get_package_manager",
]
