"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    TOOL_ERROR = 1
    USAGE_ERROR = 2
    NOT_FOUND = 3


class PackageManagers(Enum):
    """Package managers supported by the program.

    Args:
        Enum (string): Package managers supported by the program.
    """

    NPM = "npm"
    YARN1 = "yarn1"
    YARN2 = "yarn2"
    PNPM = "pnpm"
    BUN = "bun"


class Lockfiles(Enum):
    """Lockfile names used to detect the package manager of a project."""

    NPM = "package-lock.json"
    YARN = "yarn.lock"
    PNPM = "pnpm-lock.yaml"
    BUN = "bun.lockb"
    BUN_TEXT = "bun.lock"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    SUPPORTED_MANAGERS = [pm.value for pm in PackageManagers]
    PACKAGE_JSON_FILE = "package.json"
    NODE_MODULES_DIR = "node_modules"
    LOG_FILE_NAME = "jspkgmgr.log"
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    DEPENDENCY_FIELDS = ["dependencies", "devDependencies", "peerDependencies"]
    LIST_DEPTH = 99

    # Environment variables
    ENV_CI = "CI"
    ENV_LOG_LEVEL = "JSPKGMGR_LOG_LEVEL"
    ENV_PACKAGE_MANAGER = "JSPKGMGR_PACKAGE_MANAGER"
    ENV_CONFIG = "JSPKGMGR_CONFIG"
    CONFIG_SECTION = "jspkgmgr"
