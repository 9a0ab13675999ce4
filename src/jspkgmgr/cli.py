"""Command-line entry point for jspkgmgr."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Any, List, Optional

from jspkgmgr.args import parse_args
from jspkgmgr.common.logging_utils import configure_logging
from jspkgmgr.config import load_settings
from jspkgmgr.constants import ExitCodes
from jspkgmgr.errors import ExternalToolError, PackageManagerError
from jspkgmgr.package_manager import JsPackageManager, get_package_manager

logger = logging.getLogger(__name__)


def _setup_logging(args: Any) -> None:
    """Configure logging based on CLI arguments."""
    configure_logging(getattr(args, "LOG_LEVEL", None))

    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s"
        )
        file_handler.setFormatter(formatter)
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2))


async def _dispatch(manager: JsPackageManager, args: Any) -> int:
    action = args.action

    if action == "detect":
        print(manager.type)
    elif action == "run-command":
        print(manager.get_run_command(args.SCRIPT))
    elif action == "find":
        result = await manager.find_installed_packages(args.PATTERNS)
        if result is None:
            logger.warning("%s does not support dependency listing", manager.type)
            return ExitCodes.NOT_FOUND.value
        _print_json(result.to_dict())
    elif action == "versions":
        if args.CONSTRAINT:
            version = await manager.latest_version(args.PACKAGE, args.CONSTRAINT)
            if version is None:
                logger.error("No version of %s satisfies %s", args.PACKAGE, args.CONSTRAINT)
                return ExitCodes.NOT_FOUND.value
            print(version)
        else:
            _print_json(await manager.get_installed_versions(args.PACKAGE, args.ALL_VERSIONS))
    elif action == "manifest":
        package_json = manager.get_package_manifest(args.PACKAGE, args.BASE_PATH)
        if package_json is None:
            logger.error("%s is not installed", args.PACKAGE)
            return ExitCodes.NOT_FOUND.value
        _print_json(package_json)
    elif action == "add":
        await manager.add_dependencies(
            args.DEPENDENCIES, dev=args.DEV, skip_install=args.SKIP_INSTALL
        )
    elif action == "remove":
        await manager.remove_dependencies(args.DEPENDENCIES, skip_install=args.SKIP_INSTALL)
    elif action == "install":
        await manager.run_install()
    elif action == "run":
        output = await manager.run_script(args.SCRIPT, args.SCRIPT_ARGS)
        if output:
            print(output)
    return ExitCodes.SUCCESS.value


def main(argv: Optional[List[str]] = None) -> int:
    """Parse ``argv``, run the requested operation and return the exit code."""
    args = parse_args(argv)
    _setup_logging(args)

    try:
        settings = load_settings(args.CONFIG)
        manager = get_package_manager(force=args.MANAGER, cwd=args.CWD, settings=settings)
        return asyncio.run(_dispatch(manager, args))
    except ExternalToolError as exc:
        logger.error("%s", exc)
        return exc.exit_code or ExitCodes.TOOL_ERROR.value
    except PackageManagerError as exc:
        logger.error("%s", exc)
        return ExitCodes.TOOL_ERROR.value
    except ValueError as exc:
        logger.error("%s", exc)
        return ExitCodes.USAGE_ERROR.value


if __name__ == "__main__":
    sys.exit(main())
