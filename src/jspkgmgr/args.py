"""Argument parsing functionality for jspkgmgr."""

import argparse

from jspkgmgr.constants import Constants


def build_parser():
    """Builds the argument parser with one subcommand per facade operation."""
    parser = argparse.ArgumentParser(
        prog="jspkgmgr",
        description="Run npm, yarn, pnpm and bun through one interface",
        add_help=True,
    )

    parser.add_argument("-m", "--manager",
                        dest="MANAGER",
                        help="Force a package manager instead of detecting it",
                        action="store", type=str,
                        choices=Constants.SUPPORTED_MANAGERS)
    parser.add_argument("-C", "--cwd",
                        dest="CWD",
                        help="Project directory (default: current directory)",
                        action="store", type=str)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to a YAML configuration file",
                        action="store", type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='INFO')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)

    sub = parser.add_subparsers(dest="action", metavar="<command>")
    sub.required = True

    sub.add_parser("detect", help="Print the package manager selected for the project")

    run_command = sub.add_parser("run-command", help="Print the command that runs a script")
    run_command.add_argument("SCRIPT", help="Script name")

    find = sub.add_parser("find", help="List installed packages matching glob patterns")
    find.add_argument("PATTERNS", nargs="+", help="Package name patterns, '*' matches anything")

    versions = sub.add_parser("versions", help="Query published versions of a package")
    versions.add_argument("PACKAGE", help="Package name")
    versions.add_argument("--all", dest="ALL_VERSIONS", action="store_true",
                          help="Print every published version")
    versions.add_argument("--constraint", dest="CONSTRAINT", type=str,
                          help="Print the highest version satisfying this npm range")

    manifest = sub.add_parser("manifest", help="Print the package.json of an installed package")
    manifest.add_argument("PACKAGE", help="Package name")
    manifest.add_argument("--base-path", dest="BASE_PATH", type=str,
                          help="Directory to start searching from")

    add = sub.add_parser("add", help="Add dependencies")
    add.add_argument("DEPENDENCIES", nargs="+", help="name or name@version")
    add.add_argument("-D", "--dev", dest="DEV", action="store_true",
                     help="Add as dev dependencies")
    add.add_argument("--skip-install", dest="SKIP_INSTALL", action="store_true",
                     help="Only edit package.json")

    remove = sub.add_parser("remove", help="Remove dependencies")
    remove.add_argument("DEPENDENCIES", nargs="+", help="Package names")
    remove.add_argument("--skip-install", dest="SKIP_INSTALL", action="store_true",
                        help="Only edit package.json")

    sub.add_parser("install", help="Install everything declared in package.json")

    run = sub.add_parser("run", help="Run a package.json script")
    run.add_argument("SCRIPT", help="Script name")
    run.add_argument("SCRIPT_ARGS", nargs=argparse.REMAINDER, help="Arguments for the script")

    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
