"""Tests for the command-line interface."""

import json
import logging

import pytest

from jspkgmgr import cli
from jspkgmgr.args import parse_args
from jspkgmgr.errors import ExternalToolError, PackageManagerNotFoundError
from jspkgmgr.package_manager import JsPackageManager, NpmBackend, BunBackend


@pytest.fixture(autouse=True)
def _drop_console_handler():
    """main() attaches a stderr handler that must not outlive capsys."""
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        if handler.get_name() == "jspkgmgr-console":
            root.removeHandler(handler)


def _install_manager(monkeypatch, tmp_path, executor, backend=None):
    seen = {}

    def _fake_get_package_manager(force=None, cwd=None, settings=None):
        seen.update(force=force, cwd=cwd, settings=settings)
        return JsPackageManager(backend or NpmBackend(), cwd=str(tmp_path), executor=executor)

    monkeypatch.setattr(cli, "get_package_manager", _fake_get_package_manager)
    return seen


class TestParseArgs:
    """Argument parsing."""

    def test_global_options(self):
        """Global options land in UPPERCASE attributes."""
        args = parse_args(["-m", "pnpm", "-C", "/tmp/project", "--loglevel", "DEBUG", "detect"])
        assert args.MANAGER == "pnpm"
        assert args.CWD == "/tmp/project"
        assert args.LOG_LEVEL == "DEBUG"
        assert args.action == "detect"

    def test_add_flags(self):
        """add collects dependencies and both flags."""
        args = parse_args(["add", "react@18.2.0", "lodash", "-D", "--skip-install"])
        assert args.DEPENDENCIES == ["react@18.2.0", "lodash"]
        assert args.DEV is True
        assert args.SKIP_INSTALL is True

    def test_run_keeps_script_arguments(self):
        """Everything after the script name is passed through untouched."""
        args = parse_args(["run", "build", "--watch", "--port", "6006"])
        assert args.SCRIPT == "build"
        assert args.SCRIPT_ARGS == ["--watch", "--port", "6006"]

    def test_unknown_manager_rejected(self):
        """Only supported managers can be forced."""
        with pytest.raises(SystemExit):
            parse_args(["-m", "cargo", "detect"])

    def test_command_required(self):
        """A subcommand is mandatory."""
        with pytest.raises(SystemExit):
            parse_args([])


class TestMain:
    """End-to-end dispatch through main()."""

    def test_detect(self, monkeypatch, tmp_path, fake_executor, capsys):
        """detect prints the selected manager and forwards the global options."""
        seen = _install_manager(monkeypatch, tmp_path, fake_executor)

        assert cli.main(["-m", "npm", "-C", str(tmp_path), "detect"]) == 0

        assert capsys.readouterr().out.strip() == "npm"
        assert seen["force"] == "npm"
        assert seen["cwd"] == str(tmp_path)

    def test_run_command(self, monkeypatch, tmp_path, fake_executor, capsys):
        """run-command prints the tool-specific command."""
        _install_manager(monkeypatch, tmp_path, fake_executor)
        assert cli.main(["run-command", "storybook"]) == 0
        assert capsys.readouterr().out.strip() == "npm run storybook"

    def test_empty_script_name_is_a_usage_error(self, monkeypatch, tmp_path, fake_executor, capsys):
        """An empty script name exits with the usage code instead of a traceback."""
        _install_manager(monkeypatch, tmp_path, fake_executor)

        assert cli.main(["run-command", ""]) == 2

        assert capsys.readouterr().out == ""

    def test_versions_with_constraint(self, monkeypatch, tmp_path, fake_executor, capsys):
        """The highest version inside the range is printed."""
        fake_executor.respond(["info"], json.dumps(["6.5.0", "7.0.0", "7.4.1", "8.0.0"]))
        _install_manager(monkeypatch, tmp_path, fake_executor)

        assert cli.main(["versions", "storybook", "--constraint", "^7.0.0"]) == 0

        assert capsys.readouterr().out.strip() == "7.4.1"

    def test_versions_constraint_without_match(self, monkeypatch, tmp_path, fake_executor):
        """No satisfying version exits with the not-found code."""
        fake_executor.respond(["info"], json.dumps(["6.5.0"]))
        _install_manager(monkeypatch, tmp_path, fake_executor)
        assert cli.main(["versions", "storybook", "--constraint", "^9.0.0"]) == 3

    def test_find_unsupported(self, monkeypatch, tmp_path, fake_executor):
        """Listing on bun exits with the not-found code."""
        _install_manager(monkeypatch, tmp_path, fake_executor, backend=BunBackend())
        assert cli.main(["find", "react"]) == 3

    def test_find_prints_metadata(self, monkeypatch, tmp_path, fake_executor, capsys):
        """Matches are printed as JSON with camelCase keys."""
        listing = {"dependencies": {"react": {"version": "18.2.0", "resolved": "https://r/react"}}}
        fake_executor.respond(["ls"], json.dumps(listing))
        _install_manager(monkeypatch, tmp_path, fake_executor)

        assert cli.main(["find", "react"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["dependencies"]["react"][0]["version"] == "18.2.0"
        assert data["infoCommand"] == "npm ls --depth=1"

    def test_manifest_missing_package(self, monkeypatch, tmp_path, fake_executor):
        """A package that is not installed exits with the not-found code."""
        _install_manager(monkeypatch, tmp_path, fake_executor)
        assert cli.main(["manifest", "react", "--base-path", str(tmp_path)]) == 3

    def test_tool_failure_exit_code(self, monkeypatch, tmp_path, fake_executor):
        """The tool's exit code becomes the CLI's exit code."""
        fake_executor.respond(["run"], ExternalToolError(["npm", "run", "build"], 2))
        _install_manager(monkeypatch, tmp_path, fake_executor)
        assert cli.main(["run", "build"]) == 2

    def test_detection_failure(self, monkeypatch):
        """No usable package manager exits with the generic error code."""
        def _raise(**_):
            raise PackageManagerNotFoundError("nothing installed")

        monkeypatch.setattr(cli, "get_package_manager", _raise)
        assert cli.main(["detect"]) == 1
