"""Tests for package manager detection and construction."""

import pytest

from jspkgmgr.config import Settings
from jspkgmgr.errors import PackageManagerNotFoundError
from jspkgmgr.package_manager import factory
from jspkgmgr.package_manager import (
    BunBackend,
    NpmBackend,
    PnpmBackend,
    Yarn1Backend,
    Yarn2Backend,
    create_backend,
    detect_package_manager,
    get_package_manager,
)


@pytest.fixture
def tools(monkeypatch):
    """Control which binaries appear to be installed and the yarn version."""
    state = {"installed": set(), "yarn_version": None}
    monkeypatch.setattr(factory, "has_command", lambda binary: binary in state["installed"])
    monkeypatch.setattr(factory, "get_yarn_version", lambda executor, cwd: state["yarn_version"])
    return state


class TestDetection:
    """Lockfile and binary based detection."""

    def test_yarn_lockfile_with_yarn1(self, tmp_path, tools, fake_executor):
        """yarn.lock with yarn 1 selects yarn classic."""
        (tmp_path / "yarn.lock").write_text("")
        tools["installed"] = {"npm", "yarn"}
        tools["yarn_version"] = 1
        assert detect_package_manager(str(tmp_path), fake_executor) == "yarn1"

    def test_yarn_lockfile_with_berry(self, tmp_path, tools, fake_executor):
        """yarn.lock with a newer yarn selects berry."""
        (tmp_path / "yarn.lock").write_text("")
        tools["installed"] = {"npm", "yarn"}
        tools["yarn_version"] = 4
        assert detect_package_manager(str(tmp_path), fake_executor) == "yarn2"

    def test_pnpm_lockfile(self, tmp_path, tools, fake_executor):
        """A pnpm lockfile wins over an installed yarn."""
        (tmp_path / "pnpm-lock.yaml").write_text("")
        tools["installed"] = {"npm", "pnpm", "yarn"}
        tools["yarn_version"] = 1
        assert detect_package_manager(str(tmp_path), fake_executor) == "pnpm"

    def test_bun_lockfile(self, tmp_path, tools, fake_executor):
        """A bun lockfile selects bun."""
        (tmp_path / "bun.lockb").write_bytes(b"")
        tools["installed"] = {"npm", "bun"}
        assert detect_package_manager(str(tmp_path), fake_executor) == "bun"

    def test_lockfile_in_parent_directory(self, tmp_path, tools, fake_executor):
        """The closest lockfile is found above the working directory."""
        (tmp_path / "pnpm-lock.yaml").write_text("")
        nested = tmp_path / "packages" / "ui"
        nested.mkdir(parents=True)
        tools["installed"] = {"npm", "pnpm"}
        assert detect_package_manager(str(nested), fake_executor) == "pnpm"

    def test_falls_back_to_npm(self, tmp_path, tools, fake_executor):
        """Without a lockfile npm is the default."""
        tools["installed"] = {"npm"}
        assert detect_package_manager(str(tmp_path), fake_executor) == "npm"

    def test_only_yarn_installed(self, tmp_path, tools, fake_executor):
        """yarn is used when neither npm nor pnpm exists."""
        tools["installed"] = {"yarn"}
        tools["yarn_version"] = 1
        assert detect_package_manager(str(tmp_path), fake_executor) == "yarn1"

    def test_nothing_installed(self, tmp_path, tools, fake_executor):
        """No tool at all cannot be recovered from."""
        with pytest.raises(PackageManagerNotFoundError):
            detect_package_manager(str(tmp_path), fake_executor)

    def test_yarn_version_parsing(self, fake_executor, tmp_path):
        """The major version is read from yarn --version."""
        fake_executor.respond(["--version"], "3.6.1")
        assert factory.get_yarn_version(fake_executor, str(tmp_path)) == 3


class TestConstruction:
    """Building facades and backends."""

    @pytest.mark.parametrize(
        "name,backend_cls",
        [
            ("npm", NpmBackend),
            ("yarn1", Yarn1Backend),
            ("yarn2", Yarn2Backend),
            ("pnpm", PnpmBackend),
            ("bun", BunBackend),
        ],
    )
    def test_forced_backend(self, name, backend_cls, tmp_path, fake_executor):
        """Forcing a name skips detection."""
        manager = get_package_manager(force=name, cwd=str(tmp_path), executor=fake_executor)
        assert isinstance(manager.backend, backend_cls)
        assert manager.type == name
        assert manager.cwd == str(tmp_path)

    def test_settings_select_backend(self, tmp_path, fake_executor):
        """The configured manager is used when nothing is forced."""
        manager = get_package_manager(
            cwd=str(tmp_path), settings=Settings(package_manager="pnpm"), executor=fake_executor
        )
        assert manager.type == "pnpm"

    def test_unknown_backend(self):
        """Unknown names are rejected."""
        with pytest.raises(PackageManagerNotFoundError):
            create_backend("cargo")

    def test_configured_signatures_reach_backend(self):
        """Signature overrides from settings reach the backend."""
        settings = Settings(error_signatures={"bun": {"patterns": [r"^error: (?P<detail>.+)$"]}})
        backend = create_backend("bun", settings)
        assert backend.parse_error_from_logs("error: boom") == "BUN error: boom"
