"""Tests for Fylex CLI commands."""

import json
import logging
from pathlib import Path

import pytest
from click.testing import CliRunner

from fylex import __version__
from fylex.cli import cli, configure_logging
from fylex.models import CONFIG_NAME


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def no_git(monkeypatch: pytest.MonkeyPatch, fake_git) -> None:
    """Route every git call made by the CLI through the fake runner."""
    monkeypatch.setattr("fylex.vcs.subprocess.run", fake_git)


class TestCLIBasic:
    """Basic CLI tests."""

    def test_cli_version(self, runner: CliRunner) -> None:
        """Test --version flag."""
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_cli_help(self, runner: CliRunner) -> None:
        """Test --help flag."""
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Fylex" in result.output
        for command in ["browse", "list", "new", "tag", "init-config", "tui"]:
            assert command in result.output

    def test_browse_help_shows_shortcuts(self, runner: CliRunner) -> None:
        """Test browse help lists the keyboard shortcuts."""
        result = runner.invoke(cli, ["browse", "--help"])
        assert result.exit_code == 0
        assert "interactive project browser" in result.output
        assert "Keyboard shortcuts" in result.output
        assert "Quit" in result.output
        assert "Reload" in result.output


class TestListCommand:
    """Tests for the list command."""

    def test_list_empty(self, runner: CliRunner, root: Path) -> None:
        """Test listing an empty root."""
        result = runner.invoke(cli, ["--root", str(root), "list"])
        assert result.exit_code == 0
        assert "No projects" in result.output

    def test_list(self, runner: CliRunner, root: Path, make_project, no_git) -> None:
        """Test projects are listed with their markers and tags."""
        make_project("alpha", git=True)
        make_project("beta", config={"name": "Beta", "tags": ["infra", "ops"]})
        make_project("gamma", dirty=True)

        result = runner.invoke(cli, ["--root", str(root), "list"])
        assert result.exit_code == 0
        assert "alpha | V" in result.output
        assert "Beta [infra, ops]" in result.output
        assert "gamma | M" in result.output
        assert "Total: 3 projects" in result.output
        assert result.output.index("alpha") < result.output.index("Beta") < result.output.index("gamma")

    def test_list_verbose(self, runner: CliRunner, root: Path, make_project) -> None:
        """Test verbose listing shows paths and descriptions."""
        make_project("alpha", config={"name": "alpha", "description": "Scratch space"})
        result = runner.invoke(cli, ["--root", str(root), "list", "-v"])
        assert result.exit_code == 0
        assert f"Path: {root / 'alpha'}" in result.output
        assert "Scratch space" in result.output

    def test_list_missing_root(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test an unlistable root exits with status 1."""
        result = runner.invoke(cli, ["--root", str(tmp_path / "missing"), "list"])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_root_from_environment(self, runner: CliRunner, root: Path, make_project, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test $FYLEX_ROOT is used without --root."""
        make_project("alpha")
        monkeypatch.setenv("FYLEX_ROOT", str(root))
        result = runner.invoke(cli, ["list"])
        assert result.exit_code == 0
        assert "alpha" in result.output


class TestNewCommand:
    """Tests for the new command."""

    def test_new(self, runner: CliRunner, root: Path, no_git) -> None:
        """Test creating a project."""
        result = runner.invoke(cli, ["--root", str(root), "new", "foo"])
        assert result.exit_code == 0
        assert "Created project" in result.output
        assert (root / "foo" / ".git").is_dir()
        assert json.loads((root / "foo" / CONFIG_NAME).read_text())["name"] == "foo"

    def test_new_duplicate(self, runner: CliRunner, root: Path, make_project, no_git) -> None:
        """Test creating over an existing directory fails."""
        make_project("foo")
        result = runner.invoke(cli, ["--root", str(root), "new", "foo"])
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_new_blank_name(self, runner: CliRunner, root: Path, no_git) -> None:
        """Test a blank name is rejected."""
        result = runner.invoke(cli, ["--root", str(root), "new", "  "])
        assert result.exit_code == 1
        assert "Name cannot be empty" in result.output

    def test_new_outside_root(self, runner: CliRunner, root: Path, no_git) -> None:
        """Test a name climbing out of the root fails."""
        result = runner.invoke(cli, ["--root", str(root), "new", "../escape"])
        assert result.exit_code == 1
        assert "Name must stay inside" in result.output
        assert not (root.parent / "escape").exists()


class TestTagCommand:
    """Tests for the tag command."""

    def test_tag(self, runner: CliRunner, root: Path, make_project) -> None:
        """Test tags are appended and printed."""
        path = make_project("alpha", config={"name": "alpha", "tags": ["infra"]})
        result = runner.invoke(cli, ["--root", str(root), "tag", "alpha", "ops"])
        assert result.exit_code == 0
        assert "Tags for alpha: infra, ops" in result.output
        assert json.loads((path / CONFIG_NAME).read_text())["tags"] == ["infra", "ops"]

    def test_tag_unknown_project(self, runner: CliRunner, root: Path) -> None:
        """Test tagging a missing project fails."""
        result = runner.invoke(cli, ["--root", str(root), "tag", "nope", "ops"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_tag_blank(self, runner: CliRunner, root: Path, make_project) -> None:
        """Test a blank tag is rejected."""
        make_project("alpha")
        result = runner.invoke(cli, ["--root", str(root), "tag", "alpha", " "])
        assert result.exit_code == 1
        assert "Tag cannot be empty" in result.output


class TestInitConfigCommand:
    """Tests for the init-config command."""

    def test_init_config(self, runner: CliRunner, root: Path, make_project) -> None:
        """Test writing a default config."""
        path = make_project("alpha")
        result = runner.invoke(cli, ["--root", str(root), "init-config", "alpha"])
        assert result.exit_code == 0
        assert "Wrote config for alpha" in result.output
        assert (path / CONFIG_NAME).is_file()

    def test_init_config_exists(self, runner: CliRunner, root: Path, make_project) -> None:
        """Test an existing config is left alone."""
        make_project("alpha", config={"name": "Keep"})
        result = runner.invoke(cli, ["--root", str(root), "init-config", "alpha"])
        assert result.exit_code == 1
        assert "already has a config" in result.output


class TestBrowseCommand:
    """Tests for launching the browser."""

    def test_default_command_is_browse(self, runner: CliRunner, root: Path, make_project, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test running without a subcommand starts the browser."""
        from fylex.tui import FylexApp

        make_project("alpha")
        launched = []

        def fake_run(self, *args, **kwargs):
            launched.append([p.dir_name for p in self.loop.session.catalog])

        monkeypatch.setattr(FylexApp, "run", fake_run)
        result = runner.invoke(cli, ["--root", str(root)])
        assert result.exit_code == 0
        assert launched == [["alpha"]]

    def test_browse_missing_root(self, runner: CliRunner, tmp_path: Path) -> None:
        """Test the browser is not started for an unlistable root."""
        result = runner.invoke(cli, ["--root", str(tmp_path / "missing"), "browse"])
        assert result.exit_code == 1
        assert "Error" in result.output


class TestLogging:
    """Tests for log configuration."""

    def test_log_file(self, tmp_path: Path) -> None:
        """Test logs go to the requested file."""
        log_file = tmp_path / "fylex.log"
        configure_logging(str(log_file), verbose=True)
        logger = logging.getLogger("fylex.catalog")
        logger.debug("scan details")
        for handler in logging.getLogger("fylex").handlers:
            handler.flush()
        assert "scan details" in log_file.read_text()
        configure_logging(None, verbose=False)

    def test_silent_by_default(self) -> None:
        """Test no console handler is installed without a log file."""
        configure_logging(None, verbose=False)
        logger = logging.getLogger("fylex")
        assert logger.level == logging.INFO
        assert all(isinstance(h, logging.NullHandler) for h in logger.handlers)
        assert logger.propagate is False
