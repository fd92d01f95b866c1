"""Shared fixtures for Fylex tests."""

import json
import subprocess
from pathlib import Path
from typing import Callable, Optional

import pytest

from fylex.catalog import ProjectCatalog
from fylex.models import CONFIG_NAME
from fylex.store import ConfigStore
from fylex.vcs import VcsProbe


class FakeGit:
    """Stands in for ``subprocess.run`` when the probe calls git."""

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.dirty: set[str] = set()
        self.status_code = 0
        self.fail_init = False

    def __call__(self, args, **kwargs) -> subprocess.CompletedProcess:
        args = list(args)
        self.calls.append(args)
        if args[1] == "-C":
            stdout = " M README.md\n" if args[2] in self.dirty else ""
            return subprocess.CompletedProcess(args, self.status_code, stdout=stdout, stderr="")
        if args[1] == "init":
            if self.fail_init:
                return subprocess.CompletedProcess(args, 128, stdout="", stderr="fatal: cannot init")
            (Path(args[2]) / ".git").mkdir()
            return subprocess.CompletedProcess(args, 0, stdout="Initialized empty Git repository", stderr="")
        raise AssertionError(f"Unexpected git call: {args}")


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep settings lookups away from the real home directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("FYLEX_ROOT", raising=False)
    return home


@pytest.fixture
def root(tmp_path: Path) -> Path:
    """An empty projects root."""
    path = tmp_path / "dev"
    path.mkdir()
    return path


@pytest.fixture
def fake_git() -> FakeGit:
    return FakeGit()


@pytest.fixture
def catalog(root: Path, fake_git: FakeGit) -> ProjectCatalog:
    return ProjectCatalog(root, store=ConfigStore(), probe=VcsProbe(runner=fake_git))


@pytest.fixture
def make_project(root: Path, fake_git: FakeGit) -> Callable[..., Path]:
    """Factory creating a project folder under ``root``."""

    def _make(
        name: str,
        config: Optional[dict] = None,
        git: bool = False,
        dirty: bool = False,
    ) -> Path:
        path = root / name
        path.mkdir()
        if config is not None:
            record = {"description": "", "tags": [], "created_at": "2026-01-17T10:30:00+00:00"}
            record.update(config)
            (path / CONFIG_NAME).write_text(json.dumps(record), encoding="utf-8")
        if git or dirty:
            (path / ".git").mkdir()
        if dirty:
            fake_git.dirty.add(str(path))
        return path

    return _make
