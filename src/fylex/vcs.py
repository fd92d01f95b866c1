"""Version-control probe backed by the git command line client."""

import logging
import subprocess
from pathlib import Path
from typing import Callable, Optional, Sequence

from fylex.config import DEFAULT_VCS_TIMEOUT
from fylex.models import VcsState


logger = logging.getLogger(__name__)

MARKER = ".git"

# Signature of subprocess.run, swappable in tests
Runner = Callable[..., subprocess.CompletedProcess]


class VcsProbe:
    """Reports whether a directory is unversioned, clean or modified."""

    def __init__(
        self,
        git: str = "git",
        timeout: float = DEFAULT_VCS_TIMEOUT,
        runner: Optional[Runner] = None,
    ) -> None:
        self.git = git
        self.timeout = timeout
        self._run = runner or subprocess.run

    def _git(self, args: Sequence[str]) -> subprocess.CompletedProcess:
        return self._run(
            [self.git, *args],
            capture_output=True,
            text=True,
            timeout=self.timeout,
            check=False,
        )

    def has_marker(self, directory: Path) -> bool:
        return (Path(directory) / MARKER).exists()

    def check(self, directory: Path) -> Optional[VcsState]:
        """Probe ``directory``.

        None when there is no marker or the probe fails in any way
        (missing binary, timeout, non-zero exit).
        """
        if not self.has_marker(directory):
            return None
        try:
            result = self._git(["-C", str(directory), "status", "--porcelain"])
        except (OSError, subprocess.SubprocessError) as e:
            logger.debug("git status failed in %s: %s", directory, e)
            return None
        if result.returncode != 0:
            logger.debug("git status exited %s in %s", result.returncode, directory)
            return None
        if result.stdout.strip():
            return VcsState.MODIFIED
        return VcsState.CLEAN

    def init(self, directory: Path) -> bool:
        """Initialize a repository in ``directory``. Best effort."""
        try:
            result = self._git(["init", str(directory)])
        except (OSError, subprocess.SubprocessError) as e:
            logger.warning("git init failed in %s: %s", directory, e)
            return False
        if result.returncode != 0:
            logger.warning("git init exited %s in %s", result.returncode, directory)
            return False
        return True
