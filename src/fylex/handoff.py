"""Hand the terminal over to the user's shell.

On POSIX the process is replaced with the shell (``os.execvp``) and
never comes back. Elsewhere the shell runs as a child; its exit status
is returned so the caller can end the program with it.
"""

import logging
import os
import signal
import subprocess
import sys
from contextlib import AbstractContextManager
from pathlib import Path
from typing import Callable, Optional

from fylex.errors import HandoffError


logger = logging.getLogger(__name__)

DEFAULT_POSIX_SHELL = "/bin/bash"
DEFAULT_WINDOWS_SHELL = "cmd.exe"

CLEAR_SCREEN = "\x1b[2J\x1b[H"

# Ignored by the interpreter at startup; ignored dispositions survive exec
IGNORED_AT_STARTUP = ("SIGPIPE", "SIGXFSZ")

# Anything whose suspend() restores the terminal for the duration of a block
Suspend = Callable[[], AbstractContextManager]


def can_replace_process() -> bool:
    return os.name == "posix"


def restore_default_signals() -> dict:
    """Reset signals Python ignores to SIG_DFL.

    Returns the previous handlers so a failed exec can put them back.
    """
    previous = {}
    for name in IGNORED_AT_STARTUP:
        signum = getattr(signal, name, None)
        if signum is None:
            continue
        previous[signum] = signal.signal(signum, signal.SIG_DFL)
    return previous


def reinstall_signals(previous: dict) -> None:
    for signum, handler in previous.items():
        if handler is not None:
            signal.signal(signum, handler)


def resolve_shell(override: Optional[str] = None) -> str:
    """Shell to run: explicit override, then $SHELL / %COMSPEC%, then a default."""
    if override:
        return override
    if can_replace_process():
        return os.environ.get("SHELL") or DEFAULT_POSIX_SHELL
    return os.environ.get("COMSPEC") or DEFAULT_WINDOWS_SHELL


def transfer_or_fail_into(shell: str, directory: Path) -> Optional[int]:
    """Run ``shell`` in ``directory``.

    Replaces the current process where supported; otherwise waits for the
    shell and returns its exit status. Raises HandoffError if the shell
    cannot be started.
    """
    if not can_replace_process():
        try:
            result = subprocess.run([shell], cwd=str(directory), check=False)
        except OSError as e:
            raise HandoffError(f"{shell}: {e}") from e
        return result.returncode

    previous = os.getcwd()
    try:
        os.chdir(directory)
    except OSError as e:
        raise HandoffError(f"cannot enter {directory}: {e}") from e

    sys.stdout.write(CLEAR_SCREEN)
    sys.stdout.flush()
    logger.info("Exec %s in %s", shell, directory)
    handlers = restore_default_signals()
    try:
        os.execvp(shell, [shell])
    except OSError as e:
        reinstall_signals(handlers)
        os.chdir(previous)
        raise HandoffError(f"exec failed: {e}") from e
    return None  # pragma: no cover - execvp does not return


def open_shell(directory: Path, suspend: Suspend, shell: Optional[str] = None) -> Optional[int]:
    """Tear down the display and transfer control to a shell in ``directory``.

    ``suspend`` must restore the terminal to its pre-session mode for the
    duration of the block and re-acquire it afterwards, including when the
    transfer fails.
    """
    shell = resolve_shell(shell)
    try:
        with suspend():
            return transfer_or_fail_into(shell, Path(directory))
    except HandoffError:
        raise
    except Exception as e:
        # Display drivers that cannot suspend raise their own error types
        raise HandoffError(str(e) or type(e).__name__) from e
