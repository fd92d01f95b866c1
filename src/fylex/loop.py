"""Input state machine for the project browser.

The loop is terminal-agnostic: a host feeds it one key at a time and
redraws from ``session`` and ``mode`` afterwards. Flash messages are a
mode of their own; the host calls ``expire_flash`` once they have been
shown long enough.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Union

from fylex.catalog import ProjectCatalog
from fylex.errors import AlreadyExists, CatalogError, ConfigExists, HandoffError, InvalidName, ScanError
from fylex.session import SessionState


logger = logging.getLogger(__name__)

# Command keys; every other printable character feeds the filter
KEY_QUIT = "Q"
KEY_NEW = "N"
KEY_TAG = "T"
KEY_ADD_CONFIG = "A"
KEY_RELOAD = "R"


class FlashKind(str, Enum):
    OK = "ok"
    ERROR = "error"


class PromptPurpose(str, Enum):
    NEW_PROJECT = "new_project"
    TAG = "tag"


@dataclass(frozen=True)
class Browsing:
    """Default mode: typing filters, arrows move, keys run commands."""


@dataclass(frozen=True)
class Prompting:
    """Collecting a line of text on the status line."""

    purpose: PromptPurpose
    label: str
    buffer: str = ""
    target: Optional[Path] = None  # Project the answer applies to


@dataclass(frozen=True)
class Flashing:
    """A transient message owns the status line."""

    message: str
    kind: FlashKind = FlashKind.OK


@dataclass(frozen=True)
class Exited:
    status: int = 0


Mode = Union[Browsing, Prompting, Flashing, Exited]

# Transfers control to a shell in the directory and returns its exit status
# when it was waited on; raises HandoffError on failure
Handoff = Callable[[Path], Optional[int]]


def _printable(character: Optional[str]) -> bool:
    return character is not None and len(character) == 1 and character.isprintable()


class InputLoop:
    """Maps key events to session transitions and actions."""

    def __init__(
        self,
        session: SessionState,
        catalog: ProjectCatalog,
        handoff: Handoff,
    ) -> None:
        self.session = session
        self.catalog = catalog
        self.handoff = handoff
        self.mode: Mode = Browsing()

    @property
    def exited(self) -> bool:
        return isinstance(self.mode, Exited)

    def handle_key(self, key: str, character: Optional[str] = None) -> Mode:
        """Process one key event and return the resulting mode."""
        if character is None and len(key) == 1:
            character = key

        if isinstance(self.mode, Exited):
            return self.mode
        if isinstance(self.mode, Flashing):
            # Input ends the flash early and is then handled normally
            self.mode = Browsing()
        if isinstance(self.mode, Prompting):
            self._handle_prompt_key(self.mode, key, character)
        else:
            self._handle_browse_key(key, character)
        return self.mode

    def expire_flash(self) -> None:
        if isinstance(self.mode, Flashing):
            self.mode = Browsing()

    def flash(self, message: str, kind: FlashKind = FlashKind.OK) -> None:
        logger.debug("Flash (%s): %s", kind.value, message)
        self.mode = Flashing(message, kind)

    def _handle_browse_key(self, key: str, character: Optional[str]) -> None:
        if key == "up":
            self.session.move_cursor(-1)
        elif key == "down":
            self.session.move_cursor(1)
        elif key == "backspace":
            self.session.pop_char()
        elif key == "enter":
            self.open_selected()
        elif character == KEY_QUIT:
            self.mode = Exited(0)
        elif character == KEY_NEW:
            self.mode = Prompting(PromptPurpose.NEW_PROJECT, "New project name: ")
        elif character == KEY_TAG:
            selected = self.session.current_selection()
            if selected is not None:
                self.mode = Prompting(PromptPurpose.TAG, "New tag: ", target=selected.path)
        elif character == KEY_ADD_CONFIG:
            self.add_config()
        elif character == KEY_RELOAD:
            if self.reload():
                self.flash("Reloaded")
        elif _printable(character):
            self.session.push_char(character)

    def _handle_prompt_key(self, prompt: Prompting, key: str, character: Optional[str]) -> None:
        if key == "escape":
            self.mode = Browsing()
            self._submit(prompt, "")
        elif key == "enter":
            self.mode = Browsing()
            self._submit(prompt, prompt.buffer)
        elif key == "backspace":
            self.mode = replace(prompt, buffer=prompt.buffer[:-1])
        elif _printable(character):
            self.mode = replace(prompt, buffer=prompt.buffer + character)

    def _submit(self, prompt: Prompting, text: str) -> None:
        text = text.strip()
        if prompt.purpose is PromptPurpose.NEW_PROJECT:
            if not text:
                self.flash("Name cannot be empty", FlashKind.ERROR)
                return
            self.create_project(text)
        elif prompt.purpose is PromptPurpose.TAG:
            if not text:
                self.flash("Tag cannot be empty", FlashKind.ERROR)
                return
            self.add_tag(prompt.target, text)

    def reload(self) -> bool:
        """Rescan the root. Returns False (after flashing) on failure."""
        try:
            projects = self.catalog.scan()
        except ScanError as e:
            self.flash(f"Reload failed: {e}", FlashKind.ERROR)
            return False
        self.session.replace_catalog(projects)
        return True

    def open_selected(self) -> None:
        selected = self.session.current_selection()
        if selected is None:
            return
        try:
            status = self.handoff(selected.path)
        except HandoffError as e:
            logger.error("Handoff to %s failed: %s", selected.path, e)
            self.flash(f"Terminal open failed: {e}", FlashKind.ERROR)
            return
        self.mode = Exited(status or 0)

    def create_project(self, name: str) -> None:
        try:
            self.catalog.create(name)
        except InvalidName as e:
            self.flash(str(e), FlashKind.ERROR)
            return
        except AlreadyExists:
            self.flash("Directory already exists", FlashKind.ERROR)
            return
        except CatalogError as e:
            logger.error("Creating %r failed: %s", name, e)
            self.flash("Failed to create project", FlashKind.ERROR)
            return
        if self.reload():
            self.flash("Project created")

    def add_tag(self, target: Optional[Path], tag: str) -> None:
        project = next((p for p in self.session.catalog if p.path == target), None)
        if project is None:
            self.flash("Project no longer listed", FlashKind.ERROR)
            return
        try:
            refreshed = self.catalog.add_tag(project, tag)
        except CatalogError as e:
            self.flash(f"Failed to add tag: {e}", FlashKind.ERROR)
            return
        self.session.replace_project(refreshed)
        self.flash("Tag added")

    def add_config(self) -> None:
        selected = self.session.current_selection()
        if selected is None:
            return
        try:
            refreshed = self.catalog.add_config(selected)
        except ConfigExists:
            self.flash("Config already set", FlashKind.ERROR)
            return
        except CatalogError as e:
            self.flash(f"Failed to write config: {e}", FlashKind.ERROR)
            return
        self.session.replace_project(refreshed)
        self.flash("Config created")
