"""Main Fylex TUI application."""

from pathlib import Path
from typing import Optional

from textual import events
from textual.app import App, ComposeResult, RenderResult
from textual.timer import Timer
from textual.widget import Widget

from fylex.catalog import ProjectCatalog
from fylex.config import FylexConfig
from fylex.handoff import open_shell
from fylex.loop import Exited, Flashing, Handoff, InputLoop
from fylex.render import render as render_screen
from fylex.session import SessionState


class BrowserView(Widget):
    """Paints the whole browser screen from the app's session and mode."""

    DEFAULT_CSS = """
    BrowserView {
        width: 100%;
        height: 100%;
    }
    """

    can_focus = True

    def render(self) -> RenderResult:
        app: FylexApp = self.app  # type: ignore[assignment]
        layout = render_screen(
            app.loop.session,
            self.size.height,
            self.size.width,
            root=app.catalog.root,
            mode=app.loop.mode,
        )
        return layout.to_text()

    def on_key(self, event: events.Key) -> None:
        event.stop()
        event.prevent_default()
        app: FylexApp = self.app  # type: ignore[assignment]
        app.handle_key(event.key, event.character)


class FylexApp(App[int]):
    """Full-screen project browser.

    Every key goes to the ``InputLoop``; the view is repainted after each
    transition. Flash messages are expired by a one-shot timer.
    """

    TITLE = "Fylex"
    SUB_TITLE = "Project Browser"

    ENABLE_COMMAND_PALETTE = False

    CSS = """
    Screen {
        layout: vertical;
    }
    """

    def __init__(
        self,
        catalog: ProjectCatalog,
        session: Optional[SessionState] = None,
        settings: Optional[FylexConfig] = None,
        handoff: Optional[Handoff] = None,
    ) -> None:
        super().__init__()
        self.catalog = catalog
        self.settings = settings or FylexConfig()
        if session is None:
            session = SessionState(catalog=catalog.scan())
        self.loop = InputLoop(session, catalog, handoff or self._open_shell)
        self._flash_timer: Optional[Timer] = None

    def compose(self) -> ComposeResult:
        yield BrowserView(id="browser")

    def on_mount(self) -> None:
        self.query_one(BrowserView).focus()

    def _open_shell(self, directory: Path) -> Optional[int]:
        return open_shell(directory, self.suspend, shell=self.settings.shell)

    def handle_key(self, key: str, character: Optional[str] = None) -> None:
        """Feed one key to the loop and sync the screen."""
        self.loop.handle_key(key, character)
        self.after_transition()

    def after_transition(self) -> None:
        """Sync timers and the view with the loop's current mode."""
        mode = self.loop.mode
        if isinstance(mode, Exited):
            self.exit(mode.status, return_code=mode.status)
            return

        if self._flash_timer is not None:
            self._flash_timer.stop()
            self._flash_timer = None
        if isinstance(mode, Flashing):
            self._flash_timer = self.set_timer(self.settings.flash_seconds, self.expire_flash)

        self.query_one(BrowserView).refresh()

    def expire_flash(self) -> None:
        self._flash_timer = None
        self.loop.expire_flash()
        self.query_one(BrowserView).refresh()
