"""Pure rendering of session state into a fixed-size screen layout.

Nothing here touches the terminal or mutates state. ``render`` returns a
``ScreenLayout`` grid of styled cells; the TUI host converts it into
Rich text, tests read it back as plain strings.
"""

import math
import textwrap
from pathlib import Path
from typing import Optional

from rich.cells import cell_len
from rich.style import Style
from rich.text import Text

from fylex.loop import Browsing, FlashKind, Flashing, Mode, Prompting
from fylex.session import SessionState


LEGEND = "ENTER=open  N=new  T=tag  A=add cfg  R=reload  Q=quit  type to filter"
NO_CONFIG_PLACEHOLDER = "(No config file set)"

LIST_TOP = 3
LIST_WIDTH_RATIO = 0.40


def printable(text: str) -> str:
    """Replace control characters so one character never moves the cursor."""
    return "".join(ch if ch.isprintable() else "?" for ch in text)


STYLES: dict[str, Style] = {
    "header": Style(color="white", bgcolor="blue", bold=True),
    "selected": Style(color="yellow", bgcolor="grey23", bold=True),
    "label": Style(color="cyan"),
    "title": Style(bold=True),
    "clean": Style(color="green"),
    "modified": Style(color="dark_orange"),
    "flash_ok": Style(color="green", bold=True, reverse=True),
    "flash_error": Style(color="red", bold=True, reverse=True),
    "caret": Style(reverse=True),
}


class ScreenLayout:
    """A rows x cols grid of characters, each with an optional style name."""

    def __init__(self, rows: int, cols: int) -> None:
        self.rows = max(0, rows)
        self.cols = max(0, cols)
        self._chars = [[" "] * self.cols for _ in range(self.rows)]
        self._styles: list[list[Optional[str]]] = [[None] * self.cols for _ in range(self.rows)]
        self.cursor: Optional[tuple[int, int]] = None  # (row, col) of the text caret

    def put(self, y: int, x: int, text: str, style: Optional[str] = None, limit: Optional[int] = None) -> int:
        """Write ``text`` at (y, x), clipped to the grid and to ``limit`` cells.

        Wide characters take two cells and are never split; control
        characters are shown as ``?``. Returns the column just past the
        last cell written.
        """
        stop = None if limit is None else x + max(0, limit)
        col = x
        for ch in printable(text):
            width = cell_len(ch)
            if width == 0:
                # Combining marks ride on the character before them
                if col > x:
                    self._attach(y, col - 1, ch)
                continue
            if stop is not None and col + width > stop:
                break
            self._set(y, col, ch, width, style)
            col += width
        return col

    def _set(self, y: int, x: int, ch: str, width: int, style: Optional[str]) -> None:
        if not 0 <= y < self.rows:
            return
        chars, styles = self._chars[y], self._styles[y]
        cells = range(max(0, x), min(self.cols, x + width))
        for col in cells:
            self._release(y, col)
        whole = x >= 0 and x + width <= self.cols
        for col in cells:
            chars[col] = (ch if col == x else "") if whole else " "
            styles[col] = style

    def _release(self, y: int, col: int) -> None:
        """Blank any wide character covering ``col``."""
        chars = self._chars[y]
        lead = col
        while lead > 0 and chars[lead] == "":
            lead -= 1
        end = lead + 1
        while end < self.cols and chars[end] == "":
            end += 1
        if end - lead > 1:
            for cell in range(lead, end):
                chars[cell] = " "

    def _attach(self, y: int, col: int, mark: str) -> None:
        if not 0 <= y < self.rows or not 0 <= col < self.cols:
            return
        chars = self._chars[y]
        while col > 0 and chars[col] == "":
            col -= 1
        chars[col] += mark

    def fill(self, y: int, x: int, width: int, style: Optional[str]) -> None:
        self.put(y, x, " " * max(0, width), style)

    def line(self, y: int) -> str:
        return "".join(self._chars[y])

    def lines(self) -> list[str]:
        return [self.line(y) for y in range(self.rows)]

    def style_at(self, y: int, x: int) -> Optional[str]:
        return self._styles[y][x]

    def spans(self, y: int) -> list[tuple[str, Optional[str]]]:
        """Runs of same-styled text on row ``y``."""
        runs: list[tuple[str, Optional[str]]] = []
        for ch, style in zip(self._chars[y], self._styles[y]):
            if runs and runs[-1][1] == style:
                runs[-1] = (runs[-1][0] + ch, style)
            else:
                runs.append((ch, style))
        return runs

    def to_text(self) -> Text:
        """Convert the whole grid into one Rich ``Text`` (newline separated)."""
        text = Text(no_wrap=True, overflow="crop")
        for y in range(self.rows):
            if y:
                text.append("\n")
            for chunk, style in self.spans(y):
                text.append(chunk, style=STYLES.get(style) if style else None)
        return text


def wrap_words(text: str, width: int) -> list[str]:
    """Word-wrap ``text`` to ``width`` without ever splitting a word."""
    if width < 1:
        return []
    words = " ".join(text.split())
    if not words:
        return []
    return textwrap.wrap(words, width=width, break_long_words=False, break_on_hyphens=False)


def list_width(cols: int) -> int:
    return math.floor(cols * LIST_WIDTH_RATIO)


def render(
    state: SessionState,
    rows: int,
    cols: int,
    *,
    root: Path,
    mode: Optional[Mode] = None,
) -> ScreenLayout:
    """Lay out the whole screen for ``state`` at the given terminal size."""
    screen = ScreenLayout(rows, cols)
    mode = mode or Browsing()

    # Header bar
    screen.fill(0, 0, cols, "header")
    screen.put(0, 1, f" Fylex - root: {root} | {LEGEND} ", "header")

    # Filter line
    after = screen.put(1, 1, "Filter: ", "label")
    screen.put(1, after, state.filter_text)

    left_width = list_width(cols)
    detail_left = left_width + 2
    last_body_row = rows - 2  # Last row is the status line

    _render_list(screen, state, left_width, last_body_row)
    _render_details(screen, state, cols, detail_left, last_body_row)
    _render_status(screen, mode, rows, cols)
    return screen


def _render_list(screen: ScreenLayout, state: SessionState, left_width: int, last_row: int) -> None:
    screen.put(2, 1, "Projects", "title")
    pane = max(0, left_width - 2)

    for i, project in enumerate(state.visible_projects()):
        y = LIST_TOP + i
        if y > last_row:
            break
        suffix = project.vcs_state.suffix if project.vcs_state else ""
        selected = i == state.cursor

        if selected:
            screen.fill(y, 1, pane, "selected")
        style = "selected" if selected else None
        end = screen.put(y, 2, project.display_name, style, limit=pane - cell_len(suffix))
        if project.vcs_state is not None:
            screen.put(y, end, suffix, project.vcs_state.value)


def _render_details(screen: ScreenLayout, state: SessionState, cols: int, left: int, last_row: int) -> None:
    screen.put(2, left, "Details", "title")
    project = state.current_selection()
    if project is None:
        return

    width = max(0, cols - left - 1)
    fields = [
        ("Name: ", project.config.name if project.config else NO_CONFIG_PLACEHOLDER),
        ("Path: ", str(project.path)),
        ("Tags: ", ", ".join(project.tags)),
    ]
    y = LIST_TOP
    for label, value in fields:
        if y > last_row:
            return
        after = screen.put(y, left, label, "label", limit=width)
        screen.put(y, after, value, limit=width - len(label))
        y += 1

    if y > last_row:
        return
    screen.put(y, left, "Description: ", "label", limit=width)
    y += 1

    indent = left + 2
    available = last_row - y + 1
    for line in wrap_words(project.description, cols - indent - 2)[:max(0, available)]:
        screen.put(y, indent, line, limit=cols - indent)
        y += 1


def _render_status(screen: ScreenLayout, mode: Mode, rows: int, cols: int) -> None:
    y = rows - 1
    if y < 0:
        return
    if isinstance(mode, Flashing):
        style = "flash_ok" if mode.kind is FlashKind.OK else "flash_error"
        screen.fill(y, 0, cols, style)
        screen.put(y, 1, mode.message, style)
    elif isinstance(mode, Prompting):
        screen.fill(y, 0, cols, None)
        after = screen.put(y, 1, mode.label, "label")
        caret = min(screen.put(y, after, mode.buffer), max(0, cols - 1))
        screen.cursor = (y, caret)
        screen.put(y, caret, " ", "caret")
