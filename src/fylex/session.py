"""Filter and selection state for one browsing session."""

from dataclasses import dataclass, field
from typing import Iterable, Optional

from fylex.models import Project


@dataclass
class SessionState:
    """Catalog plus the incremental filter and selection cursor.

    ``visible_indices`` is always an ascending subsequence of
    ``range(len(catalog))``; ``cursor`` indexes into it and is 0 when it
    is empty.
    """

    catalog: list[Project] = field(default_factory=list)
    filter_text: str = ""
    visible_indices: list[int] = field(default_factory=list)
    cursor: int = 0

    def __post_init__(self) -> None:
        self.apply_filter(self.filter_text)

    def apply_filter(self, text: str) -> None:
        """Recompute the visible projects for ``text`` and clamp the cursor."""
        self.filter_text = text
        needle = text.lower()
        self.visible_indices = [
            i for i, project in enumerate(self.catalog)
            if needle in project.haystack()
        ]
        if not self.visible_indices:
            self.cursor = 0
        else:
            self.cursor = max(0, min(self.cursor, len(self.visible_indices) - 1))

    def move_cursor(self, delta: int) -> None:
        """Move the cursor by ``delta`` without wrapping."""
        if not self.visible_indices:
            return
        last = len(self.visible_indices) - 1
        self.cursor = max(0, min(self.cursor + delta, last))

    def current_selection(self) -> Optional[Project]:
        if not self.visible_indices:
            return None
        return self.catalog[self.visible_indices[self.cursor]]

    def visible_projects(self) -> list[Project]:
        return [self.catalog[i] for i in self.visible_indices]

    def push_char(self, ch: str) -> None:
        self.apply_filter(self.filter_text + ch)

    def pop_char(self) -> None:
        self.apply_filter(self.filter_text[:-1])

    def replace_catalog(self, projects: Iterable[Project]) -> None:
        """Swap in a rescanned catalog, keeping the current filter."""
        self.catalog = list(projects)
        self.apply_filter(self.filter_text)

    def replace_project(self, project: Project) -> None:
        """Replace the entry at ``project.path`` with a refreshed copy."""
        for i, existing in enumerate(self.catalog):
            if existing.path == project.path:
                self.catalog[i] = project
                break
        self.apply_filter(self.filter_text)
