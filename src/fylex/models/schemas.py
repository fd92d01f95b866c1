"""Schemas for Fylex projects and their sidecar config records."""

from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


# Well-known sidecar filename inside every project directory
CONFIG_NAME = "fylex.config.json"


def utcnow() -> datetime:
    """Get current UTC time."""
    return datetime.now(timezone.utc)


def utcnow_iso() -> str:
    """Get current UTC time as an RFC 3339 string with a fixed offset."""
    return utcnow().isoformat(timespec="microseconds")


class VcsState(str, Enum):
    """Version-control cleanliness of a project directory."""

    CLEAN = "clean"  # Marker present, no pending changes
    MODIFIED = "modified"  # Marker present, pending changes

    @property
    def suffix(self) -> str:
        """Suffix shown after the project name in listings."""
        return " | V" if self is VcsState.CLEAN else " | M"


class ProjectConfig(BaseModel):
    """Metadata record persisted in a project's sidecar file."""

    name: str
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    created_at: str

    @classmethod
    def default_for(cls, name: str) -> "ProjectConfig":
        """Build the record written when a project gets its first config."""
        return cls(name=name, description="", tags=[], created_at=utcnow_iso())

    def with_tag(self, tag: str) -> "ProjectConfig":
        """Return a copy with ``tag`` appended (duplicates allowed)."""
        return self.model_copy(update={"tags": [*self.tags, tag]})


@dataclass(frozen=True)
class Project:
    """A project directory under the root, as seen by the last scan."""

    path: Path
    config: Optional[ProjectConfig] = None
    vcs_state: Optional[VcsState] = None

    @property
    def dir_name(self) -> str:
        """Base name of the project directory."""
        return self.path.name

    @property
    def display_name(self) -> str:
        """Config name if a config exists, else the directory name."""
        if self.config is not None:
            return self.config.name
        return self.dir_name

    @property
    def tags(self) -> list[str]:
        if self.config is None:
            return []
        return list(self.config.tags)

    @property
    def description(self) -> str:
        if self.config is None:
            return ""
        return self.config.description

    def with_config(self, config: ProjectConfig) -> "Project":
        """Return a copy carrying a freshly written config."""
        return replace(self, config=config)

    def haystack(self) -> str:
        """Lowercased text the filter is matched against."""
        tags = ",".join(tag.lower() for tag in self.tags)
        return f"{self.display_name.lower()} {tags}"
