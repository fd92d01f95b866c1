"""Data models for Fylex."""

from .schemas import (
    CONFIG_NAME,
    Project,
    ProjectConfig,
    VcsState,
    utcnow,
    utcnow_iso,
)

__all__ = [
    "CONFIG_NAME",
    "Project",
    "ProjectConfig",
    "VcsState",
    "utcnow",
    "utcnow_iso",
]
