"""Textual TUI for Fylex."""

from .app import BrowserView, FylexApp

__all__ = ["BrowserView", "FylexApp"]
