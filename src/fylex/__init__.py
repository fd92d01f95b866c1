"""Fylex - terminal browser for a directory of projects."""

__version__ = "0.1.0"
