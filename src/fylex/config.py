"""Fylex configuration management.

Handles persistent settings stored in ~/.fylex/config.json
"""

import json
import logging
import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional


# Default configuration values
DEFAULT_ROOT = "~/dev"
DEFAULT_FLASH_SECONDS = 1.5
DEFAULT_VCS_TIMEOUT = 10.0

ROOT_ENV_VAR = "FYLEX_ROOT"

# Accepted JSON types per settings field; anything else keeps the default
FIELD_TYPES = {
    "root": (str,),
    "shell": (str, type(None)),
    "flash_seconds": (int, float),
    "vcs_timeout": (int, float),
    "log_file": (str, type(None)),
}


def _valid_setting(name: str, value) -> bool:
    if isinstance(value, bool) or not isinstance(value, FIELD_TYPES[name]):
        return False
    if isinstance(value, (int, float)):
        return value > 0
    if name == "root":
        return bool(value.strip())
    return True


@dataclass
class FylexConfig:
    """Fylex application configuration."""

    # Directory whose immediate children are the projects
    root: str = DEFAULT_ROOT

    # Shell override; $SHELL is used when unset
    shell: Optional[str] = None

    # How long a flash message owns the status line
    flash_seconds: float = DEFAULT_FLASH_SECONDS

    # Seconds before a git call is abandoned
    vcs_timeout: float = DEFAULT_VCS_TIMEOUT

    # Log destination; the terminal belongs to the TUI
    log_file: Optional[str] = None

    @classmethod
    def get_config_path(cls) -> Path:
        """Get the path to the config file."""
        return Path.home() / ".fylex" / "config.json"

    @classmethod
    def load(cls) -> "FylexConfig":
        """Load configuration from file, or return defaults if not found."""
        config_path = cls.get_config_path()

        if config_path.exists():
            try:
                with open(config_path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                # Only use known fields holding the expected types
                filtered_data = {}
                for key, value in data.items():
                    if key not in FIELD_TYPES:
                        continue
                    if not _valid_setting(key, value):
                        logging.getLogger(__name__).warning(
                            "Ignoring invalid setting %s=%r in %s", key, value, config_path
                        )
                        continue
                    filtered_data[key] = value
                return cls(**filtered_data)
            except (OSError, json.JSONDecodeError, TypeError, ValueError, AttributeError):
                # Invalid config, return defaults
                logging.getLogger(__name__).warning("Ignoring invalid settings file %s", config_path)

        return cls()

    def save(self) -> None:
        """Save configuration to file."""
        config_path = self.get_config_path()

        # Ensure directory exists
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(asdict(self), f, indent=2)

    def reset(self) -> None:
        """Reset configuration to defaults."""
        self.root = DEFAULT_ROOT
        self.shell = None
        self.flash_seconds = DEFAULT_FLASH_SECONDS
        self.vcs_timeout = DEFAULT_VCS_TIMEOUT
        self.log_file = None

    def resolve_root(self, cli_root: Optional[str] = None) -> Path:
        """Resolve the projects root.

        Precedence: explicit CLI value, then $FYLEX_ROOT, then the
        settings file. The result is user-expanded and absolute.
        """
        raw = cli_root or os.environ.get(ROOT_ENV_VAR) or self.root or DEFAULT_ROOT
        return Path(raw).expanduser().absolute()
