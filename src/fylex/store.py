"""Sidecar config storage.

Each project directory may hold one ``fylex.config.json`` file:

```json
{
  "name": "alpha",
  "description": "Scratch space for alpha experiments",
  "tags": ["infra", "python"],
  "created_at": "2026-01-17T10:30:00.123456+00:00"
}
```
"""

import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from fylex.errors import WriteError
from fylex.models import CONFIG_NAME, ProjectConfig


logger = logging.getLogger(__name__)


class ConfigStore:
    """Reads and writes the per-directory sidecar record."""

    def __init__(self, filename: str = CONFIG_NAME) -> None:
        self.filename = filename

    def path_for(self, directory: Path) -> Path:
        return Path(directory) / self.filename

    def read(self, directory: Path) -> Optional[ProjectConfig]:
        """Read the record for ``directory``.

        Returns None when no sidecar exists. Raises ``OSError`` or
        ``pydantic.ValidationError`` when the file is unreadable or malformed.
        """
        path = self.path_for(directory)
        if not path.is_file():
            return None
        return ProjectConfig.model_validate_json(path.read_text(encoding="utf-8"))

    def load(self, directory: Path) -> Optional[ProjectConfig]:
        """Like ``read`` but treats any failure as "no config"."""
        try:
            return self.read(directory)
        except (OSError, ValueError, ValidationError) as e:
            logger.debug("Unusable config in %s: %s", directory, e)
            return None

    def write(self, directory: Path, config: ProjectConfig) -> Path:
        """Write ``config`` as pretty-printed JSON into ``directory``."""
        path = self.path_for(directory)
        try:
            payload = config.model_dump_json(indent=2)
            path.write_text(payload + "\n", encoding="utf-8")
        except (OSError, ValueError) as e:
            raise WriteError(f"Cannot write {path}: {e}") from e
        logger.debug("Wrote config %s", path)
        return path
