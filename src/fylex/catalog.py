"""Project discovery and creation under a single root directory."""

import logging
from pathlib import Path
from typing import Optional

from fylex.errors import AlreadyExists, ConfigExists, InvalidName, ScanError, WriteError
from fylex.models import Project, ProjectConfig
from fylex.store import ConfigStore
from fylex.vcs import VcsProbe


logger = logging.getLogger(__name__)


class ProjectCatalog:
    """Builds the ordered project list for ``root``.

    The catalog itself holds no project state: every ``scan`` constructs
    fresh ``Project`` values, and writes return refreshed copies for the
    caller to swap in.
    """

    def __init__(
        self,
        root: Path,
        store: Optional[ConfigStore] = None,
        probe: Optional[VcsProbe] = None,
    ) -> None:
        self.root = Path(root)
        self.store = store or ConfigStore()
        self.probe = probe or VcsProbe()

    def scan(self) -> list[Project]:
        """List the root's immediate subdirectories as projects.

        Raises ScanError only when the root itself cannot be listed.
        Per-entry problems leave ``config``/``vcs_state`` as None.
        """
        try:
            entries = list(self.root.iterdir())
        except OSError as e:
            raise ScanError(f"Reading directory {self.root}: {e}") from e

        projects: list[Project] = []
        for entry in entries:
            try:
                # Follows symlinks; links to files and dangling links drop out
                if not entry.is_dir():
                    continue
            except OSError:
                continue
            projects.append(self._load(entry))

        projects.sort(key=lambda p: p.dir_name)
        logger.info("Scanned %d projects in %s", len(projects), self.root)
        return projects

    def _load(self, directory: Path) -> Project:
        path = directory.absolute()
        return Project(
            path=path,
            config=self.store.load(path),
            vcs_state=self.probe.check(path),
        )

    def create(self, name: str) -> Project:
        """Create ``root/name`` with a repository and a default config."""
        name = name.strip()
        if not name:
            raise InvalidName("Name cannot be empty")

        directory = self.root / name
        # The last segment is left unresolved so an existing symlink reads as taken
        if directory.name == ".." or not directory.parent.resolve().is_relative_to(self.root.resolve()):
            raise InvalidName(f"Name must stay inside {self.root}")
        if directory.exists() or directory.is_symlink():
            raise AlreadyExists(f"Directory already exists: {directory}")

        try:
            directory.mkdir(parents=True)
        except FileExistsError as e:
            raise AlreadyExists(f"Directory already exists: {directory}") from e
        except OSError as e:
            raise WriteError(f"Cannot create {directory}: {e}") from e

        if not self.probe.init(directory):
            logger.warning("Continuing without a repository in %s", directory)

        config = ProjectConfig.default_for(Path(name).name)
        self.store.write(directory, config)
        logger.info("Created project %s", directory)
        return self._load(directory)

    def add_config(self, project: Project) -> Project:
        """Write a default config for a project that has none."""
        if project.config is not None or self.store.path_for(project.path).exists():
            raise ConfigExists(f"Config already set for {project.dir_name}")
        config = ProjectConfig.default_for(project.dir_name)
        self.store.write(project.path, config)
        return project.with_config(config)

    def add_tag(self, project: Project, tag: str) -> Project:
        """Append ``tag`` to the project's config, creating one if needed."""
        tag = tag.strip()
        if not tag:
            raise InvalidName("Tag cannot be empty")
        base = project.config or ProjectConfig.default_for(project.dir_name)
        config = base.with_tag(tag)
        self.store.write(project.path, config)
        logger.info("Tagged %s with %r", project.dir_name, tag)
        return project.with_config(config)

    def find(self, name: str) -> Optional[Project]:
        """Scan and return the project whose directory is ``name``."""
        for project in self.scan():
            if project.dir_name == name:
                return project
        return None
