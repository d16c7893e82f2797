"""Project root resolution.

Project Structure:
    StarshipOS/
    ├── .starship/
    │   ├── starship-dev.properties   # Build and clean flags
    │   ├── downloads/                # Fetched source archives
    │   └── logs/                     # Rotating orchestrator log
    ├── kernel/
    │   └── build/{arch}/             # Microkernel build output
    ├── userland/
    │   └── build/{arch}/             # Userland build output
    ├── runtime/
    │   └── build/{arch}/             # Managed runtime build output
    └── target/
        ├── l4re-modules/             # Image staging tree
        └── starship-{arch}.iso       # Bootable images
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .errors import RootCreationFailed
from .settings import DEFAULT_PROJECT_NAME

STATE_DIR_NAME = ".starship"


@dataclass(frozen=True)
class ProjectRoot:
    """Resolved project location.

    Attributes:
        base_dir: Directory the orchestrator was invoked from
        path: Project root directory
        name: Expected project name
    """

    base_dir: Path
    path: Path
    name: str

    @property
    def state_dir(self) -> Path:
        """Internal state directory."""
        return self.path / STATE_DIR_NAME

    @property
    def downloads_dir(self) -> Path:
        return self.state_dir / "downloads"

    @property
    def log_file(self) -> Path:
        return self.state_dir / "logs" / "starship.log"

    @property
    def target_dir(self) -> Path:
        """Directory for final image artifacts."""
        return self.path / "target"

    def component_dir(self, name: str) -> Path:
        return self.path / name


class ProjectRootResolver:
    """Determines the project root and ensures its state directory exists."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.log = logger or logging.getLogger(__name__)

    def resolve(
        self, current_dir: Optional[Path] = None, project_name: str = DEFAULT_PROJECT_NAME
    ) -> ProjectRoot:
        """Resolve the project root.

        If the current directory is already named after the project it is the
        root. Otherwise a subdirectory with the project name is used, and
        created if needed.

        Args:
            current_dir: Invocation directory (defaults to the working directory)
            project_name: Expected project directory name

        Returns:
            ProjectRoot

        Raises:
            RootCreationFailed: If a directory cannot be created
        """
        base_dir = Path(current_dir if current_dir is not None else Path.cwd()).resolve()

        if base_dir.name == project_name:
            root_path = base_dir
        else:
            root_path = base_dir / project_name
            self._mkdir(root_path)

        root = ProjectRoot(base_dir=base_dir, path=root_path, name=project_name)
        self._mkdir(root.state_dir)
        self.log.debug(f"Project root: {root.path}")
        return root

    def _mkdir(self, path: Path) -> None:
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise RootCreationFailed(f"Failed to create directory {path}: {e}") from e
        if not path.is_dir():
            raise RootCreationFailed(f"Not a directory: {path}")
