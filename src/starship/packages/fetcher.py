"""
Codebase fetcher.

Populates a fresh project with component sources:

- kernel and userland are checked out with the `ham` manifest tool, which
  is cloned, built, used for `ham init` and `ham sync`, then removed again.
  The checkouts are renamed to the project's component directories
  (`fiasco/` -> `kernel/`, `l4/` -> `userland/`).
- runtime sources are downloaded as a tagged source archive and extracted
  into `runtime/`.

Component directories that already exist are never fetched again.
"""

import logging
import shutil
from pathlib import Path
from typing import List, Optional

from ..build.command_runner import Command, CommandRunner
from ..errors import FetchError
from ..project import ProjectRoot
from .downloader import ArchiveDownloader

HAM_REPO_URL = "https://github.com/kernkonzept/ham.git"
MANIFEST_REPO_URL = "https://github.com/kernkonzept/manifest.git"
RUNTIME_TAG = "jdk-21-ga"
RUNTIME_ARCHIVE_URL = "https://github.com/openjdk/jdk/archive/refs/tags/{tag}.tar.gz"

# Checkout directory created by `ham sync` -> component directory
HAM_CHECKOUTS = {
    "fiasco": "kernel",
    "l4": "userland",
}


class CodebaseFetcher:
    """Fetches component sources into the project root."""

    def __init__(
        self,
        root: ProjectRoot,
        runner: Optional[CommandRunner] = None,
        downloader: Optional[ArchiveDownloader] = None,
        runtime_tag: str = RUNTIME_TAG,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize fetcher.

        Args:
            root: Project root that receives the sources
            runner: Runner for git, make and ham
            downloader: Archive downloader for the runtime sources
            runtime_tag: Source tag of the managed runtime
            logger: Logger to use (defaults to this module's logger)
        """
        self.root = root
        self.log = logger or logging.getLogger(__name__)
        self.runner = runner or CommandRunner(logger=self.log)
        self.downloader = downloader or ArchiveDownloader(logger=self.log)
        self.runtime_tag = runtime_tag

    @property
    def runtime_archive_url(self) -> str:
        return RUNTIME_ARCHIVE_URL.format(tag=self.runtime_tag)

    def fetch_all(self) -> List[str]:
        """Fetch every missing component.

        Returns:
            Names of the component directories that were created

        Raises:
            FetchError: If any fetch step fails
        """
        fetched = self.fetch_l4_sources()
        if self.fetch_runtime():
            fetched.append("runtime")
        return fetched

    def fetch_l4_sources(self) -> List[str]:
        """Check out kernel and userland with the ham manifest tool.

        Returns:
            Component directories that were created

        Raises:
            FetchError: If a command fails or a checkout is missing
        """
        missing = [
            target
            for target in HAM_CHECKOUTS.values()
            if not self.root.component_dir(target).exists()
        ]
        if not missing:
            self.log.info("kernel and userland sources already present")
            return []

        root_dir = self.root.path
        ham_dir = root_dir / "ham"

        self.log.info("Installing ham manifest tool")
        if not ham_dir.exists():
            self._run(["git", "clone", HAM_REPO_URL, "ham"], root_dir)
        self._run(["make"], ham_dir)

        ham = ham_dir / "ham"
        if not ham.is_file():
            raise FetchError(f"ham executable not found: {ham}")

        self.log.info("Synchronizing kernel and userland sources")
        self._run([str(ham), "init", "-u", MANIFEST_REPO_URL], root_dir)
        self._run([str(ham), "sync"], root_dir)

        created = []
        for checkout, target in HAM_CHECKOUTS.items():
            target_dir = self.root.component_dir(target)
            if target_dir.exists():
                continue
            source_dir = root_dir / checkout
            if not source_dir.is_dir():
                raise FetchError(f"ham sync did not produce {source_dir}")
            try:
                source_dir.rename(target_dir)
            except OSError as e:
                raise FetchError(f"Failed to move {source_dir} to {target_dir}: {e}") from e
            self.log.info(f"Moved {checkout}/ -> {target}/")
            created.append(target)

        self._remove(ham_dir)
        self._remove(root_dir / ".ham")
        return created

    def fetch_runtime(self) -> bool:
        """Download and unpack the managed runtime sources.

        Returns:
            True if runtime/ was created

        Raises:
            FetchError: If download or extraction fails
        """
        runtime_dir = self.root.component_dir("runtime")
        if runtime_dir.exists():
            self.log.info(f"runtime sources already present in {runtime_dir}")
            return False

        staging = self.root.downloads_dir / f"{self.runtime_tag}-src"
        self._remove(staging)

        self.log.info(f"Fetching runtime sources ({self.runtime_tag})")
        self.downloader.download_and_extract(
            self.runtime_archive_url, self.root.downloads_dir, staging
        )

        # Source archives unpack into a single top-level directory
        entries = list(staging.iterdir())
        source = entries[0] if len(entries) == 1 and entries[0].is_dir() else staging
        try:
            shutil.move(str(source), str(runtime_dir))
        except OSError as e:
            raise FetchError(f"Failed to move {source} to {runtime_dir}: {e}") from e
        self._remove(staging)

        self.log.info(f"Runtime sources ready in {runtime_dir}")
        return True

    def _run(self, args: List[str], cwd: Path) -> None:
        result = self.runner.run(Command(args, cwd))
        if not result.success:
            raise FetchError(
                f"Command failed with exit code {result.returncode}: {result.command}"
            )

    def _remove(self, path: Path) -> None:
        if not path.exists():
            return
        try:
            shutil.rmtree(path)
        except OSError as e:
            raise FetchError(f"Failed to remove {path}: {e}") from e
