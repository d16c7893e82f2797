"""
Bootable image creation.

Packs the image staging tree `target/l4re-modules/` into
`target/starship-<arch>.iso` with mkisofs.
"""

import logging
from pathlib import Path
from typing import Optional

from ..architecture import Architecture
from ..build.command_runner import Command, CommandRunner
from ..errors import ImageError
from ..project import ProjectRoot

MODULES_DIR_NAME = "l4re-modules"


def iso_path(root: ProjectRoot, architecture: Architecture) -> Path:
    """Location of the bootable image for an architecture."""
    return root.target_dir / f"starship-{architecture.value}.iso"


class IsoBuilder:
    """Builds the bootable ISO image of a project."""

    def __init__(
        self,
        root: ProjectRoot,
        runner: Optional[CommandRunner] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.root = root
        self.log = logger or logging.getLogger(__name__)
        self.runner = runner or CommandRunner(logger=self.log)

    @property
    def modules_dir(self) -> Path:
        return self.root.target_dir / MODULES_DIR_NAME

    def build(self, architecture: Architecture = Architecture.X86_64) -> Path:
        """Create the ISO image.

        Args:
            architecture: Architecture named in the image file

        Returns:
            Path to the created image

        Raises:
            ImageError: If the staging tree is missing or mkisofs fails
        """
        if not self.modules_dir.exists():
            raise ImageError(f"Image staging directory does not exist: {self.modules_dir}")
        if not self.modules_dir.is_dir():
            raise ImageError(f"Image staging path is not a directory: {self.modules_dir}")

        output = iso_path(self.root, architecture)
        command = Command(
            [
                "mkisofs",
                "-quiet",
                "-R",
                "-o",
                str(output.relative_to(self.root.path)),
                str(self.modules_dir.relative_to(self.root.path)),
            ],
            self.root.path,
        )

        result = self.runner.run(command)
        if not result.success:
            raise ImageError(f"mkisofs failed with exit code {result.returncode}")

        self.log.info(f"ISO image created: {output}")
        return output
