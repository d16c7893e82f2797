"""
Emulator launcher.

Boots a built image in QEMU, or runs one of the userland example
scenarios through the userland build's own `make qemu` target.
"""

import logging
from pathlib import Path
from typing import Optional

from ..architecture import Architecture
from ..build.command_runner import Command, CommandRunner
from ..build.components import KERNEL, USERLAND
from ..errors import ImageError
from ..project import ProjectRoot
from .iso import iso_path

MEMORY_MB = 512


class EmulatorLauncher:
    """Runs QEMU against the project's build output."""

    def __init__(
        self,
        root: ProjectRoot,
        runner: Optional[CommandRunner] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.root = root
        self.log = logger or logging.getLogger(__name__)
        self.runner = runner or CommandRunner(logger=self.log)

    def kernel_image(self, architecture: Architecture) -> Path:
        return KERNEL.output_dir(self.root, architecture) / "fiasco"

    def command(self, architecture: Architecture, demo: Optional[str] = None) -> Command:
        """Assemble the launch command.

        Args:
            architecture: Architecture to emulate
            demo: Name of a userland example scenario to run instead of the ISO

        Returns:
            Command to execute in the userland build directory
        """
        userland_build = USERLAND.output_dir(self.root, architecture)

        if demo:
            search_path = ":".join(
                [
                    str(KERNEL.output_dir(self.root, architecture)),
                    str(self.root.component_dir(USERLAND.name) / "conf" / "examples"),
                ]
            )
            return Command(
                ["make", f"E={demo}", "qemu", f"MODULE_SEARCH_PATH={search_path}"],
                userland_build,
            )

        return Command(
            [
                architecture.qemu_binary,
                "-kernel",
                str(self.kernel_image(architecture)),
                "-cdrom",
                str(iso_path(self.root, architecture)),
                "-serial",
                "mon:stdio",
                "-m",
                str(MEMORY_MB),
                "-no-reboot",
            ],
            userland_build,
        )

    def run(self, architecture: Architecture = Architecture.X86_64, demo: Optional[str] = None) -> int:
        """Launch the emulator and wait for it to exit.

        Args:
            architecture: Architecture to emulate
            demo: Optional userland example scenario

        Returns:
            Exit code of the emulator

        Raises:
            ImageError: If the build output needed to boot is missing
        """
        userland_build = USERLAND.output_dir(self.root, architecture)
        if not userland_build.is_dir():
            raise ImageError(f"Userland build directory does not exist: {userland_build}")

        if not demo:
            for required in (self.kernel_image(architecture), iso_path(self.root, architecture)):
                if not required.is_file():
                    raise ImageError(f"Required boot file not found: {required}")

        result = self.runner.run(self.command(architecture, demo))
        if not result.success:
            self.log.error(f"Emulator exited with code {result.returncode}")
        return result.returncode
