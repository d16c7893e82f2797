"""
Target architectures.

Every component is built independently per architecture. Names coming from
the properties file or the command line are matched case-insensitively
against the canonical name and a set of common aliases.
"""

from enum import Enum
from typing import Tuple


class Architecture(Enum):
    """Supported target architectures."""

    X86_64 = "x86_64"
    X86 = "x86"
    ARM = "arm"
    AARCH64 = "aarch64"

    @property
    def aliases(self) -> Tuple[str, ...]:
        """Alternative names accepted by from_name()."""
        return _ALIASES[self]

    @property
    def triplet(self) -> str:
        """GNU target triplet used when cross-configuring the runtime."""
        return _TRIPLETS[self]

    @property
    def l4_bin_dir(self) -> str:
        """Directory under the userland build's bin/ holding boot modules."""
        return _L4_BIN_DIRS[self]

    @property
    def qemu_binary(self) -> str:
        """QEMU system emulator for this architecture."""
        return _QEMU_BINARIES[self]

    @classmethod
    def from_name(cls, name: str) -> "Architecture":
        """Resolve an architecture from its canonical name or an alias.

        Args:
            name: Name such as 'x86_64', 'amd64', 'ARM' or 'arm64'

        Returns:
            Matching Architecture

        Raises:
            ValueError: If the name is not recognized
        """
        normalized = name.strip().lower()
        for arch in cls:
            if arch.value == normalized or normalized in arch.aliases:
                return arch
        raise ValueError(f"Unknown architecture: {name}")

    def __str__(self) -> str:
        return self.value


_ALIASES = {
    Architecture.X86_64: ("amd64",),
    Architecture.X86: ("i386", "i686"),
    Architecture.ARM: ("armhf", "armv7", "gnueabihf"),
    Architecture.AARCH64: ("arm64", "armv8"),
}

_TRIPLETS = {
    Architecture.X86_64: "x86_64-linux-gnu",
    Architecture.X86: "i686-linux-gnu",
    Architecture.ARM: "arm-linux-gnueabihf",
    Architecture.AARCH64: "aarch64-linux-gnu",
}

_L4_BIN_DIRS = {
    Architecture.X86_64: "amd64_gen",
    Architecture.X86: "x86_gen",
    Architecture.ARM: "arm_armv7a",
    Architecture.AARCH64: "arm64_armv8a",
}

_QEMU_BINARIES = {
    Architecture.X86_64: "qemu-system-x86_64",
    Architecture.X86: "qemu-system-i386",
    Architecture.ARM: "qemu-system-arm",
    Architecture.AARCH64: "qemu-system-aarch64",
}
