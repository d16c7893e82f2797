"""
Image creation and emulation for Starship.

This module packs build output into bootable images and boots them in QEMU.
"""

from .emulator import EmulatorLauncher
from .iso import IsoBuilder, iso_path

__all__ = [
    "EmulatorLauncher",
    "IsoBuilder",
    "iso_path",
]
