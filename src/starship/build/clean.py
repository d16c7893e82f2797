"""
Clean orchestrator.

Consumes the dirty flags written by the propagator: every component
marked `clean<Stem>=true` has its build/ tree removed, then the flags are
reset. Deletion is depth-first (files before their directories) and the
first failure aborts the run without touching the flags, so the next run
retries the same components.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from ..config.flag_store import BuildFlagSet, FlagStore
from ..errors import DeleteFailed
from ..project import ProjectRoot
from .components import COMPONENTS, BuildContext, ComponentSpec


class CleanFlagSet:
    """View of the `clean<Stem>` keys of a BuildFlagSet."""

    def __init__(self, flags: BuildFlagSet, components: Sequence[ComponentSpec] = COMPONENTS):
        self.flags = flags
        self.components = tuple(components)

    def is_dirty(self, component: ComponentSpec) -> bool:
        return self.flags.get(component.clean_flag)

    def dirty_components(self) -> List[ComponentSpec]:
        """Components whose clean flag is true, in build order."""
        return [component for component in self.components if self.is_dirty(component)]

    def cleared(self) -> BuildFlagSet:
        """Flags with every dirty flag reset to false."""
        return self.flags.with_flags(
            {component.clean_flag: False for component in self.dirty_components()}
        )


@dataclass(frozen=True)
class CleanReport:
    """What a clean run did."""

    deleted: Tuple[str, ...] = field(default_factory=tuple)
    missing: Tuple[str, ...] = field(default_factory=tuple)
    reset_flags: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def noop(self) -> bool:
        """True when no component was dirty."""
        return not (self.deleted or self.missing or self.reset_flags)


def delete_tree(path: Path) -> int:
    """Delete a directory tree, files before directories.

    Args:
        path: Directory to remove

    Returns:
        Number of entries removed

    Raises:
        DeleteFailed: On the first entry that cannot be removed
    """
    removed = 0
    for dirpath, dirnames, filenames in os.walk(path, topdown=False):
        current = Path(dirpath)
        for name in filenames:
            _remove(current / name, is_dir=False)
            removed += 1
        for name in dirnames:
            entry = current / name
            # os.walk lists symlinks to directories as directories
            _remove(entry, is_dir=not entry.is_symlink())
            removed += 1
    _remove(path, is_dir=True)
    return removed + 1


def _remove(path: Path, is_dir: bool) -> None:
    try:
        if is_dir:
            path.rmdir()
        else:
            path.unlink()
    except OSError as e:
        raise DeleteFailed(f"Failed to delete {path}: {e}") from e


class CleanOrchestrator:
    """Removes the build output of dirty components and clears their flags."""

    def __init__(
        self,
        root: ProjectRoot,
        store: FlagStore,
        components: Iterable[ComponentSpec] = COMPONENTS,
        context: BuildContext = BuildContext.STANDARD,
        logger: Optional[logging.Logger] = None,
    ):
        self.root = root
        self.store = store
        self.components = tuple(components)
        self.context = context
        self.log = logger or logging.getLogger(__name__)

    def clean(self) -> CleanReport:
        """Run one clean pass.

        Returns:
            CleanReport; `noop` is true when nothing was dirty

        Raises:
            DeleteFailed: If an entry cannot be removed (flags untouched)
            StoreUnavailable: If the store cannot be read
            StoreWriteFailed: If the reset flags cannot be written
        """
        flags = self.store.load()
        clean_flags = CleanFlagSet(flags, self.components)
        dirty = clean_flags.dirty_components()

        if not dirty:
            self.log.info("No components marked for cleaning")
            return CleanReport()

        deleted: List[str] = []
        missing: List[str] = []
        for component in dirty:
            output_dir = component.output_dir(self.root, context=self.context)
            if not output_dir.exists():
                self.log.info(f"[{component.name}] Nothing to clean, {output_dir} does not exist")
                missing.append(component.name)
                continue

            self.log.warning(f"[{component.name}] Deleting {output_dir}")
            count = delete_tree(output_dir)
            self.log.info(f"[{component.name}] Removed {count} entries")
            deleted.append(component.name)

        reset = tuple(component.clean_flag for component in dirty)
        self.store.save(clean_flags.cleared())
        self.log.info(f"Reset {', '.join(reset)}")

        return CleanReport(deleted=tuple(deleted), missing=tuple(missing), reset_flags=reset)
