"""
Persisted build/clean flags.

The flags live in a flat properties file inside the project's state
directory:

    .starship/starship-dev.properties

Example:
    # Starship Development Updated Properties
    buildKernel=true
    buildKernel.x86_64=true
    cleanKernel=false

Keys are dot-separated namespaces (`component`, `component.architecture`).
Any key missing from the file reads as false. Keys this module does not know
about are kept and written back unchanged.

Usage:
    store = FlagStore(project_root.state_dir)
    flags = store.load()
    if flags.get("buildKernel"):
        ...
    store.save(flags.with_flag("cleanKernel", True))
"""

import configparser
import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from ..architecture import Architecture
from ..errors import StoreUnavailable, StoreWriteFailed
from ..settings import BUNDLED_PROPERTIES

PROPERTIES_FILENAME = "starship-dev.properties"
HEADER = "Starship Development Updated Properties"

# Properties files are ISO-8859-1, as written by the configuration editor
ENCODING = "latin-1"

# Section name used to feed the section-less file to configparser
_SECTION = "starship"


def parse_bool(value: Optional[str]) -> bool:
    """Interpret a raw property value: only 'true' (any case) is true."""
    return value is not None and value.strip().lower() == "true"


def format_bool(value: bool) -> str:
    return "true" if value else "false"


class BuildFlagSet:
    """Immutable snapshot of the flags in the properties file.

    Values are kept as raw strings so unknown, non-boolean keys survive a
    load/save cycle. Mutating helpers return a new instance.
    """

    def __init__(self, values: Optional[Mapping[str, str]] = None):
        self._values: Dict[str, str] = dict(values or {})

    def get(self, key: str) -> bool:
        """Return the boolean value of a flag, false when absent."""
        return parse_bool(self._values.get(key))

    def raw(self, key: str) -> Optional[str]:
        """Return the raw string value of a key, or None."""
        return self._values.get(key)

    def architecture_enabled(self, key: str, architecture: Architecture) -> bool:
        """Check an architecture flag such as `buildKernel.x86_64`.

        The suffix is matched with Architecture.from_name(), so
        `buildKernel.ARM` and `buildKernel.armhf` both enable ARM.

        Args:
            key: Flag prefix (e.g. 'buildKernel')
            architecture: Architecture to look up

        Returns:
            True if any matching architecture key is true
        """
        prefix = f"{key}."
        for name, value in self._values.items():
            if not name.startswith(prefix):
                continue
            try:
                arch = Architecture.from_name(name[len(prefix):])
            except ValueError:
                continue
            if arch is architecture and parse_bool(value):
                return True
        return False

    def with_flag(self, key: str, value: bool) -> "BuildFlagSet":
        """Return a copy with one flag set."""
        return self.with_flags({key: value})

    def with_flags(self, changes: Mapping[str, bool]) -> "BuildFlagSet":
        """Return a copy with several flags set."""
        values = dict(self._values)
        for key, value in changes.items():
            values[key] = format_bool(value)
        return BuildFlagSet(values)

    def with_raw(self, key: str, value: str) -> "BuildFlagSet":
        """Return a copy with a raw string value set."""
        values = dict(self._values)
        values[key] = value
        return BuildFlagSet(values)

    def keys(self) -> List[str]:
        return list(self._values)

    def items(self) -> Iterator[Tuple[str, str]]:
        return iter(list(self._values.items()))

    def as_dict(self) -> Dict[str, str]:
        return dict(self._values)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BuildFlagSet):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        return f"BuildFlagSet({self._values!r})"


class PropertiesCodec:
    """Reads and writes the flat key=value properties format."""

    @staticmethod
    def parse(text: str, source: str = "<string>") -> Dict[str, str]:
        """Parse properties text into an ordered dict.

        Args:
            text: File contents
            source: Name used in error messages

        Returns:
            Mapping of key to raw value, in file order

        Raises:
            configparser.Error: If the text cannot be parsed
        """
        parser = configparser.ConfigParser(
            delimiters=("=", ":"),
            comment_prefixes=("#", "!"),
            interpolation=None,
            strict=False,
        )
        # Keep key case: flags are camelCase
        parser.optionxform = str  # type: ignore[assignment,method-assign]
        # Indented keys are plain keys, not value continuations
        lines = "\n".join(line.strip() for line in text.splitlines())
        parser.read_string(f"[{_SECTION}]\n{lines}", source=source)
        return {key: value.strip() for key, value in parser.items(_SECTION)}

    @staticmethod
    def render(values: Mapping[str, str], header: str = HEADER) -> str:
        """Render values as properties text with a header comment."""
        lines = [f"# {header}", f"# {datetime.now().strftime('%a %b %d %H:%M:%S %Y')}"]
        for key, value in values.items():
            lines.append(f"{key}={value}")
        return "\n".join(lines) + "\n"


class FlagStore:
    """Loads and saves the BuildFlagSet of one project.

    The store is the single writer of the properties file. Every save
    rewrites the whole file through a temporary file that replaces the
    target, so readers never see a partial write.
    """

    def __init__(
        self,
        state_dir: Path,
        default_template: Path = BUNDLED_PROPERTIES,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize the store.

        Args:
            state_dir: Project state directory (usually <root>/.starship)
            default_template: Bundled properties used on first run
            logger: Logger to use (defaults to this module's logger)
        """
        self.state_dir = Path(state_dir)
        self.default_template = Path(default_template)
        self.log = logger or logging.getLogger(__name__)

    @property
    def path(self) -> Path:
        """Location of the external properties file."""
        return self.state_dir / PROPERTIES_FILENAME

    def load(self) -> BuildFlagSet:
        """Load flags, materializing the bundled default on first run.

        Returns:
            BuildFlagSet read from disk

        Raises:
            StoreUnavailable: If no readable properties source exists
            StoreWriteFailed: If the default cannot be copied into place
        """
        if self.path.exists():
            values = self._read(self.path)
            self.log.debug(f"Loaded properties from {self.path}")
            return BuildFlagSet(values)

        if not self.default_template.is_file():
            raise StoreUnavailable(
                f"No properties file at {self.path} and bundled default "
                + f"{self.default_template} is missing"
            )

        values = self._read(self.default_template)
        self.log.info(f"Loaded bundled default properties: {self.default_template.name}")

        try:
            self.state_dir.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(self.default_template, self.path)
        except OSError as e:
            raise StoreWriteFailed(f"Failed to materialize {self.path}: {e}") from e

        self.log.info(f"Stored default properties at {self.path}")
        return BuildFlagSet(values)

    def save(self, flags: BuildFlagSet) -> None:
        """Rewrite the properties file with the complete flag set.

        Args:
            flags: Flags to persist

        Raises:
            StoreWriteFailed: If the directory or file cannot be written
        """
        temp_file = self.path.with_suffix(".tmp")
        try:
            self.state_dir.mkdir(parents=True, exist_ok=True)
            temp_file.write_text(
                PropertiesCodec.render(flags.as_dict()), encoding=ENCODING, errors="backslashreplace"
            )
            temp_file.replace(self.path)
        except OSError as e:
            if temp_file.exists():
                temp_file.unlink()
            raise StoreWriteFailed(f"Failed to write {self.path}: {e}") from e

        self.log.debug(f"Properties stored at {self.path}")

    def set_flags(self, changes: Mapping[str, bool]) -> BuildFlagSet:
        """Load, apply changes and save in one cycle.

        Args:
            changes: Flags to set

        Returns:
            The persisted BuildFlagSet
        """
        flags = self.load().with_flags(changes)
        self.save(flags)
        return flags

    def _read(self, path: Path) -> Dict[str, str]:
        try:
            text = path.read_text(encoding=ENCODING)
        except OSError as e:
            raise StoreUnavailable(f"Failed to read {path}: {e}") from e

        try:
            return PropertiesCodec.parse(text, source=str(path))
        except configparser.Error as e:
            raise StoreUnavailable(f"Failed to parse {path}: {e}") from e
