"""Runtime settings for Starship.

Settings are resolved once per invocation. Precedence is: explicit value
(usually from the command line) > environment variable > default.

Environment variables:
    STARSHIP_PROJECT_NAME: Name of the project directory (default: StarshipOS)
    STARSHIP_JOBS: Parallelism hint passed to compile steps
    STARSHIP_CONFIG_DIR: Directory holding <component>.config.<arch> artifacts
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

import psutil

DEFAULT_PROJECT_NAME = "StarshipOS"

RESOURCES_DIR = Path(__file__).parent / "resources"
BUNDLED_CONFIG_DIR = RESOURCES_DIR / "configs"
BUNDLED_PROPERTIES = RESOURCES_DIR / "starship-dev.properties"


def default_jobs() -> int:
    """Number of processing units available, used as the `-j` hint."""
    count = psutil.cpu_count(logical=True)
    return count if count and count > 0 else 1


@dataclass(frozen=True)
class Settings:
    """Resolved settings for one orchestrator invocation."""

    project_name: str = DEFAULT_PROJECT_NAME
    jobs: int = 1
    config_dir: Path = BUNDLED_CONFIG_DIR
    verbose: bool = False

    @classmethod
    def resolve(
        cls,
        project_name: Optional[str] = None,
        jobs: Optional[int] = None,
        config_dir: Optional[Path] = None,
        verbose: bool = False,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "Settings":
        """Build settings from explicit values, the environment and defaults.

        Args:
            project_name: Explicit project name
            jobs: Explicit parallelism hint
            config_dir: Explicit config artifact directory
            verbose: Verbose output
            environ: Environment mapping (defaults to os.environ)

        Returns:
            Settings instance

        Raises:
            ValueError: If STARSHIP_JOBS is not a positive integer
        """
        env = os.environ if environ is None else environ

        if project_name is None:
            project_name = env.get("STARSHIP_PROJECT_NAME") or DEFAULT_PROJECT_NAME

        if jobs is None:
            env_jobs = env.get("STARSHIP_JOBS")
            if env_jobs:
                try:
                    jobs = int(env_jobs)
                except ValueError:
                    raise ValueError(f"STARSHIP_JOBS must be an integer, got: {env_jobs!r}")
            else:
                jobs = default_jobs()
        if jobs < 1:
            raise ValueError(f"Parallel jobs must be at least 1, got: {jobs}")

        if config_dir is None:
            env_dir = env.get("STARSHIP_CONFIG_DIR")
            config_dir = Path(env_dir) if env_dir else BUNDLED_CONFIG_DIR

        return cls(
            project_name=project_name,
            jobs=jobs,
            config_dir=Path(config_dir),
            verbose=verbose,
        )
