"""Error taxonomy for the Starship build orchestrator.

Pipeline errors (missing sources, missing config artifacts, failed child
processes) are converted into build outcomes by the pipeline so that sibling
architectures can still be attempted. Store, project-root and delete errors
abort the whole invocation.
"""

from enum import Enum
from typing import TYPE_CHECKING, Optional, Sequence

if TYPE_CHECKING:
    from .build.outcome import BuildStep


class ErrorKind(Enum):
    """Tag carried by failed build outcomes."""

    MISSING_SOURCE = "missing-source"
    MISSING_CONFIG_ARTIFACT = "missing-config-artifact"
    PROCESS_FAILED = "process-failed"


class StarshipError(Exception):
    """Base exception for all orchestrator errors."""

    pass


class PipelineError(StarshipError):
    """Error raised inside a pipeline step and caught per architecture."""

    kind: ErrorKind = ErrorKind.PROCESS_FAILED

    def __init__(
        self,
        message: str,
        step: Optional["BuildStep"] = None,
        exit_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.step = step
        self.exit_code = exit_code


class MissingSource(PipelineError):
    """A required source directory or input file does not exist."""

    kind = ErrorKind.MISSING_SOURCE


class MissingConfigArtifact(PipelineError):
    """No configuration artifact is bundled for a component/architecture."""

    kind = ErrorKind.MISSING_CONFIG_ARTIFACT


class ProcessFailed(PipelineError):
    """A child process exited with a non-zero status."""

    kind = ErrorKind.PROCESS_FAILED

    def __init__(
        self,
        step: Optional["BuildStep"],
        exit_code: int,
        command: Sequence[str] = (),
    ):
        self.command = list(command)
        label = step.label if step is not None else "command"
        cmd = " ".join(self.command)
        message = f"{label} failed with exit code {exit_code}"
        if cmd:
            message += f": {cmd}"
        super().__init__(message, step=step, exit_code=exit_code)


class StoreUnavailable(StarshipError):
    """Neither the external properties file nor the bundled default is readable."""

    pass


class StoreWriteFailed(StarshipError):
    """The properties file or its directory could not be written."""

    pass


class RootCreationFailed(StarshipError):
    """The project root or its state directory could not be created."""

    pass


class DeleteFailed(StarshipError):
    """A file or directory could not be removed during a clean run."""

    pass


class FetchError(StarshipError):
    """Fetching component sources failed."""

    pass


class ImageError(StarshipError):
    """The bootable image could not be produced or launched."""

    pass
