"""Build steps and build outcomes."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from ..architecture import Architecture
from ..errors import ErrorKind, PipelineError


class BuildStep(Enum):
    """Pipeline steps, in execution order."""

    VALIDATE = 1
    PREPARE = 2
    INSTALL_CONFIG = 3
    NORMALIZE = 4
    COMPILE = 5
    POST_PROCESS = 6

    @property
    def label(self) -> str:
        return self.name.lower().replace("_", "-")


class BuildStatus(Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class BuildOutcome:
    """Result of one pipeline run for a component/architecture pair.

    Outcomes are never persisted; a failed outcome is projected into the
    component's dirty flag by the propagator.
    """

    component: str
    architecture: Architecture
    status: BuildStatus
    step: Optional[BuildStep] = None
    exit_code: Optional[int] = None
    kind: Optional[ErrorKind] = None
    message: str = ""

    @property
    def success(self) -> bool:
        return self.status is BuildStatus.SUCCEEDED

    @property
    def failed(self) -> bool:
        return self.status is BuildStatus.FAILED

    @classmethod
    def succeeded(cls, component: str, architecture: Architecture) -> "BuildOutcome":
        return cls(component, architecture, BuildStatus.SUCCEEDED, message="Build successful")

    @classmethod
    def skipped(cls, component: str, architecture: Architecture, reason: str) -> "BuildOutcome":
        return cls(component, architecture, BuildStatus.SKIPPED, message=reason)

    @classmethod
    def from_error(
        cls, component: str, architecture: Architecture, error: PipelineError
    ) -> "BuildOutcome":
        return cls(
            component,
            architecture,
            BuildStatus.FAILED,
            step=error.step,
            exit_code=error.exit_code,
            kind=error.kind,
            message=str(error),
        )

    def describe(self) -> str:
        """One-line human readable summary."""
        head = f"{self.component} {self.architecture}: {self.status.value}"
        if self.failed:
            step = f"step {self.step.value} ({self.step.label})" if self.step else "unknown step"
            code = f", exit code {self.exit_code}" if self.exit_code is not None else ""
            return f"{head} at {step}{code}: {self.message}"
        if self.status is BuildStatus.SKIPPED:
            return f"{head} ({self.message})"
        return head


@dataclass(frozen=True)
class ComponentReport:
    """All outcomes of one component-level build request."""

    component: str
    enabled: bool
    outcomes: Tuple[BuildOutcome, ...] = field(default_factory=tuple)

    @property
    def failed(self) -> bool:
        """A component fails if any attempted architecture failed."""
        return any(outcome.failed for outcome in self.outcomes)

    @property
    def built(self) -> Tuple[BuildOutcome, ...]:
        return tuple(outcome for outcome in self.outcomes if outcome.success)
