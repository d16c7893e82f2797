"""Build system components for Starship."""

from .clean import CleanFlagSet, CleanOrchestrator, CleanReport
from .command_runner import Command, CommandResult, CommandRunner
from .components import (
    COMPONENTS,
    KERNEL,
    RUNTIME,
    USERLAND,
    BuildContext,
    ComponentSpec,
    get_component,
)
from .gate import BuildGate
from .orchestrator import BuildOrchestrator
from .outcome import BuildOutcome, BuildStatus, BuildStep, ComponentReport
from .pipeline import BuildPipeline
from .propagator import CleanFlagPropagator

__all__ = [
    "BuildContext",
    "BuildGate",
    "BuildOrchestrator",
    "BuildOutcome",
    "BuildPipeline",
    "BuildStatus",
    "BuildStep",
    "CleanFlagPropagator",
    "CleanFlagSet",
    "CleanOrchestrator",
    "CleanReport",
    "Command",
    "CommandResult",
    "CommandRunner",
    "ComponentReport",
    "ComponentSpec",
    "COMPONENTS",
    "KERNEL",
    "RUNTIME",
    "USERLAND",
    "get_component",
]
