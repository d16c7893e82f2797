"""
Build orchestration for Starship projects.

This module coordinates the build of the operating system components,
driven by the flags in the project's properties file:
- Flag lookup (component flag, then per-architecture flags)
- Directory gate (skip architectures whose build/<arch> exists)
- Per-architecture pipeline runs
- Dirty-flag propagation for failed builds

Example usage:
    orchestrator = BuildOrchestrator(root, store, settings)
    reports = orchestrator.build_core()
    if any(report.failed for report in reports):
        print("Run `starship smart-clean` before rebuilding")
"""

import logging
from typing import Iterable, List, Optional

from ..config.flag_store import BuildFlagSet, FlagStore
from ..log import log_banner
from ..project import ProjectRoot
from ..settings import Settings
from .command_runner import CommandRunner
from .components import COMPONENTS, BuildContext, ComponentSpec
from .gate import BuildGate
from .outcome import BuildOutcome, ComponentReport
from .pipeline import BuildPipeline
from .propagator import CleanFlagPropagator


class BuildOrchestrator:
    """
    Builds components for every architecture enabled in the flags.

    Flags are read once per request and passed down explicitly; the
    orchestrator keeps no flag state between requests. Components are built
    one after another and a failing component does not stop the next one.
    """

    def __init__(
        self,
        root: ProjectRoot,
        store: FlagStore,
        settings: Optional[Settings] = None,
        context: BuildContext = BuildContext.STANDARD,
        runner: Optional[CommandRunner] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize build orchestrator.

        Args:
            root: Resolved project root
            store: Flag store of the project
            settings: Jobs hint and config artifact directory
            context: Where component sources are resolved from
            runner: Command runner shared by all pipeline runs
            logger: Logger to use (defaults to this module's logger)
        """
        self.root = root
        self.store = store
        self.settings = settings or Settings()
        self.context = context
        self.log = logger or logging.getLogger(__name__)
        self.runner = runner or CommandRunner(logger=self.log)
        self.gate = BuildGate(root, context=context, logger=self.log)
        self.propagator = CleanFlagPropagator(store, logger=self.log)

    def pipeline(self, context: Optional[BuildContext] = None) -> BuildPipeline:
        return BuildPipeline(
            self.root,
            settings=self.settings,
            context=context or self.context,
            runner=self.runner,
            logger=self.log,
        )

    def build_component(
        self,
        component: ComponentSpec,
        flags: Optional[BuildFlagSet] = None,
        context: Optional[BuildContext] = None,
    ) -> ComponentReport:
        """
        Build one component for each enabled architecture.

        Args:
            component: Component to build
            flags: Flag snapshot (loaded from the store when omitted)
            context: Override the orchestrator's build context

        Returns:
            ComponentReport with one outcome per attempted architecture
        """
        if flags is None:
            flags = self.store.load()

        if not flags.get(component.build_flag):
            self.log.info(f"{component.build_flag}=false, skipping {component.title}")
            return ComponentReport(component.name, enabled=False)

        pipeline = self.pipeline(context)
        outcomes: List[BuildOutcome] = []

        for architecture in component.architectures:
            flag = component.architecture_flag(architecture)
            if not flags.architecture_enabled(component.build_flag, architecture):
                self.log.debug(f"{flag} is not enabled")
                continue

            if not self.gate.should_build(component, architecture, context):
                outcomes.append(BuildOutcome.skipped(component.name, architecture, "already built"))
                continue

            log_banner(self.log, f"Building {component.title} {architecture}")
            outcome = pipeline.build(component, architecture)
            self.propagator.on_outcome(component, outcome)
            outcomes.append(outcome)

        report = ComponentReport(component.name, enabled=True, outcomes=tuple(outcomes))
        if report.failed:
            self.log.warning(
                f"One or more {component.title} builds failed. {component.clean_flag}=true."
            )
        elif report.built:
            self.log.info(f"{component.title} build complete")
        return report

    def build_core(
        self,
        flags: Optional[BuildFlagSet] = None,
        components: Iterable[ComponentSpec] = COMPONENTS,
        context: Optional[BuildContext] = None,
    ) -> List[ComponentReport]:
        """
        Build all components in dependency order.

        Args:
            flags: Flag snapshot (loaded once from the store when omitted)
            components: Components to build, in order
            context: Override the orchestrator's build context

        Returns:
            One ComponentReport per component
        """
        if flags is None:
            flags = self.store.load()

        reports = []
        for component in components:
            reports.append(self.build_component(component, flags, context))
        return reports
