"""
Per-architecture build pipeline.

Runs the ordered build steps of one component for one architecture:

1. VALIDATE        required source directories exist
2. PREPARE         initialize the build area for the architecture
3. INSTALL_CONFIG  copy the bundled <component>.config.<arch> artifact
4. NORMALIZE       resolve defaults for unset configuration keys
5. COMPILE         build, with an opaque parallelism hint
6. POST_PROCESS    component specific hook (e.g. embed the kernel binary)

Each command step blocks until its child process exits; a non-zero exit
code stops the remaining steps. Failures are returned as a BuildOutcome so
the caller can move on to the next architecture.

Example usage:
    pipeline = BuildPipeline(root, settings)
    outcome = pipeline.build(KERNEL, Architecture.X86_64)
    if outcome.failed:
        print(outcome.describe())
"""

import logging
import shutil
from pathlib import Path
from typing import Optional

from ..architecture import Architecture
from ..errors import MissingConfigArtifact, MissingSource, PipelineError, ProcessFailed
from ..project import ProjectRoot
from ..settings import Settings
from .command_runner import CommandRunner
from .components import BuildContext, ComponentSpec, PostProcessHook, StepContext
from .outcome import BuildOutcome, BuildStep


class BuildPipeline:
    """Builds one component for one architecture."""

    def __init__(
        self,
        root: ProjectRoot,
        settings: Optional[Settings] = None,
        context: BuildContext = BuildContext.STANDARD,
        runner: Optional[CommandRunner] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize the pipeline.

        Args:
            root: Resolved project root
            settings: Parallelism hint and config artifact directory
            context: Where component sources are resolved from
            runner: Command runner (defaults to a real subprocess runner)
            logger: Logger to use (defaults to this module's logger)
        """
        self.root = root
        self.settings = settings or Settings()
        self.context = context
        self.log = logger or logging.getLogger(__name__)
        self.runner = runner or CommandRunner(logger=self.log)

    def build(self, component: ComponentSpec, architecture: Architecture) -> BuildOutcome:
        """Run all steps for a component/architecture pair.

        Args:
            component: Component to build
            architecture: Target architecture

        Returns:
            BuildOutcome; failed outcomes carry the step and exit code
        """
        rationale = component.disabled_architectures.get(architecture)
        if rationale:
            self.log.warning(f"[{component.name}] {architecture} is not yet supported: {rationale}")
            return BuildOutcome.skipped(component.name, architecture, f"not yet supported: {rationale}")

        ctx = component.step_context(self.root, self.context, architecture, self.settings.jobs)

        try:
            self._step(BuildStep.VALIDATE)
            self._validate(component, ctx)

            self._step(BuildStep.PREPARE)
            self._run_command(component, BuildStep.PREPARE, ctx)
            self._ensure_build_dir(ctx)

            self._step(BuildStep.INSTALL_CONFIG)
            self._install_config(component, ctx)

            self._step(BuildStep.NORMALIZE)
            self._run_command(component, BuildStep.NORMALIZE, ctx)

            self._step(BuildStep.COMPILE)
            self._run_command(component, BuildStep.COMPILE, ctx)

            hook = component.post_process
            if hook is not None:
                self._step(BuildStep.POST_PROCESS)
                self._post_process(component, hook, ctx)

        except PipelineError as e:
            outcome = BuildOutcome.from_error(component.name, architecture, e)
            self.log.error(f"[{component.name}] {outcome.describe()}")
            return outcome

        self.log.info(f"[{component.name}] Built {architecture} in {ctx.build_dir}")
        return BuildOutcome.succeeded(component.name, architecture)

    def _step(self, step: BuildStep) -> None:
        self.log.debug(f"[{step.value}/{len(BuildStep)}] {step.label}")

    def _validate(self, component: ComponentSpec, ctx: StepContext) -> None:
        required = [ctx.source_dir] + [ctx.source_dir / name for name in component.required_sources]
        for directory in required:
            if not directory.is_dir():
                raise MissingSource(
                    f"{component.title} source directory does not exist: {directory}",
                    step=BuildStep.VALIDATE,
                )
        for name in component.required_files:
            path = ctx.source_dir / name
            if not path.is_file():
                raise MissingSource(
                    f"{component.title} source file does not exist: {path}",
                    step=BuildStep.VALIDATE,
                )

    def _run_command(self, component: ComponentSpec, step: BuildStep, ctx: StepContext) -> None:
        try:
            command = component.command_for(step, ctx)
        except (OSError, ValueError) as e:
            raise PipelineError(f"Failed to assemble {step.label} command: {e}", step=step)

        result = self.runner.run(command)
        if not result.success:
            raise ProcessFailed(step, result.returncode, command.args)

    def _ensure_build_dir(self, ctx: StepContext) -> None:
        try:
            ctx.build_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PipelineError(
                f"Failed to create build directory {ctx.build_dir}: {e}", step=BuildStep.PREPARE
            )

    def _install_config(self, component: ComponentSpec, ctx: StepContext) -> Path:
        artifact = self.settings.config_dir / component.artifact_name(ctx.architecture)
        if not artifact.is_file():
            raise MissingConfigArtifact(
                f"No configuration artifact bundled for {component.name} {ctx.architecture}: {artifact.name}",
                step=BuildStep.INSTALL_CONFIG,
            )

        try:
            shutil.copyfile(artifact, ctx.config_path)
        except OSError as e:
            raise PipelineError(
                f"Failed to install {artifact.name} to {ctx.config_path}: {e}",
                step=BuildStep.INSTALL_CONFIG,
            )

        self.log.info(f"[{component.name}] Installed {artifact.name} -> {ctx.config_path}")
        return ctx.config_path

    def _post_process(
        self, component: ComponentSpec, hook: PostProcessHook, ctx: StepContext
    ) -> None:
        try:
            hook(ctx)
        except PipelineError:
            raise
        except OSError as e:
            raise PipelineError(f"Post-processing failed: {e}", step=BuildStep.POST_PROCESS)
        self.log.info(f"[{component.name}] Post-processing complete")
