"""
Component descriptors.

Each buildable component (microkernel, userland, managed runtime) is
described by a ComponentSpec: where its sources live, which source
subdirectories must exist, where its configuration artifact is installed
and which commands prepare, normalize and compile it. The pipeline runs the
same ordered steps for every component; only these descriptors differ.
"""

import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from ..architecture import Architecture
from ..errors import MissingSource
from ..project import ProjectRoot
from .command_runner import Command
from .outcome import BuildStep


class BuildContext(Enum):
    """Where component sources are resolved from.

    STANDARD: invoked inside the project, sources at <root>/<component>
    BOOTSTRAP: invoked from the directory that holds the project (the
        initialize flow), sources at <cwd>/<project-name>/<component>
    """

    STANDARD = "standard"
    BOOTSTRAP = "bootstrap"


@dataclass(frozen=True)
class StepContext:
    """Paths and parameters handed to command factories and hooks."""

    architecture: Architecture
    sources_root: Path
    source_dir: Path
    build_dir: Path
    config_path: Path
    jobs: int

    @property
    def build_subdir(self) -> str:
        """Build directory relative to the source directory (`build/<arch>`)."""
        return f"build/{self.architecture.value}"


CommandFactory = Callable[[StepContext], Command]
PostProcessHook = Callable[[StepContext], None]


@dataclass(frozen=True, eq=False)
class ComponentSpec:
    """Static descriptor of one buildable component."""

    name: str
    flag_stem: str
    title: str
    required_sources: Tuple[str, ...]
    config_destination: str
    prepare: CommandFactory
    normalize: CommandFactory
    compile: CommandFactory
    post_process: Optional[PostProcessHook] = None
    required_files: Tuple[str, ...] = ()
    architectures: Tuple[Architecture, ...] = (Architecture.X86_64, Architecture.ARM)
    disabled_architectures: Mapping[Architecture, str] = field(default_factory=dict)

    @property
    def build_flag(self) -> str:
        return f"build{self.flag_stem}"

    @property
    def clean_flag(self) -> str:
        return f"clean{self.flag_stem}"

    def architecture_flag(self, architecture: Architecture) -> str:
        return f"{self.build_flag}.{architecture.value}"

    def artifact_name(self, architecture: Architecture) -> str:
        """Bundled config artifact name, `<component>.config.<arch>`."""
        return f"{self.name}.config.{architecture.value}"

    def sources_root(self, root: ProjectRoot, context: BuildContext) -> Path:
        """Directory that contains the component directories."""
        if context is BuildContext.BOOTSTRAP:
            return root.base_dir / root.name
        return root.path

    def source_dir(self, root: ProjectRoot, context: BuildContext) -> Path:
        return self.sources_root(root, context) / self.name

    def output_dir(
        self,
        root: ProjectRoot,
        architecture: Optional[Architecture] = None,
        context: BuildContext = BuildContext.STANDARD,
    ) -> Path:
        """Build output directory, shared by the pipeline, the gate and the cleaner.

        Args:
            root: Project root
            architecture: Per-architecture directory when given, else the
                component's whole build/ tree
            context: Where the component's sources are resolved from

        Returns:
            `<sources root>/<component>/build[/<arch>]`
        """
        build_root = self.source_dir(root, context) / "build"
        if architecture is None:
            return build_root
        return build_root / architecture.value

    def step_context(
        self, root: ProjectRoot, context: BuildContext, architecture: Architecture, jobs: int
    ) -> StepContext:
        build_dir = self.output_dir(root, architecture, context)
        return StepContext(
            architecture=architecture,
            sources_root=self.sources_root(root, context),
            source_dir=self.source_dir(root, context),
            build_dir=build_dir,
            config_path=build_dir / self.config_destination,
            jobs=jobs,
        )

    def command_for(self, step: BuildStep, ctx: StepContext) -> Command:
        factories: Dict[BuildStep, CommandFactory] = {
            BuildStep.PREPARE: self.prepare,
            BuildStep.NORMALIZE: self.normalize,
            BuildStep.COMPILE: self.compile,
        }
        return factories[step](ctx)


def read_option_lines(path: Path) -> List[str]:
    """Read one command-line option per line, skipping blanks and comments."""
    options = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            options.append(line)
    return options


# Kconfig-style components (microkernel and userland)

def _make_build_area(ctx: StepContext) -> Command:
    return Command(["make", f"B={ctx.build_subdir}"], ctx.source_dir)


def _make_olddefconfig(ctx: StepContext) -> Command:
    return Command(["make", "olddefconfig"], ctx.build_dir)


def _make_parallel(ctx: StepContext) -> Command:
    return Command(["make", f"-j{ctx.jobs}"], ctx.build_dir)


def kernel_binary_path(sources_root: Path, architecture: Architecture) -> Path:
    """Location of the microkernel image produced by the kernel build."""
    return sources_root / KERNEL.name / "build" / architecture.value / "fiasco"


def _userland_embed_kernel(ctx: StepContext) -> None:
    """Copy the built microkernel into the userland tree for image assembly."""
    source = kernel_binary_path(ctx.sources_root, ctx.architecture)
    target = ctx.build_dir / "bin" / ctx.architecture.l4_bin_dir / "l4f" / "fiasco"

    if not source.is_file():
        raise MissingSource(
            f"Kernel binary not found at {source}; build the kernel first",
            step=BuildStep.POST_PROCESS,
        )

    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(source, target)


# Managed runtime

def _runtime_prepare(ctx: StepContext) -> Command:
    return Command(["chmod", "755", "configure"], ctx.source_dir)


def _runtime_normalize(ctx: StepContext) -> Command:
    configure = ctx.source_dir / "configure"
    return Command(["bash", str(configure), *read_option_lines(ctx.config_path)], ctx.build_dir)


def _runtime_compile(ctx: StepContext) -> Command:
    return Command(["make", "images", f"JOBS={ctx.jobs}"], ctx.build_dir)


KERNEL = ComponentSpec(
    name="kernel",
    flag_stem="Kernel",
    title="Microkernel",
    required_sources=("src",),
    config_destination="globalconfig.out",
    prepare=_make_build_area,
    normalize=_make_olddefconfig,
    compile=_make_parallel,
)

USERLAND = ComponentSpec(
    name="userland",
    flag_stem="Userland",
    title="Userland",
    required_sources=("pkg",),
    config_destination=".config",
    prepare=_make_build_area,
    normalize=_make_olddefconfig,
    compile=_make_parallel,
    post_process=_userland_embed_kernel,
    disabled_architectures={
        Architecture.ARM: "ARM userland builds are deferred until the runtime can be cross-compiled for ARM",
    },
)

RUNTIME = ComponentSpec(
    name="runtime",
    flag_stem="Runtime",
    title="Managed Runtime",
    required_sources=("make", "src"),
    required_files=("configure",),
    config_destination="configure.options",
    prepare=_runtime_prepare,
    normalize=_runtime_normalize,
    compile=_runtime_compile,
)

# Dependency order: the userland embeds the kernel binary
COMPONENTS: Tuple[ComponentSpec, ...] = (KERNEL, USERLAND, RUNTIME)


def get_component(name: str) -> ComponentSpec:
    """Look up a component by name.

    Raises:
        KeyError: If no component has that name
    """
    for component in COMPONENTS:
        if component.name == name:
            return component
    raise KeyError(f"Unknown component: {name}")
