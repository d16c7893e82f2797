"""
Command-line interface for Starship.

This module provides the `starship` CLI tool for building the Starship OS
components, cleaning failed builds and booting the result.
"""

import argparse
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from starship import __version__
from starship.architecture import Architecture
from starship.build import (
    COMPONENTS,
    BuildContext,
    BuildOrchestrator,
    CleanOrchestrator,
    CommandRunner,
    get_component,
)
from starship.cli_utils import ErrorFormatter, FlagAssignmentParser, ReportPrinter
from starship.config import FlagStore
from starship.deploy import EmulatorLauncher, IsoBuilder
from starship.errors import StarshipError
from starship.log import setup_logging
from starship.packages import CodebaseFetcher
from starship.project import ProjectRoot, ProjectRootResolver
from starship.settings import Settings

log = logging.getLogger(__name__)


@dataclass
class ProjectArgs:
    """Options shared by all commands."""

    directory: Path
    project_name: Optional[str] = None
    jobs: Optional[int] = None
    config_dir: Optional[Path] = None
    bootstrap: bool = False
    verbose: bool = False

    @property
    def context(self) -> BuildContext:
        return BuildContext.BOOTSTRAP if self.bootstrap else BuildContext.STANDARD


@dataclass
class BuildArgs(ProjectArgs):
    """Arguments for the build commands."""

    components: Tuple[str, ...] = ()


@dataclass
class IsoArgs(ProjectArgs):
    """Arguments for the build-iso command."""

    architecture: Architecture = Architecture.X86_64


@dataclass
class RunArgs(ProjectArgs):
    """Arguments for the run command."""

    architecture: Architecture = Architecture.X86_64
    demo: Optional[str] = None


@dataclass
class FlagsArgs(ProjectArgs):
    """Arguments for the flags command."""

    assignments: List[str] = field(default_factory=list)


@dataclass
class Project:
    """Everything a command needs to operate on a project."""

    settings: Settings
    root: ProjectRoot
    store: FlagStore
    runner: CommandRunner


def open_project(args: ProjectArgs) -> Project:
    """Resolve settings and the project root, then start file logging.

    Raises:
        ValueError: If a setting is invalid
        RootCreationFailed: If the project root cannot be created
    """
    settings = Settings.resolve(
        project_name=args.project_name,
        jobs=args.jobs,
        config_dir=args.config_dir,
        verbose=args.verbose,
    )
    setup_logging(settings.verbose)
    root = ProjectRootResolver().resolve(args.directory, settings.project_name)
    setup_logging(settings.verbose, root.log_file)
    log.debug(f"Settings: {settings}")
    return Project(
        settings=settings,
        root=root,
        store=FlagStore(root.state_dir),
        runner=CommandRunner(),
    )


def _handle_error(error: Exception, verbose: bool) -> None:
    if isinstance(error, StarshipError):
        ErrorFormatter.handle_starship_error(error)
    elif isinstance(error, FileNotFoundError):
        ErrorFormatter.handle_file_not_found(error)
    elif isinstance(error, PermissionError):
        ErrorFormatter.handle_permission_error(error)
    elif isinstance(error, ValueError):
        ErrorFormatter.handle_invalid_setting(error)
    else:
        ErrorFormatter.handle_unexpected_error(error, verbose)


def initialize_command(args: ProjectArgs) -> None:
    """Fetch the codebase of a new project and build it.

    Run from the directory that holds (or will hold) the project.

    Examples:
        starship initialize                   # Fetch and build StarshipOS/
        starship initialize --project-name X  # Use X/ as the project directory
    """
    print(f"Starship Build System v{__version__}")
    print()

    try:
        project = open_project(args)
        flags = project.store.load()

        if flags.get("installToolchain"):
            log.info("installToolchain=true: install the toolchain with your system package manager")

        if flags.get("installCodebase"):
            fetcher = CodebaseFetcher(project.root, runner=project.runner)
            fetched = fetcher.fetch_all()
            if fetched:
                ErrorFormatter.print_success(f"Fetched sources: {', '.join(fetched)}")

        orchestrator = BuildOrchestrator(
            project.root,
            project.store,
            settings=project.settings,
            context=BuildContext.BOOTSTRAP,
            runner=project.runner,
        )
        reports = orchestrator.build_core(flags)
        ReportPrinter.print_components(reports)

        if any(report.failed for report in reports):
            ErrorFormatter.print_error(
                "Initialization failed!", "Run `starship smart-clean` before building again."
            )
            sys.exit(1)

        ErrorFormatter.print_success("Initialization complete!")
        sys.exit(0)

    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        _handle_error(e, args.verbose)


def build_command(args: BuildArgs) -> None:
    """Build components for every enabled architecture.

    Examples:
        starship build-core              # Kernel, userland, then runtime
        starship build-kernel -j 8       # Kernel only, 8 parallel jobs
        starship build-userland -v       # Verbose output
    """
    print(f"Starship Build System v{__version__}")
    print()

    try:
        project = open_project(args)
        components = [get_component(name) for name in args.components] or list(COMPONENTS)

        orchestrator = BuildOrchestrator(
            project.root,
            project.store,
            settings=project.settings,
            context=args.context,
            runner=project.runner,
        )
        reports = orchestrator.build_core(components=components)
        ReportPrinter.print_components(reports)

        failed = [report.component for report in reports if report.failed]
        if failed:
            ErrorFormatter.print_error(
                "Build failed!",
                f"Failed components: {', '.join(failed)}\n"
                + "Run `starship smart-clean` before building again.",
            )
            sys.exit(1)

        ErrorFormatter.print_success("Build successful!")
        sys.exit(0)

    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        _handle_error(e, args.verbose)


def smart_clean_command(args: ProjectArgs) -> None:
    """Delete the build output of components marked for cleaning.

    Examples:
        starship smart-clean
    """
    try:
        project = open_project(args)
        report = CleanOrchestrator(project.root, project.store, context=args.context).clean()
        ReportPrinter.print_clean(report)
        if not report.noop:
            ErrorFormatter.print_success("Clean complete!")
        sys.exit(0)

    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        _handle_error(e, args.verbose)


def build_iso_command(args: IsoArgs) -> None:
    """Pack target/l4re-modules into a bootable ISO image.

    Examples:
        starship build-iso
        starship build-iso --arch arm
    """
    try:
        project = open_project(args)
        image = IsoBuilder(project.root, runner=project.runner).build(args.architecture)
        ErrorFormatter.print_success(f"Image: {image}")
        sys.exit(0)

    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        _handle_error(e, args.verbose)


def run_command(args: RunArgs) -> None:
    """Boot the built image in QEMU.

    Examples:
        starship run                   # Boot target/starship-x86_64.iso
        starship run --demo hello      # Run the 'hello' userland example
    """
    try:
        project = open_project(args)
        launcher = EmulatorLauncher(project.root, runner=project.runner)
        exit_code = launcher.run(args.architecture, demo=args.demo)
        sys.exit(exit_code)

    except KeyboardInterrupt:
        # QEMU shares the terminal and received the same Ctrl-C
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        _handle_error(e, args.verbose)


def flags_command(args: FlagsArgs) -> None:
    """Show or edit the build flags of a project.

    Examples:
        starship flags                                # Print all flags
        starship flags --set buildKernel.arm=true     # Enable ARM kernel builds
    """
    try:
        project = open_project(args)
        flags = project.store.load()

        if args.assignments:
            for assignment in args.assignments:
                key, value = FlagAssignmentParser.parse(assignment)
                flags = flags.with_raw(key, value)
            project.store.save(flags)

        for key, value in flags.items():
            print(f"{key}={value}")
        sys.exit(0)

    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        _handle_error(e, args.verbose)


def _architecture(value: str) -> Architecture:
    try:
        return Architecture.from_name(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1: {number}")
    return number


def _common_options() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-C",
        "--directory",
        type=Path,
        default=None,
        help="Directory to run in (default: current directory)",
    )
    common.add_argument(
        "--project-name",
        default=None,
        help="Project directory name (default: $STARSHIP_PROJECT_NAME or StarshipOS)",
    )
    common.add_argument(
        "-j",
        "--jobs",
        type=_positive_int,
        default=None,
        help="Parallel jobs passed to compile steps (default: $STARSHIP_JOBS or CPU count)",
    )
    common.add_argument(
        "--config-dir",
        type=Path,
        default=None,
        help="Directory with <component>.config.<arch> files (default: bundled)",
    )
    common.add_argument(
        "--bootstrap",
        action="store_true",
        help="Resolve sources under <cwd>/<project-name>/ instead of <cwd>/",
    )
    common.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose output",
    )
    return common


BUILD_COMMANDS = {
    "build-core": (),
    "build-kernel": ("kernel",),
    "build-userland": ("userland",),
    "build-runtime": ("runtime",),
}


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="starship",
        description="Starship - Build orchestrator for the Starship OS",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"starship {__version__}",
    )

    common = _common_options()
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser(
        "initialize",
        parents=[common],
        help="Fetch the codebase of a new project and build it",
    )

    for name, components in BUILD_COMMANDS.items():
        what = components[0] if components else "kernel, userland and runtime"
        subparsers.add_parser(name, parents=[common], help=f"Build {what}")

    subparsers.add_parser(
        "smart-clean",
        parents=[common],
        help="Delete build output of components marked clean<Component>=true",
    )

    iso_parser = subparsers.add_parser(
        "build-iso",
        parents=[common],
        help="Create target/starship-<arch>.iso",
    )
    iso_parser.add_argument(
        "--arch",
        type=_architecture,
        default=Architecture.X86_64,
        help="Target architecture (default: x86_64)",
    )

    run_parser = subparsers.add_parser(
        "run",
        parents=[common],
        help="Boot the image in QEMU",
    )
    run_parser.add_argument(
        "--arch",
        type=_architecture,
        default=Architecture.X86_64,
        help="Target architecture (default: x86_64)",
    )
    run_parser.add_argument(
        "--demo",
        default=None,
        help="Run a userland example scenario instead of the ISO",
    )

    flags_parser = subparsers.add_parser(
        "flags",
        parents=[common],
        help="Show or edit build flags",
    )
    flags_parser.add_argument(
        "--set",
        dest="assignments",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Set a flag (repeatable)",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Starship - Build orchestrator for the Starship OS."""
    parser = create_parser()
    parsed_args = parser.parse_args(argv)

    # If no command specified, show help
    if not parsed_args.command:
        parser.print_help()
        sys.exit(0)

    common = dict(
        directory=parsed_args.directory or Path.cwd(),
        project_name=parsed_args.project_name,
        jobs=parsed_args.jobs,
        config_dir=parsed_args.config_dir,
        bootstrap=parsed_args.bootstrap,
        verbose=parsed_args.verbose,
    )

    if parsed_args.command == "initialize":
        initialize_command(ProjectArgs(**common))
    elif parsed_args.command in BUILD_COMMANDS:
        build_command(BuildArgs(components=BUILD_COMMANDS[parsed_args.command], **common))
    elif parsed_args.command == "smart-clean":
        smart_clean_command(ProjectArgs(**common))
    elif parsed_args.command == "build-iso":
        build_iso_command(IsoArgs(architecture=parsed_args.arch, **common))
    elif parsed_args.command == "run":
        run_command(RunArgs(architecture=parsed_args.arch, demo=parsed_args.demo, **common))
    elif parsed_args.command == "flags":
        flags_command(FlagsArgs(assignments=parsed_args.assignments, **common))


if __name__ == "__main__":
    main()
