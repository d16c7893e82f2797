"""CLI utility functions for Starship.

Shared by the `starship` commands:
- Coloured error, warning and success lines with exit codes
- Build and clean summaries
- `flags --set key=value` parsing
"""

import sys
import traceback
from typing import Iterable, List, Tuple

from .build.outcome import BuildStatus, ComponentReport
from .build.clean import CleanReport
from .errors import StarshipError


class ErrorFormatter:
    """Prints ✓/✗ status lines and maps exceptions to exit codes."""

    # ANSI color codes
    RED = "\033[1;31m"
    GREEN = "\033[1;32m"
    YELLOW = "\033[1;33m"
    RESET = "\033[0m"

    @staticmethod
    def print_error(title: str, message: str) -> None:
        """Print a red ✗ title followed by details.

        Args:
            title: Error title (e.g., "Build failed")
            message: Details, may span several lines
        """
        print()
        print(f"{ErrorFormatter.RED}✗ {title}{ErrorFormatter.RESET}")
        print()
        print(message)
        print()

    @staticmethod
    def print_success(message: str) -> None:
        print()
        print(f"{ErrorFormatter.GREEN}✓ {message}{ErrorFormatter.RESET}")

    @staticmethod
    def print_warning(message: str) -> None:
        print()
        print(f"{ErrorFormatter.YELLOW}✗ {message}{ErrorFormatter.RESET}")

    @staticmethod
    def handle_starship_error(error: StarshipError) -> None:
        """Handle an orchestrator error and exit with status 1.

        Args:
            error: The error to report
        """
        title = type(error).__name__
        ErrorFormatter.print_error(f"Error: {title}", str(error))
        sys.exit(1)

    @staticmethod
    def handle_invalid_setting(error: ValueError) -> None:
        ErrorFormatter.print_error("Error: Invalid setting", str(error))
        sys.exit(2)

    @staticmethod
    def handle_file_not_found(error: FileNotFoundError) -> None:
        """Report a missing file and exit with status 1.

        Args:
            error: The error raised while opening the file
        """
        ErrorFormatter.print_error("Error: File not found", str(error))
        print("Make sure you are in a Starship project directory or its parent directory.")
        sys.exit(1)

    @staticmethod
    def handle_permission_error(error: PermissionError) -> None:
        ErrorFormatter.print_error("Error: Permission denied", str(error))
        sys.exit(1)

    @staticmethod
    def handle_keyboard_interrupt() -> None:
        """Handle KeyboardInterrupt; flags stay as last stored."""
        ErrorFormatter.print_warning("Interrupted")
        sys.exit(130)  # Standard exit code for SIGINT

    @staticmethod
    def handle_unexpected_error(error: Exception, verbose: bool = False) -> None:
        """Report an error outside the StarshipError taxonomy and exit with status 1.

        Args:
            error: The exception that escaped the command
            verbose: Also print the traceback (`-v`)
        """
        message = f"{type(error).__name__}: {error}"
        ErrorFormatter.print_error("Unexpected error", message)

        if verbose:
            print("Traceback:")
            print(traceback.format_exc())

        sys.exit(1)


class ReportPrinter:
    """Prints build and clean reports."""

    MARKS = {
        BuildStatus.SUCCEEDED: "✓",
        BuildStatus.FAILED: "✗",
        BuildStatus.SKIPPED: "-",
    }

    @staticmethod
    def format_component(report: ComponentReport) -> List[str]:
        """Render one component report as indented lines."""
        if not report.enabled:
            return [f"{report.component}: disabled"]

        lines = [f"{report.component}:"]
        if not report.outcomes:
            lines.append("  no architectures enabled")
        for outcome in report.outcomes:
            lines.append(f"  {ReportPrinter.MARKS[outcome.status]} {outcome.describe()}")
        return lines

    @staticmethod
    def print_components(reports: Iterable[ComponentReport]) -> None:
        print()
        print("Build Summary:")
        for report in reports:
            for line in ReportPrinter.format_component(report):
                print(f"  {line}")

    @staticmethod
    def print_clean(report: CleanReport) -> None:
        if report.noop:
            print("Nothing to clean.")
            return
        for name in report.deleted:
            print(f"  deleted {name}/build")
        for name in report.missing:
            print(f"  {name}/build already absent")
        print(f"  reset {', '.join(report.reset_flags)}")


class FlagAssignmentParser:
    """Parses `key=value` assignments given on the command line."""

    @staticmethod
    def parse(assignment: str) -> Tuple[str, str]:
        """Split an assignment.

        Args:
            assignment: Text such as 'buildKernel.arm=true'

        Returns:
            (key, value) with surrounding whitespace removed

        Raises:
            ValueError: If there is no '=' or the key is empty
        """
        key, sep, value = assignment.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValueError(f"Expected key=value, got: {assignment!r}")
        return key, value.strip()
