"""Command Runner.

Runs the external toolchain commands (make, configure, git, mkisofs, qemu)
as blocking child processes.

Design:
    - Wraps subprocess.run; the child inherits stdout/stderr, nothing is captured
    - No timeout and no cancellation: the caller blocks until the child exits
    - A missing executable is reported as exit code 127, like a shell would
"""

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

EXIT_NOT_FOUND = 127
EXIT_NOT_EXECUTABLE = 126


@dataclass(frozen=True)
class Command:
    """A command line and the directory it runs in."""

    args: List[str]
    cwd: Path
    env: Dict[str, str] = field(default_factory=dict)

    def __str__(self) -> str:
        return shlex.join(self.args)


@dataclass(frozen=True)
class CommandResult:
    """Exit status of a finished command."""

    command: Command
    returncode: int

    @property
    def success(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """Executes commands with inherited standard streams."""

    def __init__(
        self,
        extra_env: Optional[Mapping[str, str]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize command runner.

        Args:
            extra_env: Variables added to the environment of every command
            logger: Logger to use (defaults to this module's logger)
        """
        self.extra_env = dict(extra_env or {})
        self.log = logger or logging.getLogger(__name__)

    def run(self, command: Command) -> CommandResult:
        """Run a command and wait for it to exit.

        Args:
            command: Command to execute

        Returns:
            CommandResult with the child's exit code
        """
        self.log.info(f"$ {command}  (in {command.cwd})")

        if not command.cwd.is_dir():
            self.log.error(f"Working directory does not exist: {command.cwd}")
            return CommandResult(command, EXIT_NOT_FOUND)

        env = None
        if self.extra_env or command.env:
            env = {**os.environ, **self.extra_env, **command.env}

        try:
            completed = subprocess.run(command.args, cwd=str(command.cwd), env=env, check=False)
        except FileNotFoundError:
            self.log.error(f"Command not found on PATH: {command.args[0]}")
            return CommandResult(command, EXIT_NOT_FOUND)
        except PermissionError:
            self.log.error(f"Command is not executable: {command.args[0]}")
            return CommandResult(command, EXIT_NOT_EXECUTABLE)

        if completed.returncode != 0:
            self.log.debug(f"Exit code {completed.returncode}: {command}")
        return CommandResult(command, completed.returncode)

    def run_args(self, args: Sequence[str], cwd: Path) -> CommandResult:
        """Convenience wrapper around run()."""
        return self.run(Command(list(args), Path(cwd)))
