"""Shared fixtures for the starship tests."""

import logging
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

import pytest

from starship.build.command_runner import Command, CommandResult
from starship.config import FlagStore
from starship.project import ProjectRoot, ProjectRootResolver


class FakeRunner:
    """Records commands instead of running them.

    Every command succeeds unless a failure rule matches its leading
    arguments. Hooks run before the result is returned, e.g. to create the
    files a real build would produce.
    """

    def __init__(self):
        self.commands: List[Command] = []
        self._failures: List[Tuple[List[str], int]] = []
        self._hooks: List[Tuple[List[str], Callable[[Command], None]]] = []

    @staticmethod
    def _matches(prefix: List[str], command: Command) -> bool:
        return command.args[: len(prefix)] == prefix

    def fail_on(self, prefix: Sequence[str], returncode: int = 2) -> None:
        self._failures.append((list(prefix), returncode))

    def on(self, prefix: Sequence[str], hook: Callable[[Command], None]) -> None:
        self._hooks.append((list(prefix), hook))

    def run(self, command: Command) -> CommandResult:
        self.commands.append(command)
        for prefix, hook in self._hooks:
            if self._matches(prefix, command):
                hook(command)
        for prefix, returncode in self._failures:
            if self._matches(prefix, command):
                return CommandResult(command, returncode)
        return CommandResult(command, 0)

    @property
    def args(self) -> List[List[str]]:
        return [command.args for command in self.commands]


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def project_root(tmp_path) -> ProjectRoot:
    """A resolved, empty StarshipOS project under tmp_path."""
    return ProjectRootResolver().resolve(tmp_path, "StarshipOS")


@pytest.fixture
def inner_root(tmp_path) -> ProjectRoot:
    """A project resolved from inside a directory already named StarshipOS.

    In the bootstrap context its sources live one level deeper, under
    StarshipOS/StarshipOS/.
    """
    invocation_dir = tmp_path / "StarshipOS"
    invocation_dir.mkdir(exist_ok=True)
    return ProjectRootResolver().resolve(invocation_dir, "StarshipOS")


@pytest.fixture
def store(project_root) -> FlagStore:
    return FlagStore(project_root.state_dir)


@pytest.fixture
def make_sources(project_root) -> Callable[..., Path]:
    """Create the source tree of a component."""

    def _make(
        name: str,
        subdirs: Sequence[str] = (),
        files: Sequence[str] = (),
        base: Optional[Path] = None,
    ) -> Path:
        source_dir = (base or project_root.path) / name
        source_dir.mkdir(parents=True, exist_ok=True)
        for subdir in subdirs:
            (source_dir / subdir).mkdir(parents=True, exist_ok=True)
        for filename in files:
            (source_dir / filename).write_text("#!/bin/sh\n")
        return source_dir

    return _make


@pytest.fixture(autouse=True)
def restore_root_handlers():
    """Drop handlers a CLI run attached to the root logger."""
    root_logger = logging.getLogger()
    before = list(root_logger.handlers)
    yield
    for handler in root_logger.handlers[:]:
        if handler not in before:
            root_logger.removeHandler(handler)
            handler.close()
