"""Unit tests for the directory-gated build gate."""

from starship.architecture import Architecture
from starship.build.components import KERNEL, RUNTIME, BuildContext
from starship.build.gate import BuildGate


class TestBuildGate:
    def test_builds_when_output_missing(self, project_root):
        gate = BuildGate(project_root)
        assert gate.should_build(KERNEL, Architecture.X86_64) is True
        assert gate.should_build(KERNEL) is True

    def test_skips_existing_architecture_output(self, project_root):
        (project_root.path / "kernel" / "build" / "x86_64").mkdir(parents=True)
        gate = BuildGate(project_root)

        assert gate.should_build(KERNEL, Architecture.X86_64) is False
        assert gate.should_build(KERNEL, Architecture.ARM) is True

    def test_component_level_check(self, project_root):
        (project_root.path / "runtime" / "build").mkdir(parents=True)
        gate = BuildGate(project_root)

        assert gate.should_build(RUNTIME) is False
        assert gate.should_build(KERNEL) is True

    def test_empty_directory_counts_as_built(self, project_root):
        # Existence only; a crashed build is skipped until cleaned
        output = project_root.path / "kernel" / "build" / "arm"
        output.mkdir(parents=True)
        assert not any(output.iterdir())

        assert BuildGate(project_root).should_build(KERNEL, Architecture.ARM) is False

    def test_bootstrap_context_checks_nested_output(self, inner_root):
        nested = inner_root.path / "StarshipOS" / "kernel" / "build" / "x86_64"
        nested.mkdir(parents=True)

        assert BuildGate(inner_root).should_build(KERNEL, Architecture.X86_64) is True
        bootstrap_gate = BuildGate(inner_root, context=BuildContext.BOOTSTRAP)
        assert bootstrap_gate.should_build(KERNEL, Architecture.X86_64) is False
        assert BuildGate(inner_root).should_build(KERNEL, Architecture.X86_64, BuildContext.BOOTSTRAP) is False
