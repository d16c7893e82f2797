"""Unit tests for the build orchestrator."""

import logging

import pytest

from starship.architecture import Architecture
from starship.build.components import KERNEL, RUNTIME, USERLAND, BuildContext
from starship.build.orchestrator import BuildOrchestrator
from starship.build.outcome import BuildStatus, BuildStep
from starship.config import BuildFlagSet, FlagStore
from starship.settings import Settings


@pytest.fixture
def orchestrator(project_root, store, fake_runner):
    return BuildOrchestrator(project_root, store, settings=Settings(jobs=2), runner=fake_runner)


@pytest.fixture
def kernel_sources(make_sources):
    return make_sources("kernel", subdirs=("src",))


def kernel_flags(**extra):
    values = {"buildKernel": "true", "buildKernel.x86_64": "true", "buildKernel.arm": "false"}
    values.update(extra)
    return BuildFlagSet(values)


class TestBuildComponent:
    def test_component_flag_false_skips_everything(self, orchestrator, fake_runner):
        report = orchestrator.build_component(KERNEL, BuildFlagSet({"buildKernel": "false"}))

        assert report.enabled is False
        assert report.outcomes == ()
        assert fake_runner.commands == []

    def test_only_enabled_architectures_are_built(self, orchestrator, kernel_sources, fake_runner):
        report = orchestrator.build_component(KERNEL, kernel_flags())

        assert [o.architecture for o in report.outcomes] == [Architecture.X86_64]
        assert report.outcomes[0].success
        assert ["make", "-j2"] in fake_runner.args

    def test_existing_output_is_skipped(self, orchestrator, kernel_sources, fake_runner, project_root):
        (project_root.path / "kernel" / "build" / "x86_64").mkdir(parents=True)

        report = orchestrator.build_component(KERNEL, kernel_flags())

        assert report.outcomes[0].status is BuildStatus.SKIPPED
        assert fake_runner.commands == []
        assert not report.failed

    def test_compile_failure_sets_clean_flag(self, orchestrator, kernel_sources, fake_runner, store):
        store.load()
        fake_runner.fail_on(["make", "-j2"], returncode=2)

        report = orchestrator.build_component(KERNEL, kernel_flags())

        assert report.failed
        outcome = report.outcomes[0]
        assert outcome.step is BuildStep.COMPILE
        assert outcome.exit_code == 2
        assert store.load().get("cleanKernel") is True

    def test_failure_is_logged(self, orchestrator, fake_runner, caplog):
        with caplog.at_level(logging.WARNING):
            orchestrator.build_component(KERNEL, kernel_flags())

        assert "One or more Microkernel builds failed. cleanKernel=true." in caplog.text

    def test_architectures_are_independent(self, orchestrator, kernel_sources, fake_runner):
        fake_runner.fail_on(["make", "B=build/x86_64"], returncode=2)
        flags = kernel_flags(**{"buildKernel.arm": "true"})

        report = orchestrator.build_component(KERNEL, flags)

        x86, arm = report.outcomes
        assert x86.failed
        assert arm.success
        assert report.failed

    def test_disabled_architecture_does_not_dirty(self, orchestrator, make_sources, store):
        make_sources("userland", subdirs=("pkg",))
        flags = BuildFlagSet({"buildUserland": "true", "buildUserland.arm": "true"})

        report = orchestrator.build_component(USERLAND, flags)

        assert report.outcomes[0].status is BuildStatus.SKIPPED
        assert not report.failed
        assert store.load().get("cleanUserland") is False

    def test_flags_loaded_from_store_when_omitted(self, orchestrator, store, fake_runner):
        store.save(BuildFlagSet({"buildKernel": "false"}))

        report = orchestrator.build_component(KERNEL)

        assert report.enabled is False


class TestBuildCore:
    def test_builds_in_dependency_order(self, orchestrator, make_sources, fake_runner, project_root):
        make_sources("kernel", subdirs=("src",))
        make_sources("userland", subdirs=("pkg",))
        make_sources("runtime", subdirs=("make", "src"), files=("configure",))

        # The fake kernel build produces the binary the userland embeds
        def produce_kernel(command):
            if command.cwd == project_root.path / "kernel" / "build" / "x86_64":
                (command.cwd / "fiasco").write_bytes(b"kernel")

        fake_runner.on(["make", "-j2"], produce_kernel)
        flags = BuildFlagSet(
            {
                "buildKernel": "true",
                "buildKernel.x86_64": "true",
                "buildUserland": "true",
                "buildUserland.x86_64": "true",
                "buildRuntime": "true",
                "buildRuntime.x86_64": "true",
            }
        )

        reports = orchestrator.build_core(flags)

        assert [r.component for r in reports] == ["kernel", "userland", "runtime"]
        assert all(not r.failed for r in reports)
        assert fake_runner.args[-1] == ["make", "images", "JOBS=2"]

    def test_failed_component_does_not_stop_the_next(self, orchestrator, make_sources, fake_runner, store):
        make_sources("runtime", subdirs=("make", "src"), files=("configure",))
        flags = BuildFlagSet(
            {
                "buildKernel": "true",
                "buildKernel.x86_64": "true",
                "buildRuntime": "true",
                "buildRuntime.x86_64": "true",
            }
        )

        kernel, userland, runtime = orchestrator.build_core(flags)

        assert kernel.failed
        assert kernel.outcomes[0].step is BuildStep.VALIDATE
        assert userland.enabled is False
        assert runtime.outcomes[0].success
        stored = store.load()
        assert stored.get("cleanKernel") is True
        assert stored.get("cleanRuntime") is False

    def test_context_override(self, orchestrator, kernel_sources, fake_runner):
        # Project root is <tmp>/StarshipOS and was resolved from <tmp>, so both
        # contexts resolve to the same source tree here
        report = orchestrator.build_component(KERNEL, kernel_flags(), context=BuildContext.BOOTSTRAP)
        assert report.outcomes[0].success

    def test_bootstrap_rebuild_inside_project_dir_is_skipped(self, inner_root, fake_runner, make_sources):
        sources_root = inner_root.path / "StarshipOS"
        make_sources("kernel", subdirs=("src",), base=sources_root)
        orchestrator = BuildOrchestrator(
            inner_root,
            FlagStore(inner_root.state_dir),
            settings=Settings(jobs=1),
            context=BuildContext.BOOTSTRAP,
            runner=fake_runner,
        )

        first = orchestrator.build_component(KERNEL, kernel_flags())
        second = orchestrator.build_component(KERNEL, kernel_flags())

        assert first.outcomes[0].success
        assert (sources_root / "kernel" / "build" / "x86_64").is_dir()
        assert not (inner_root.path / "kernel").exists()
        assert second.outcomes[0].status is BuildStatus.SKIPPED
        assert len(fake_runner.commands) == 3

    def test_selected_components_only(self, orchestrator, fake_runner, make_sources):
        make_sources("runtime", subdirs=("make", "src"), files=("configure",))
        flags = kernel_flags(buildRuntime="true", **{"buildRuntime.x86_64": "true"})

        reports = orchestrator.build_core(flags, components=[RUNTIME])

        assert [r.component for r in reports] == ["runtime"]
