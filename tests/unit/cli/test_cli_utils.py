"""Unit tests for CLI utilities."""

import pytest

from starship.architecture import Architecture
from starship.build.clean import CleanReport
from starship.build.outcome import BuildOutcome, BuildStep, ComponentReport
from starship.cli_utils import ErrorFormatter, FlagAssignmentParser, ReportPrinter
from starship.errors import ImageError, ProcessFailed


class TestErrorFormatter:
    def test_print_error(self, capsys):
        ErrorFormatter.print_error("Build failed", "details here")

        out = capsys.readouterr().out
        assert "✗ Build failed" in out
        assert "details here" in out

    def test_starship_error_exits_1(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            ErrorFormatter.handle_starship_error(ImageError("no staging tree"))

        assert exc_info.value.code == 1
        out = capsys.readouterr().out
        assert "Error: ImageError" in out
        assert "no staging tree" in out

    def test_invalid_setting_exits_2(self):
        with pytest.raises(SystemExit) as exc_info:
            ErrorFormatter.handle_invalid_setting(ValueError("bad jobs"))
        assert exc_info.value.code == 2

    def test_keyboard_interrupt_exits_130(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            ErrorFormatter.handle_keyboard_interrupt()

        assert exc_info.value.code == 130
        assert "Interrupted" in capsys.readouterr().out

    def test_unexpected_error_verbose_prints_traceback(self, capsys):
        try:
            raise RuntimeError("boom")
        except RuntimeError as e:
            with pytest.raises(SystemExit) as exc_info:
                ErrorFormatter.handle_unexpected_error(e, verbose=True)

        assert exc_info.value.code == 1
        out = capsys.readouterr().out
        assert "RuntimeError: boom" in out
        assert "Traceback:" in out


class TestReportPrinter:
    def test_disabled_component(self):
        lines = ReportPrinter.format_component(ComponentReport("userland", enabled=False))
        assert lines == ["userland: disabled"]

    def test_no_architectures(self):
        lines = ReportPrinter.format_component(ComponentReport("kernel", enabled=True))
        assert lines == ["kernel:", "  no architectures enabled"]

    def test_outcome_marks(self):
        failure = ProcessFailed(BuildStep.COMPILE, 2, ["make", "-j4"])
        report = ComponentReport(
            "kernel",
            enabled=True,
            outcomes=(
                BuildOutcome.succeeded("kernel", Architecture.X86_64),
                BuildOutcome.from_error("kernel", Architecture.ARM, failure),
            ),
        )

        lines = ReportPrinter.format_component(report)

        assert lines[1] == "  ✓ kernel x86_64: succeeded"
        assert lines[2].startswith("  ✗ kernel arm: failed at step 5 (compile), exit code 2")

    def test_skipped_outcome(self):
        report = ComponentReport(
            "kernel",
            enabled=True,
            outcomes=(BuildOutcome.skipped("kernel", Architecture.X86_64, "already built"),),
        )
        assert ReportPrinter.format_component(report)[1] == "  - kernel x86_64: skipped (already built)"

    def test_print_components(self, capsys):
        ReportPrinter.print_components([ComponentReport("runtime", enabled=False)])

        out = capsys.readouterr().out
        assert "Build Summary:" in out
        assert "  runtime: disabled" in out

    def test_print_clean_noop(self, capsys):
        ReportPrinter.print_clean(CleanReport())
        assert capsys.readouterr().out.strip() == "Nothing to clean."

    def test_print_clean(self, capsys):
        ReportPrinter.print_clean(
            CleanReport(deleted=("kernel",), missing=("runtime",), reset_flags=("cleanKernel", "cleanRuntime"))
        )

        out = capsys.readouterr().out
        assert "deleted kernel/build" in out
        assert "runtime/build already absent" in out
        assert "reset cleanKernel, cleanRuntime" in out


class TestFlagAssignmentParser:
    def test_parse(self):
        assert FlagAssignmentParser.parse("buildKernel.arm=true") == ("buildKernel.arm", "true")

    def test_whitespace_is_stripped(self):
        assert FlagAssignmentParser.parse(" cleanKernel = false ") == ("cleanKernel", "false")

    def test_value_may_contain_equals(self):
        assert FlagAssignmentParser.parse("extra=a=b") == ("extra", "a=b")

    def test_empty_value(self):
        assert FlagAssignmentParser.parse("buildRuntime=") == ("buildRuntime", "")

    @pytest.mark.parametrize("assignment", ["buildKernel", "=true", ""])
    def test_invalid(self, assignment):
        with pytest.raises(ValueError, match="Expected key=value"):
            FlagAssignmentParser.parse(assignment)
