"""Unit tests for ISO image creation."""

import pytest

from starship.architecture import Architecture
from starship.deploy.iso import IsoBuilder, iso_path
from starship.errors import ImageError


class TestIsoBuilder:
    def test_runs_mkisofs_in_project_root(self, project_root, fake_runner):
        (project_root.target_dir / "l4re-modules").mkdir(parents=True)

        image = IsoBuilder(project_root, runner=fake_runner).build(Architecture.X86_64)

        assert image == project_root.path / "target" / "starship-x86_64.iso"
        (command,) = fake_runner.commands
        assert command.args == [
            "mkisofs",
            "-quiet",
            "-R",
            "-o",
            "target/starship-x86_64.iso",
            "target/l4re-modules",
        ]
        assert command.cwd == project_root.path

    def test_missing_staging_directory(self, project_root, fake_runner):
        with pytest.raises(ImageError, match="does not exist"):
            IsoBuilder(project_root, runner=fake_runner).build()
        assert fake_runner.commands == []

    def test_staging_path_is_a_file(self, project_root, fake_runner):
        project_root.target_dir.mkdir()
        (project_root.target_dir / "l4re-modules").write_text("")

        with pytest.raises(ImageError, match="not a directory"):
            IsoBuilder(project_root, runner=fake_runner).build()

    def test_mkisofs_failure(self, project_root, fake_runner):
        (project_root.target_dir / "l4re-modules").mkdir(parents=True)
        fake_runner.fail_on(["mkisofs"], returncode=1)

        with pytest.raises(ImageError, match="exit code 1"):
            IsoBuilder(project_root, runner=fake_runner).build()

    def test_iso_path_per_architecture(self, project_root):
        assert iso_path(project_root, Architecture.ARM).name == "starship-arm.iso"
