"""Unit tests for settings resolution and the architecture registry."""

from pathlib import Path
from unittest.mock import patch

import pytest

from starship.architecture import Architecture
from starship.settings import BUNDLED_CONFIG_DIR, DEFAULT_PROJECT_NAME, Settings, default_jobs


class TestSettings:
    def test_defaults(self):
        with patch("starship.settings.psutil.cpu_count", return_value=6):
            settings = Settings.resolve(environ={})

        assert settings.project_name == DEFAULT_PROJECT_NAME
        assert settings.jobs == 6
        assert settings.config_dir == BUNDLED_CONFIG_DIR
        assert settings.verbose is False

    def test_environment_overrides_defaults(self, tmp_path):
        environ = {
            "STARSHIP_PROJECT_NAME": "MyOS",
            "STARSHIP_JOBS": "3",
            "STARSHIP_CONFIG_DIR": str(tmp_path),
        }
        settings = Settings.resolve(environ=environ)

        assert settings.project_name == "MyOS"
        assert settings.jobs == 3
        assert settings.config_dir == tmp_path

    def test_explicit_values_win(self, tmp_path):
        environ = {"STARSHIP_PROJECT_NAME": "MyOS", "STARSHIP_JOBS": "3"}
        settings = Settings.resolve(
            project_name="Other", jobs=12, config_dir=tmp_path, verbose=True, environ=environ
        )

        assert settings.project_name == "Other"
        assert settings.jobs == 12
        assert settings.config_dir == Path(tmp_path)
        assert settings.verbose is True

    def test_invalid_jobs_in_environment(self):
        with pytest.raises(ValueError, match="STARSHIP_JOBS"):
            Settings.resolve(environ={"STARSHIP_JOBS": "many"})

    def test_jobs_must_be_positive(self):
        with pytest.raises(ValueError):
            Settings.resolve(jobs=0, environ={})

    def test_default_jobs_falls_back_to_one(self):
        with patch("starship.settings.psutil.cpu_count", return_value=None):
            assert default_jobs() == 1


class TestArchitecture:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("x86_64", Architecture.X86_64),
            ("AMD64", Architecture.X86_64),
            ("i686", Architecture.X86),
            ("ARM", Architecture.ARM),
            ("gnueabihf", Architecture.ARM),
            ("arm64", Architecture.AARCH64),
        ],
    )
    def test_from_name(self, name, expected):
        assert Architecture.from_name(name) is expected

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="Unknown architecture"):
            Architecture.from_name("sparc")

    def test_properties(self):
        assert Architecture.X86_64.triplet == "x86_64-linux-gnu"
        assert Architecture.ARM.triplet == "arm-linux-gnueabihf"
        assert Architecture.X86_64.l4_bin_dir == "amd64_gen"
        assert Architecture.ARM.qemu_binary == "qemu-system-arm"
        assert str(Architecture.AARCH64) == "aarch64"
