# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for config loading.

We verify:
  - no file at all means the built-in LibreCard defaults
  - YAML values override defaults section by section
  - unknown keys and bad values raise ConfigValidationError
  - broken YAML raises ConfigLoadError
  - loaded config is immutable
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from releasekit.config.exceptions import ConfigLoadError, ConfigValidationError
from releasekit.config.loader import load_config, load_project_config
from releasekit.config.schema import ReleaseConfig


class TestDefaults:
    def test_defaults_describe_librecard(self) -> None:
        config = ReleaseConfig()
        assert config.app.package_name == "librecard"
        assert config.app.app_name == "LibreCard"
        assert config.app.bundle_id == "net.ycao.librecard"
        assert config.paths.target_dir == "target"
        assert config.toolchain.build_command == ["cargo", "build", "--release"]
        assert config.staging.prune_on_success is False

    def test_project_without_config_file_uses_defaults(self, tmp_path: Path) -> None:
        assert load_project_config(tmp_path) == ReleaseConfig()

    def test_release_yaml_in_project_root_is_picked_up(self, tmp_path: Path) -> None:
        (tmp_path / "release.yaml").write_text("app:\n  app_name: Cards\n", encoding="utf-8")
        config = load_project_config(tmp_path)
        assert config.app.app_name == "Cards"

    def test_empty_file_means_defaults(self, tmp_path: Path) -> None:
        empty = tmp_path / "empty.yaml"
        empty.write_text("", encoding="utf-8")
        assert load_config(empty) == ReleaseConfig()


class TestLoadValidConfig:
    def test_overrides_are_applied(self, tmp_config_file: Path) -> None:
        config = load_config(tmp_config_file)
        assert config.global_config.project_name == "librecard-test"
        assert config.global_config.log_level == "DEBUG"
        assert config.app.bundle_version == "0.2"
        assert config.app.short_version == "0.1"

    def test_explicit_path_wins_over_project_file(self, tmp_path: Path, tmp_config_file: Path) -> None:
        (tmp_path / "release.yaml").write_text("app:\n  bundle_version: '9.9'\n", encoding="utf-8")
        config = load_project_config(tmp_path, tmp_config_file)
        assert config.app.bundle_version == "0.2"


class TestLoadInvalidConfig:
    def test_unknown_key_raises_validation_error(self, invalid_config_file: Path) -> None:
        with pytest.raises(ConfigValidationError, match="colour"):
            load_config(invalid_config_file)

    def test_bad_log_level_raises_validation_error(self, tmp_path: Path) -> None:
        bad = tmp_path / "bad.yaml"
        bad.write_text("global:\n  log_level: LOUD\n", encoding="utf-8")
        with pytest.raises(ConfigValidationError):
            load_config(bad)

    def test_empty_build_command_is_rejected(self, tmp_path: Path) -> None:
        bad = tmp_path / "bad.yaml"
        bad.write_text("toolchain:\n  build_command: []\n", encoding="utf-8")
        with pytest.raises(ConfigValidationError):
            load_config(bad)

    def test_broken_yaml_raises_load_error(self, broken_yaml_file: Path) -> None:
        with pytest.raises(ConfigLoadError, match="Invalid YAML"):
            load_config(broken_yaml_file)

    def test_missing_file_raises_load_error(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigLoadError, match="not found"):
            load_config(tmp_path / "nope.yaml")

    def test_non_mapping_raises_load_error(self, tmp_path: Path) -> None:
        listy = tmp_path / "list.yaml"
        listy.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigLoadError, match="mapping"):
            load_config(listy)


def test_config_is_frozen(tmp_config_file: Path) -> None:
    config = load_config(tmp_config_file)
    with pytest.raises(ValidationError):
        config.app.app_name = "Other"  # type: ignore[misc]
