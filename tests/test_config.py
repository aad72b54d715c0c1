"""Tests for codeinspector.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from codeinspector.config import ConfigError, InspectorConfig, LimitsConfig, QualityConfig, load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, InspectorConfig)
    assert config.root == tmp_path.resolve()
    assert config.exclude_paths == []
    assert config.project_type is None
    assert config.framework is None
    assert config.stages.enabled == []
    assert config.limits == LimitsConfig()
    assert config.quality == QualityConfig()
    assert config.tree_recent_days == 7


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".codeinspector.yml"
    config_file.write_text(
        """
exclude_paths:
  - vendor
  - storage/cache
project_type: telegram-php
framework: Laravel
stages:
  enabled: [file-system, tech-stack]
limits:
  max_file_size: 1048576
  scan_char_limit: 5000
  progress_interval: 10
quality:
  dead_comment_min_lines: 12
  complexity_threshold: 25
tree:
  recent_days: 3
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.exclude_paths == ["vendor", "storage/cache"]
    assert config.project_type == "telegram-php"
    assert config.framework == "Laravel"
    assert config.stages.enabled == ["file-system", "tech-stack"]
    assert config.limits == LimitsConfig(max_file_size=1048576, scan_char_limit=5000, progress_interval=10)
    assert config.quality == QualityConfig(dead_comment_min_lines=12, complexity_threshold=25)
    assert config.tree_recent_days == 3


def test_invalid_numbers_fall_back_to_defaults(tmp_path: Path) -> None:
    (tmp_path / ".codeinspector.yml").write_text(
        "limits:\n  max_file_size: -5\n  scan_char_limit: lots\nquality:\n  complexity_threshold: 0\n",
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.limits.max_file_size == LimitsConfig().max_file_size
    assert config.limits.scan_char_limit == LimitsConfig().scan_char_limit
    assert config.quality.complexity_threshold == QualityConfig().complexity_threshold


def test_non_mapping_root_raises(tmp_path: Path) -> None:
    (tmp_path / ".codeinspector.yml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_yaml_error_raises(tmp_path: Path) -> None:
    (tmp_path / ".codeinspector.yml").write_text("stages: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_environment_overrides_project_type(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / ".codeinspector.yml").write_text("project_type: php\n", encoding="utf-8")
    monkeypatch.setenv("CODEINSPECTOR_PROJECT_TYPE", "nodejs")

    assert load_config(tmp_path).project_type == "nodejs"


def test_engine_falls_back_to_defaults_on_invalid_config(project_builder) -> None:
    project_builder.write({"app.js": "start();"})
    (project_builder.path() / ".codeinspector.yml").write_text("[broken", encoding="utf-8")

    report = project_builder.analyze()

    assert report["file_system"]["total_files"] == 1
    assert all(layer["status"] == "completed" for layer in report["meta"]["layers_executed"])


def test_engine_uses_configured_exclusions_and_project_type(project_builder) -> None:
    project_builder.write({"legacy/old.php": "<?php", "index.php": "<?php", "public/index.php": "<?php"})
    (project_builder.path() / ".codeinspector.yml").write_text(
        "exclude_paths: [legacy]\nproject_type: php\n",
        encoding="utf-8",
    )

    report = project_builder.analyze()

    assert [record["path"] for record in report["file_system"]["files"]] == ["index.php", "public/index.php"]
    assert report["key_locations"]["project_type"] == "php"
