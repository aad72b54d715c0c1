"""Configuration loading for codeinspector (.codeinspector.yml)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".codeinspector.yml"
PROJECT_TYPE_ENV = "CODEINSPECTOR_PROJECT_TYPE"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class LimitsConfig:
    """Resource ceilings applied while reading and scanning files."""

    max_file_size: int = 5 * 1024 * 1024
    scan_char_limit: int = 1_000_000
    progress_interval: int = 50


@dataclass
class QualityConfig:
    """Thresholds used by the code-quality stage."""

    dead_comment_min_lines: int = 8
    complexity_threshold: int = 10


@dataclass
class StageConfig:
    """Stage enablement."""

    enabled: List[str] = field(default_factory=list)


@dataclass
class InspectorConfig:
    """Represents the settings defined in .codeinspector.yml."""

    root: Path
    exclude_paths: List[str] = field(default_factory=list)
    project_type: Optional[str] = None
    framework: Optional[str] = None
    stages: StageConfig = field(default_factory=StageConfig)
    limits: LimitsConfig = field(default_factory=LimitsConfig)
    quality: QualityConfig = field(default_factory=QualityConfig)
    tree_recent_days: int = 7


def load_config(config_path: Path) -> InspectorConfig:
    """Load configuration from disk, returning defaults when no file exists."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return _apply_environment(InspectorConfig(root=root))

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = InspectorConfig(root=root)
    config.exclude_paths = _as_str_list(data.get("exclude_paths"))
    config.project_type = _as_str(data.get("project_type"))
    config.framework = _as_str(data.get("framework"))

    stage_data = _as_dict(data.get("stages"))
    if stage_data:
        config.stages.enabled = _as_str_list(stage_data.get("enabled"))

    limits_data = _as_dict(data.get("limits"))
    if limits_data:
        config.limits = LimitsConfig(
            max_file_size=_positive_int(limits_data.get("max_file_size"), config.limits.max_file_size),
            scan_char_limit=_positive_int(limits_data.get("scan_char_limit"), config.limits.scan_char_limit),
            progress_interval=_positive_int(limits_data.get("progress_interval"), config.limits.progress_interval),
        )

    quality_data = _as_dict(data.get("quality"))
    if quality_data:
        config.quality = QualityConfig(
            dead_comment_min_lines=_positive_int(
                quality_data.get("dead_comment_min_lines"), config.quality.dead_comment_min_lines
            ),
            complexity_threshold=_positive_int(
                quality_data.get("complexity_threshold"), config.quality.complexity_threshold
            ),
        )

    tree_data = _as_dict(data.get("tree"))
    if tree_data:
        config.tree_recent_days = _positive_int(tree_data.get("recent_days"), config.tree_recent_days)

    return _apply_environment(config)


def _apply_environment(config: InspectorConfig) -> InspectorConfig:
    override = os.environ.get(PROJECT_TYPE_ENV)
    if override and override.strip():
        config.project_type = override.strip()
    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Unable to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return {} if loaded is None else loaded


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _positive_int(value: Any, default: int) -> int:
    parsed = _as_int(value)
    if parsed is None or parsed <= 0:
        return default
    return parsed


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "InspectorConfig",
    "LimitsConfig",
    "QualityConfig",
    "StageConfig",
    "load_config",
]
