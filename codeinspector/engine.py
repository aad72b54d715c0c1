"""Pipeline orchestration: ordered stages over frozen, progressively merged snapshots."""

from __future__ import annotations

import logging
import os
import threading
import time
from dataclasses import replace
from datetime import UTC, datetime
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from .config import ConfigError, InspectorConfig, load_config
from .errors import AnalysisCancelled, PreconditionError
from .logging import get_logger
from .models import ProgressEvent, ProjectContext, StageRun
from .stages import Stage, StageContext, discover_stages
from .stages.base import ProgressCallback

REPORT_VERSION = "1.0.0"
META_KEY = "meta"


class PipelineEngine:
    """Runs registered stages in order, merging each stage's delta into the report."""

    def __init__(
        self,
        stages: Optional[Iterable[Stage]] = None,
        *,
        config: InspectorConfig | None = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._stage_overrides = list(stages) if stages is not None else None
        self._config_override = config
        self._clock = clock
        self.logger = get_logger("engine")

    def run(
        self,
        project: ProjectContext,
        progress: ProgressCallback | None = None,
        *,
        cancel_event: threading.Event | None = None,
    ) -> Dict[str, Any]:
        """Analyze ``project`` and return the report with internal keys removed."""
        root = _check_root(project.root_path)
        config = self._config_override or self._load_config(root)
        project = _effective_project(project, root, config)
        stages = self._select_stages(config)
        validate_stage_order(stages)

        self.logger.info("Starting analysis of %s (%d stages)", root, len(stages))
        run_started = self._clock()
        emit = self._guarded(progress)
        state: Dict[str, Any] = {
            META_KEY: {
                "project_name": project.display_name,
                "root_path": str(root),
                "analyzed_at": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
                "version": REPORT_VERSION,
                "layers_executed": [],
            }
        }

        for index, stage in enumerate(stages, start=1):
            context = StageContext(
                project=project,
                config=config,
                stage_name=stage.name,
                emit=emit,
                cancel_event=cancel_event,
            )
            context.checkpoint()
            emit(ProgressEvent(stage=stage.name, current=index, total=len(stages), detail="running"))
            self.logger.debug("Running stage %s", stage.name)

            started = self._clock()
            try:
                snapshot = freeze(_restrict(state, stage.reads))
                delta = stage.process(snapshot, context)
            except (PreconditionError, AnalysisCancelled):
                raise
            except Exception as exc:
                self._log_exception(f"Stage {stage.name} failed", exc)
                run = StageRun(
                    name=stage.name,
                    duration_ms=self._elapsed_ms(started),
                    status="failed",
                    error=str(exc) or exc.__class__.__name__,
                )
            else:
                if isinstance(delta, Mapping):
                    state = deep_merge(state, delta)
                run = StageRun(name=stage.name, duration_ms=self._elapsed_ms(started), status="completed")
            state[META_KEY]["layers_executed"].append(run.to_dict())

        state[META_KEY]["duration_ms"] = self._elapsed_ms(run_started)
        failed = [entry["name"] for entry in state[META_KEY]["layers_executed"] if entry["status"] == "failed"]
        if failed:
            self.logger.warning("Analysis finished with failed stages: %s", ", ".join(failed))
        else:
            self.logger.info("Analysis finished in %d ms", state[META_KEY]["duration_ms"])
        return strip_internal(state)

    # ------------------------------------------------------------------
    # Internal helpers

    def _select_stages(self, config: InspectorConfig) -> List[Stage]:
        if self._stage_overrides is not None:
            return list(self._stage_overrides)
        return discover_stages(config.stages.enabled or None)

    def _load_config(self, root: Path) -> InspectorConfig:
        try:
            return load_config(root)
        except ConfigError as exc:
            self.logger.warning("Ignoring invalid configuration: %s", exc)
            return InspectorConfig(root=root)

    def _guarded(self, progress: ProgressCallback | None) -> ProgressCallback:
        def _emit(event: ProgressEvent) -> None:
            if progress is None:
                return
            try:
                progress(event)
            except Exception as exc:
                self.logger.debug("Progress callback raised %s; ignoring", exc)

        return _emit

    def _elapsed_ms(self, started: float) -> int:
        return int(round((self._clock() - started) * 1000))

    def _log_exception(self, message: str, exc: Exception) -> None:
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.exception("%s: %s", message, exc)
        else:
            self.logger.error("%s: %s", message, exc)


def validate_stage_order(stages: Sequence[Stage]) -> None:
    """Reject orderings where a stage reads a namespace produced by a later stage."""
    names = [stage.name for stage in stages]
    if any(not name for name in names):
        raise ValueError("Every stage must define a non-empty name")
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ValueError(f"Duplicate stage names: {', '.join(duplicates)}")

    producer: Dict[str, int] = {}
    for position, stage in enumerate(stages):
        for namespace in stage.provides:
            producer.setdefault(namespace, position)
    for position, stage in enumerate(stages):
        for namespace in stage.reads:
            origin = producer.get(namespace)
            if origin is not None and origin >= position:
                raise ValueError(
                    f"Stage '{stage.name}' reads '{namespace}' which is produced by "
                    f"'{stages[origin].name}' at the same or a later position"
                )


def freeze(value: Any) -> Any:
    """Return a deep, read-only structural copy of plain report data."""
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(item) for item in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(freeze(item) for item in value)
    return value


def thaw(value: Any) -> Any:
    """Convert frozen snapshot data back into plain dicts and lists."""
    if isinstance(value, Mapping):
        return {key: thaw(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [thaw(item) for item in value]
    if isinstance(value, (set, frozenset)):
        return sorted(thaw(item) for item in value)
    return value


def deep_merge(target: Mapping[str, Any], delta: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge ``delta`` into a copy of ``target``; nested mappings merge, other values replace."""
    merged: Dict[str, Any] = dict(target)
    for key, value in delta.items():
        existing = merged.get(key)
        if isinstance(value, Mapping) and isinstance(existing, Mapping):
            merged[key] = deep_merge(existing, value)
        else:
            merged[key] = thaw(value)
    return merged


def strip_internal(value: Any) -> Any:
    """Drop keys prefixed with an underscore at every nesting level."""
    if isinstance(value, Mapping):
        return {
            key: strip_internal(item)
            for key, item in value.items()
            if not (isinstance(key, str) and key.startswith("_"))
        }
    if isinstance(value, (list, tuple)):
        return [strip_internal(item) for item in value]
    return value


def _restrict(state: Mapping[str, Any], reads: Sequence[str]) -> Dict[str, Any]:
    visible = {META_KEY, *reads}
    return {key: value for key, value in state.items() if key in visible}


def _check_root(root_path: str) -> Path:
    if not root_path:
        raise PreconditionError("Root path is required")
    root = Path(root_path).expanduser()
    if not root.exists():
        raise PreconditionError(f"Root path does not exist: {root_path}")
    if not root.is_dir():
        raise PreconditionError(f"Root path is not a directory: {root_path}")
    if not os.access(root, os.R_OK | os.X_OK):
        raise PreconditionError(f"Root path is not readable: {root_path}")
    return root.resolve()


def _effective_project(project: ProjectContext, root: Path, config: InspectorConfig) -> ProjectContext:
    project_type = project.project_type or "auto"
    if project_type == "auto" and config.project_type:
        project_type = config.project_type
    framework = project.framework or config.framework
    return replace(project, root_path=str(root), project_type=project_type, framework=framework)


__all__ = [
    "PipelineEngine",
    "REPORT_VERSION",
    "deep_merge",
    "freeze",
    "strip_internal",
    "thaw",
    "validate_stage_order",
]
