"""Built-in pipeline stages and discovery utilities."""

from __future__ import annotations

from importlib import metadata
from typing import Callable, Iterable, List, Sequence, Set

from .base import Delta, Snapshot, Stage, StageContext
from .file_catalog import FileCatalogStage
from .locations import LocationFinderStage
from .quality import UsageAnalyzerStage
from .score import QualityScorerStage
from .structure import StructuralExtractorStage
from .tech_stack import StackProfilerStage

_ENTRY_POINT_GROUP = "codeinspector.stages"

# Order matters: each stage may only read what earlier stages provide.
_BUILTIN_FACTORIES: dict[str, Callable[[], Stage]] = {
    "file-system": FileCatalogStage,
    "tech-stack": StackProfilerStage,
    "code-structure": StructuralExtractorStage,
    "code-quality": UsageAnalyzerStage,
    "key-locations": LocationFinderStage,
    "code-score": QualityScorerStage,
}


def builtin_stage_names() -> List[str]:
    return list(_BUILTIN_FACTORIES)


def discover_stages(enabled: Sequence[str] | None = None) -> List[Stage]:
    """Return instantiated stages in pipeline order, honoring optional enabled names."""

    enabled_set: Set[str] | None = None
    if enabled is not None:
        enabled_set = {name.lower() for name in enabled}

    stages: List[Stage] = []
    seen: Set[str] = set()

    def _add(name: str, factory: Callable[[], Stage]) -> None:
        key = name.lower()
        if enabled_set is not None and key not in enabled_set:
            return
        if key in seen:
            return
        instance = factory()
        if not isinstance(instance, Stage):
            raise TypeError(f"Stage factory for '{name}' did not return a Stage instance")
        stages.append(instance)
        seen.add(key)
        if enabled_set is not None:
            enabled_set.discard(key)

    for name, factory in _BUILTIN_FACTORIES.items():
        _add(name, factory)

    for entry in _iter_entry_points():
        name = entry.name
        try:
            loaded = entry.load()
        except Exception as exc:
            raise RuntimeError(f"Failed to load stage entry point '{name}': {exc}") from exc

        def _factory(obj: object = loaded) -> Stage:
            return _coerce_stage(obj)

        _add(name, _factory)

    if enabled_set:
        missing = ", ".join(sorted(enabled_set))
        raise ValueError(f"Unknown stages requested: {missing}")

    return stages


def _coerce_stage(obj: object) -> Stage:
    if isinstance(obj, Stage):
        return obj
    if isinstance(obj, type) and issubclass(obj, Stage):
        return obj()
    if callable(obj):
        instance = obj()
        if isinstance(instance, Stage):
            return instance
    raise TypeError("Stage entry point must be a Stage subclass or factory")


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = [
    "Delta",
    "Snapshot",
    "Stage",
    "StageContext",
    "builtin_stage_names",
    "discover_stages",
]
