"""Base classes for pipeline stages."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional, Tuple

from ..config import InspectorConfig
from ..errors import AnalysisCancelled
from ..models import ProgressEvent, ProjectContext

Snapshot = Mapping[str, Any]
Delta = Mapping[str, Any]
ProgressCallback = Callable[[ProgressEvent], None]


def _discard(event: ProgressEvent) -> None:
    return None


@dataclass
class StageContext:
    """Per-run collaborators handed to every stage alongside its snapshot."""

    project: ProjectContext
    config: InspectorConfig
    stage_name: str = ""
    emit: ProgressCallback = field(default=_discard, repr=False)
    cancel_event: Optional[threading.Event] = field(default=None, repr=False)

    def checkpoint(self) -> None:
        """Raise AnalysisCancelled once the caller has requested cancellation."""
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise AnalysisCancelled(f"Analysis cancelled during {self.stage_name or 'startup'}")

    def report(
        self,
        current: int,
        total: Optional[int],
        detail: Optional[str] = None,
        *,
        phase: Optional[str] = None,
    ) -> None:
        """Forward a progress notification and honour pending cancellation."""
        self.checkpoint()
        self.emit(
            ProgressEvent(
                stage=phase or self.stage_name,
                current=current,
                total=total,
                detail=detail,
            )
        )

    def should_report(self, index: int, total: int) -> bool:
        interval = self.config.limits.progress_interval
        return index == total or (interval > 0 and index % interval == 0)


class Stage(ABC):
    """Contract for stages that turn a frozen snapshot into a delta.

    ``reads`` lists the snapshot namespaces a stage consumes; the engine only
    exposes those (plus ``meta``) and refuses orderings where a stage reads a
    namespace produced by a later stage. ``provides`` lists the namespaces the
    returned delta contributes.
    """

    name: str = ""
    reads: Tuple[str, ...] = ()
    provides: Tuple[str, ...] = ()

    @abstractmethod
    def process(self, snapshot: Snapshot, context: StageContext) -> Delta:
        """Return this stage's contribution to the report."""


__all__ = ["Delta", "ProgressCallback", "Snapshot", "Stage", "StageContext"]
