"""Helper utilities for constructing temporary projects in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Any, Dict, Mapping

from codeinspector.config import InspectorConfig
from codeinspector.engine import PipelineEngine
from codeinspector.models import ProjectContext
from codeinspector.stages import StageContext


class ProjectBuilder:
    """Utility for writing files into a throwaway project and analyzing it."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "project"
        self.root.mkdir()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the project."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def write_raw(self, relative: str, content: str | bytes) -> Path:
        """Write content verbatim, without dedenting."""
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        return path

    def context(self, **kwargs: Any) -> ProjectContext:
        return ProjectContext(root_path=str(self.root), **kwargs)

    def stage_context(self, config: InspectorConfig | None = None, **kwargs: Any) -> StageContext:
        return StageContext(
            project=self.context(**kwargs),
            config=config or InspectorConfig(root=self.root),
        )

    def analyze(self, **kwargs: Any) -> Dict[str, Any]:
        """Run the full default pipeline over the project."""
        return PipelineEngine().run(self.context(**kwargs))

    def path(self) -> Path:
        """Return the project root path."""
        return self.root


__all__ = ["ProjectBuilder"]
