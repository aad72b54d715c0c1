"""Stage that inventories the project tree."""

from __future__ import annotations

from ..catalog import FileCatalog
from .base import Delta, Snapshot, Stage, StageContext


class FileCatalogStage(Stage):
    """Walk the project once and publish file records plus raw contents."""

    name = "file-system"
    provides = ("file_system", "_file_contents")

    def process(self, snapshot: Snapshot, context: StageContext) -> Delta:
        project = context.project
        config = context.config
        interval = max(config.limits.progress_interval, 1)

        def _on_file(index: int, rel_path: str) -> None:
            if index % interval == 0:
                context.report(index, None, rel_path, phase="file-system:scan")

        catalog = FileCatalog(
            [*project.excluded_folders, *config.exclude_paths],
            max_file_size=config.limits.max_file_size,
            recent_days=config.tree_recent_days,
            on_file=_on_file,
        )
        result = catalog.scan(project.root_path)
        context.report(len(result.files), len(result.files), "done", phase="file-system:scan")

        return {
            "file_system": {
                "root_path": str(result.root),
                "total_files": len(result.files),
                "total_lines": result.total_lines,
                "total_folders": result.total_folders,
                "by_extension": result.by_extension(),
                "folder_stats": result.folder_stats(),
                "files": [record.to_dict() for record in result.files],
                "file_tree": result.tree,
                "minified_skipped": result.minified_skipped,
            },
            "_file_contents": result.contents(),
        }


__all__ = ["FileCatalogStage"]
