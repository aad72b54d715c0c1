"""Stage that recovers declarations from PHP, JS/TS and Vue sources."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence

from ..logging import get_logger
from ..scanners import scanner_for
from .base import Delta, Snapshot, Stage, StageContext

logger = get_logger("stages.structure")


class StructuralExtractorStage(Stage):
    """Dispatch each source file to its language scanner and total the results."""

    name = "code-structure"
    reads = ("file_system", "_file_contents")
    provides = ("code_structure",)

    def process(self, snapshot: Snapshot, context: StageContext) -> Delta:
        file_system = snapshot.get("file_system") or {}
        files: Sequence[Mapping[str, Any]] = file_system.get("files") or ()
        contents: Mapping[str, str] = snapshot.get("_file_contents") or {}

        candidates = [
            record for record in files if scanner_for(record.get("extension") or "") and record["path"] in contents
        ]
        analyses: List[Dict[str, Any]] = []
        skipped: List[str] = []
        totals = {"classes": 0, "functions": 0, "methods": 0, "imports": 0, "exports": 0}

        for position, record in enumerate(candidates, start=1):
            if context.should_report(position, len(candidates)):
                context.report(position, len(candidates), record["path"], phase="code-structure:scan")
            if record.get("obfuscated"):
                skipped.append(record["path"])
                continue
            content = contents[record["path"]]
            if not content:
                continue
            scanner = scanner_for(record["extension"])
            analysis = scanner(content, record["path"])
            analyses.append(analysis)
            totals["classes"] += len(analysis["classes"])
            totals["functions"] += len(analysis["functions"])
            totals["methods"] += sum(len(cls["methods"]) for cls in analysis["classes"])
            totals["imports"] += len(analysis["imports"])
            totals["exports"] += len(analysis["exports"])

        if skipped:
            logger.debug("Skipped %d obfuscated file(s) during structure scan", len(skipped))

        return {
            "code_structure": {
                "total_classes": totals["classes"],
                "total_functions": totals["functions"],
                "total_methods": totals["methods"],
                "total_imports": totals["imports"],
                "total_exports": totals["exports"],
                "files": analyses,
                "skipped_files": skipped,
            }
        }


__all__ = ["StructuralExtractorStage"]
