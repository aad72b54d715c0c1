"""Stage that reconciles declarations against references and scores complexity."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence

from .. import quality
from ..logging import get_logger
from ..models import SEVERITY_ORDER, Issue
from ..quality.comments import COMMENT_SCAN_EXTENSIONS
from .base import Delta, Snapshot, Stage, StageContext

logger = get_logger("stages.quality")

_CATEGORIES = (
    "unused_functions",
    "unused_methods",
    "unused_classes",
    "unused_imports",
    "unused_dependencies",
    "large_functions",
    "commented_code",
)


class UsageAnalyzerStage(Stage):
    """Find unused code and dependencies, dead comments and complex files."""

    name = "code-quality"
    reads = ("file_system", "_file_contents", "tech_stack", "code_structure")
    provides = ("code_quality",)

    def process(self, snapshot: Snapshot, context: StageContext) -> Delta:
        limits = context.config.limits
        settings = context.config.quality
        contents: Mapping[str, str] = snapshot.get("_file_contents") or {}
        files: Sequence[Mapping[str, Any]] = (snapshot.get("file_system") or {}).get("files") or ()
        analyses: Sequence[Mapping[str, Any]] = (snapshot.get("code_structure") or {}).get("files") or ()
        dependencies = (snapshot.get("tech_stack") or {}).get("dependencies") or ()
        obfuscated = frozenset(record["path"] for record in files if record.get("obfuscated"))

        declared = quality.collect_declared(analyses)

        def _progress(current: int, total: int, path: str) -> None:
            if context.should_report(current, total):
                context.report(current, total, path, phase="code-quality:references")

        references = quality.build_reference_set(
            contents,
            skip=obfuscated,
            char_limit=limits.scan_char_limit,
            progress=_progress,
        )
        logger.debug("Reference set holds %d names", len(references))
        dynamic = quality.detect_dynamic_loading(contents)

        found: Dict[str, List[Issue]] = {
            "unused_functions": quality.find_unused_symbols(declared.functions, references),
            "unused_methods": quality.find_unused_symbols(declared.methods, references),
            "unused_classes": quality.find_unused_classes(declared.classes, references, dynamic),
            "unused_imports": quality.find_unused_imports(analyses, contents),
            "unused_dependencies": quality.find_unused_dependencies(dependencies, contents),
            "large_functions": quality.find_large_functions(analyses, contents),
        }
        context.checkpoint()

        commented: List[Issue] = []
        comment_paths = [
            path
            for path in sorted(contents)
            if path not in obfuscated and contents[path] and path.lower().endswith(COMMENT_SCAN_EXTENSIONS)
        ]
        for position, path in enumerate(comment_paths, start=1):
            commented.extend(quality.find_commented_code(path, contents[path], settings.dead_comment_min_lines))
            if context.should_report(position, len(comment_paths)):
                context.report(position, len(comment_paths), path, phase="code-quality:comments")
        found["commented_code"] = commented

        complexity = quality.analyze_complexity(
            contents,
            threshold=settings.complexity_threshold,
            skip=obfuscated,
            char_limit=limits.scan_char_limit,
        )

        issues = [issue for key in _CATEGORIES for issue in found[key]]
        issues.sort(key=lambda issue: SEVERITY_ORDER.get(issue.severity, len(SEVERITY_ORDER)))

        summary: Dict[str, Any] = {"total_issues": len(issues)}
        summary.update({key: len(found[key]) for key in _CATEGORIES})
        summary["has_dynamic_loading"] = dynamic
        summary["by_severity"] = {
            severity: sum(1 for issue in issues if issue.severity == severity) for severity in SEVERITY_ORDER
        }

        result: Dict[str, Any] = {
            "summary": summary,
            "issues": [issue.to_dict() for issue in issues],
            "complexity": [record.to_dict() for record in complexity],
        }
        result.update({key: [issue.to_dict() for issue in found[key]] for key in _CATEGORIES})
        return {"code_quality": result}


__all__ = ["UsageAnalyzerStage"]
