"""Large function detection with language-aware line thresholds."""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping

from ..models import Issue

LINE_THRESHOLDS = {
    "php": 500,
    "javascript": 100,
    "typescript": 100,
    "vue": 100,
}
DEFAULT_LINE_THRESHOLD = 150

# Long functions are common in these ecosystems; report them as informational.
LENIENT_LANGUAGES = frozenset({"php", "javascript", "typescript", "vue"})


def count_function_lines(lines: List[str], start: int) -> int:
    """Count lines from ``start`` (0-based) until the first opened brace closes."""
    depth = 0
    started = False
    count = 0
    for line in lines[start:]:
        for char in line:
            if char == "{":
                depth += 1
                started = True
            elif char == "}":
                depth -= 1
        if started:
            count += 1
            if depth <= 0:
                break
    return count


def find_large_functions(analyses: Iterable[Mapping[str, Any]], contents: Mapping[str, str]) -> List[Issue]:
    issues: List[Issue] = []
    for analysis in sorted(analyses, key=lambda item: item["path"]):
        path = analysis["path"]
        text = contents.get(path)
        if not text:
            continue
        lines = text.split("\n")
        language = analysis.get("language") or "default"
        threshold = LINE_THRESHOLDS.get(language, DEFAULT_LINE_THRESHOLD)
        severity = "info" if language in LENIENT_LANGUAGES else "warning"

        candidates = [(function["name"], function["line"], "Function") for function in analysis.get("functions") or ()]
        for cls in analysis.get("classes") or ():
            candidates.extend(
                (f"{cls['name']}.{method['name']}", method["line"], "Method") for method in cls.get("methods") or ()
            )

        for name, line, label in candidates:
            size = count_function_lines(lines, line - 1)
            if size <= threshold:
                continue
            issues.append(
                Issue(
                    name=name,
                    kind="large_function",
                    severity=severity,
                    file=path,
                    line=line,
                    tag=f"{size} lines",
                    description=f'{label} "{name}" is {size} lines (threshold for {language}: {threshold})',
                    extra={"lines": size, "threshold": threshold, "language": language},
                )
            )
    return issues


__all__ = ["DEFAULT_LINE_THRESHOLD", "LINE_THRESHOLDS", "count_function_lines", "find_large_functions"]
