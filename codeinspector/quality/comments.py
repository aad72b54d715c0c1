"""Dead-comment detection: long contiguous runs of comment lines."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from ..models import Issue

COMMENT_SCAN_EXTENSIONS = (".php", ".js", ".jsx", ".mjs", ".cjs", ".ts", ".tsx", ".vue")
DEFAULT_MIN_LINES = 8


@dataclass
class CommentRun:
    """A contiguous run of comment lines; ``start`` is 0-based."""

    start: int
    length: int = 0
    documented: bool = False


def find_comment_runs(content: str, *, hash_comments: bool = False) -> List[CommentRun]:
    """Split ``content`` into maximal runs of consecutive comment lines.

    Line comments and block comments extend the same run; blank lines and
    code lines end it. A run that opens a ``/**`` or ``/*!`` block is
    marked as documentation unless a later plain block follows it.
    """
    runs: List[CommentRun] = []
    current: Optional[CommentRun] = None
    in_block = False

    for number, raw in enumerate(content.split("\n")):
        stripped = raw.strip()

        if in_block:
            current.length += 1  # type: ignore[union-attr]
            if "*/" in stripped:
                in_block = False
            continue

        if stripped.startswith("/*"):
            if current is None:
                current = CommentRun(start=number)
            current.length += 1
            # The most recently opened block decides.
            current.documented = stripped.startswith(("/**", "/*!")) and not stripped.startswith("/**/")
            in_block = stripped.find("*/", 2) == -1
            continue

        if stripped.startswith("//") or (hash_comments and _is_hash_comment(stripped)):
            if current is None:
                current = CommentRun(start=number)
            current.length += 1
            continue

        if current is not None:
            runs.append(current)
            current = None

    if current is not None:
        runs.append(current)
    return runs


def find_commented_code(path: str, content: str, min_lines: int = DEFAULT_MIN_LINES) -> List[Issue]:
    """Report undocumented comment runs of at least ``min_lines`` lines."""
    issues: List[Issue] = []
    for run in find_comment_runs(content, hash_comments=path.lower().endswith(".php")):
        if run.documented or run.length < min_lines:
            continue
        first = run.start + 1
        last = run.start + run.length
        issues.append(
            Issue(
                name=f"{run.length} commented lines",
                kind="commented_code",
                severity="info",
                file=path,
                line=first,
                tag=f"{run.length} lines",
                description=(
                    f"{run.length} consecutive commented lines (lines {first}-{last}). "
                    "Consider removing dead code to reduce file size."
                ),
                extra={"lines": run.length, "end_line": last},
            )
        )
    return issues


def _is_hash_comment(stripped: str) -> bool:
    return stripped.startswith("#") and not stripped.startswith(("#!", "#["))


__all__ = ["COMMENT_SCAN_EXTENSIONS", "CommentRun", "find_comment_runs", "find_commented_code"]
