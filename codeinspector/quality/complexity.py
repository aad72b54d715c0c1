"""Per-file branch complexity: one plus the number of branch-indicating constructs."""

from __future__ import annotations

import re
from typing import Dict, List, Mapping, Optional

from ..models import ComplexityRecord

COMPLEXITY_EXTENSIONS = (".php", ".js", ".jsx", ".mjs", ".cjs", ".ts", ".tsx", ".vue")
DEFAULT_THRESHOLD = 10

BRANCH_PATTERNS: Dict[str, re.Pattern[str]] = {
    # PHP elseif is a branch of its own
    "if": re.compile(r"\b(?:else)?if\s*\("),
    "else": re.compile(r"\belse\b"),
    "for": re.compile(r"\b(?:for|foreach)\s*\("),
    "while": re.compile(r"\bwhile\s*\("),
    "switch": re.compile(r"\bswitch\s*\("),
    "case": re.compile(r"\bcase\b(?=\s|['\"(])"),
    "catch": re.compile(r"\bcatch\b\s*[({]"),
    # excludes ?? ?. ?: ?-> ?> and <?
    "ternary": re.compile(r"(?<![<?])\?(?![?.:>=\-])"),
    "logical": re.compile(r"&&|\|\|"),
}


def complexity_breakdown(text: str) -> Dict[str, int]:
    return {kind: len(pattern.findall(text)) for kind, pattern in BRANCH_PATTERNS.items()}


def measure(path: str, content: str, char_limit: Optional[int] = None) -> ComplexityRecord:
    """Return the complexity record for one file regardless of threshold."""
    text = content[:char_limit] if char_limit is not None else content
    breakdown = complexity_breakdown(text)
    score = 1 + sum(breakdown.values())
    lines = content.count("\n") + 1
    return ComplexityRecord(
        file=path,
        complexity=score,
        lines=lines,
        complexity_per_line=round(score / lines, 3),
        breakdown=breakdown,
    )


def analyze_complexity(
    contents: Mapping[str, str],
    *,
    threshold: int = DEFAULT_THRESHOLD,
    skip: frozenset[str] | set[str] = frozenset(),
    char_limit: Optional[int] = None,
) -> List[ComplexityRecord]:
    """Return records above ``threshold``, most complex first."""
    records: List[ComplexityRecord] = []
    for path in sorted(contents):
        content = contents[path]
        if not content or path in skip or not path.lower().endswith(COMPLEXITY_EXTENSIONS):
            continue
        record = measure(path, content, char_limit)
        if record.complexity > threshold:
            records.append(record)
    records.sort(key=lambda record: (-record.complexity, record.file))
    return records


__all__ = ["BRANCH_PATTERNS", "COMPLEXITY_EXTENSIONS", "analyze_complexity", "complexity_breakdown", "measure"]
