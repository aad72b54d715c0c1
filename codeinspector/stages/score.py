"""Stage that condenses earlier findings into a single 0-10 quality score."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from .base import Delta, Snapshot, Stage, StageContext

BIG_FILE_BYTES = 100 * 1024
HUGE_FILE_BYTES = 500 * 1024

_CODE_FILE_RE = re.compile(r"\.(?:php|js|jsx|ts|tsx|mjs|cjs|vue|svelte)$", re.IGNORECASE)
_MODERN_JS_FILE_RE = re.compile(r"\.(?:js|jsx|ts|tsx|mjs|cjs)$", re.IGNORECASE)
_MYSQL_QUERY_RE = re.compile(r"\bmysql_query\s*\(", re.IGNORECASE)
_PREPARED_RE = re.compile(r"->prepare\(|bindParam|bindValue|\bprepare\s*\(|\?\s*,\s*\?", re.IGNORECASE)
_PHP_TYPED_PARAM_RE = re.compile(r"\(\s*(?:string|int|float|bool|array|object|callable|iterable|mixed)\s+\$")
_MODERN_JS_RES = (
    re.compile(r"\bconst\s+\w+\s*="),
    re.compile(r"\blet\s+\w+\s*="),
    re.compile(r"=>\s*\{"),
    re.compile(r"`[^`]*\$\{"),
)

_MESSAGES: Tuple[Tuple[float, str], ...] = (
    (9.5, "Excellent, keep it up!"),
    (8.5, "Great code"),
    (7.0, "Good work"),
    (5.5, "Not bad, room to grow"),
    (4.0, "Needs attention"),
    (2.5, "Many problems, time to clean up"),
)
_FLOOR_MESSAGE = "Make it work first"


@dataclass
class QualityScorecard:
    """Weighted deduction and bonus model producing a bounded score."""

    commented_weight: float = 0.15
    commented_cap: float = 2.0
    big_file_weight: float = 0.5
    huge_file_weight: float = 1.5
    volume_cap: float = 4.0
    unsafe_sql_weight: float = 0.8
    unsafe_sql_cap: float = 2.0
    sql_sample_chars: int = 150_000
    typed_php_weight: float = 0.08
    typed_php_cap: float = 0.4
    modern_js_weight: float = 0.05
    modern_js_cap: float = 0.3
    bonus_files: int = 30
    bonus_sample_chars: int = 8_000

    def evaluate(
        self,
        issues: Sequence[Mapping[str, Any]],
        files: Sequence[Mapping[str, Any]],
        structured_paths: Sequence[str],
        contents: Mapping[str, str],
    ) -> Dict[str, Any]:
        commented = sum(1 for issue in issues if issue.get("kind") == "commented_code")
        code_sizes = [int(record.get("size") or 0) for record in files if _CODE_FILE_RE.search(record["path"])]
        huge = sum(1 for size in code_sizes if size > HUGE_FILE_BYTES)
        big = sum(1 for size in code_sizes if BIG_FILE_BYTES < size <= HUGE_FILE_BYTES)

        deduction = min(commented * self.commented_weight, self.commented_cap)
        deduction += huge * self.huge_file_weight + big * self.big_file_weight
        deduction = min(deduction, self.volume_cap)
        sql_penalty = self._sql_penalty(contents)
        deduction = min(deduction + sql_penalty, 10.0)

        bonus = self._bonus(structured_paths, contents)
        score = round(min(10.0, max(0.0, 10.0 - deduction) + bonus), 1)

        deductions: List[Dict[str, Any]] = []
        if commented:
            deductions.append({"key": "commented_code", "count": commented})
        if huge:
            deductions.append({"key": "large_huge", "count": huge})
        if big:
            deductions.append({"key": "large_big", "count": big})
        if sql_penalty:
            deductions.append({"key": "unsafe_sql"})

        return {
            "score": score,
            "message": score_message(score),
            "deductions": deductions,
            "factors": {
                "commented_code": commented,
                "large_files": huge + big,
                "unsafe_sql_penalty": round(sql_penalty, 2),
                "bonus_applied": round(bonus, 2),
            },
        }

    def _sql_penalty(self, contents: Mapping[str, str]) -> float:
        penalty = 0.0
        for path in sorted(contents):
            if not path.lower().endswith(".php") or not contents[path]:
                continue
            sample = contents[path][: self.sql_sample_chars]
            if _MYSQL_QUERY_RE.search(sample) and not _PREPARED_RE.search(sample):
                penalty += self.unsafe_sql_weight
        return min(penalty, self.unsafe_sql_cap)

    def _bonus(self, structured_paths: Sequence[str], contents: Mapping[str, str]) -> float:
        typed_php = 0
        modern_js = 0
        for path in structured_paths[: self.bonus_files]:
            content = contents.get(path)
            if not content:
                continue
            sample = content[: self.bonus_sample_chars]
            if path.lower().endswith(".php"):
                typed_php += bool(_PHP_TYPED_PARAM_RE.search(sample))
            elif _MODERN_JS_FILE_RE.search(path):
                modern_js += any(pattern.search(sample) for pattern in _MODERN_JS_RES)
        bonus = min(self.typed_php_cap, typed_php * self.typed_php_weight)
        bonus += min(self.modern_js_cap, modern_js * self.modern_js_weight)
        return bonus


def score_message(score: float) -> str:
    for floor, message in _MESSAGES:
        if score >= floor:
            return message
    return _FLOOR_MESSAGE


class QualityScorerStage(Stage):
    """Score the project from quality findings, file sizes and sampled sources."""

    name = "code-score"
    reads = ("file_system", "_file_contents", "code_structure", "code_quality")
    provides = ("code_score",)

    def __init__(self, scorecard: QualityScorecard | None = None) -> None:
        self.scorecard = scorecard or QualityScorecard()

    def process(self, snapshot: Snapshot, context: StageContext) -> Delta:
        issues = (snapshot.get("code_quality") or {}).get("issues") or ()
        files = (snapshot.get("file_system") or {}).get("files") or ()
        structured = [analysis["path"] for analysis in (snapshot.get("code_structure") or {}).get("files") or ()]
        contents: Mapping[str, str] = snapshot.get("_file_contents") or {}
        return {"code_score": self.scorecard.evaluate(issues, files, structured, contents)}


__all__ = ["QualityScorecard", "QualityScorerStage", "score_message"]
