"""Text helpers shared by the language scanners: line lookup, brace blocks, comments."""

from __future__ import annotations

import re
from bisect import bisect_right
from typing import Dict, List, Optional, Sequence

# One level of nested parentheses inside a parameter list, e.g. ``$x = array()``.
PARAMS = r"((?:[^()]|\([^()]*\))*)"

_LINE_COMMENT_RE = re.compile(r"(?<![:\\\"'])//(?P<text>[^\n]*)")
_BLOCK_COMMENT_RE = re.compile(r"/\*(?P<text>.*?)\*/", re.DOTALL)
_HASH_COMMENT_RE = re.compile(r"(?<![\w$'\"])#(?!\[)(?P<text>[^\n]*)")
# Default-value separator; arrow types such as `() => T` are not defaults.
_DEFAULT_RE = re.compile(r"=(?!>)")


class LineIndex:
    """Maps character offsets in a text to 1-based line numbers."""

    def __init__(self, text: str, first_line: int = 1) -> None:
        self._starts = [0]
        self._starts.extend(match.end() for match in re.finditer("\n", text))
        self._offset = first_line - 1

    def line_of(self, position: int) -> int:
        return bisect_right(self._starts, position) + self._offset


class ClassScope:
    """Answers whether a position lies inside a class body.

    A position counts as inside when the braces opened since the most recent
    class header before it are still unbalanced.
    """

    def __init__(self, text: str, header_positions: Sequence[int]) -> None:
        self._text = text
        self._headers = sorted(header_positions)

    def contains(self, position: int) -> bool:
        index = bisect_right(self._headers, position) - 1
        if index < 0:
            return False
        segment = self._text[self._headers[index]:position]
        return segment.count("{") - segment.count("}") > 0


def block_end(text: str, open_index: int) -> int:
    """Return the index just past the brace that closes the one at ``open_index``."""
    depth = 0
    for index in range(open_index, len(text)):
        char = text[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index + 1
    return len(text)


def extract_block(text: str, open_index: int) -> str:
    """Return the brace-delimited block that starts at ``open_index``."""
    return text[open_index:block_end(text, open_index)]


def depth_between(text: str, start: int, end: int) -> int:
    segment = text[start:end]
    return segment.count("{") - segment.count("}")


def parse_params(params: Optional[str]) -> List[str]:
    """Split a parameter list into declarations without default values."""
    if not params or not params.strip():
        return []
    parsed: List[str] = []
    for part in params.split(","):
        declaration = _DEFAULT_RE.split(part, 1)[0].strip()
        if declaration.startswith("..."):
            declaration = declaration[3:]
        if declaration:
            parsed.append(declaration)
    return parsed


def extract_comments(text: str, index: LineIndex, *, hash_comments: bool = False) -> List[Dict[str, object]]:
    """Return line and block comments in source order."""
    found: List[tuple[int, Dict[str, object]]] = []
    blocked: List[tuple[int, int]] = []

    for match in _BLOCK_COMMENT_RE.finditer(text):
        blocked.append((match.start(), match.end()))
        body = match.group("text").strip("*! \t\r\n")
        first = body.splitlines()[0].strip(" *\t") if body else ""
        found.append(
            (match.start(), {"text": first, "line": index.line_of(match.start()), "type": "block"})
        )

    patterns = [_LINE_COMMENT_RE]
    if hash_comments:
        patterns.append(_HASH_COMMENT_RE)
    for pattern in patterns:
        for match in pattern.finditer(text):
            if _within(match.start(), blocked):
                continue
            comment = match.group("text").strip()
            if not comment or comment.startswith("/"):
                continue
            found.append((match.start(), {"text": comment, "line": index.line_of(match.start()), "type": "line"}))

    found.sort(key=lambda item: item[0])
    return [comment for _, comment in found]


def _within(position: int, spans: Sequence[tuple[int, int]]) -> bool:
    return any(start <= position < end for start, end in spans)


__all__ = [
    "ClassScope",
    "LineIndex",
    "PARAMS",
    "block_end",
    "depth_between",
    "extract_block",
    "extract_comments",
    "parse_params",
]
