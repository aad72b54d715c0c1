"""Regex-based structure scanner for PHP sources."""

from __future__ import annotations

import re
from typing import Any, Dict, List

from .blocks import PARAMS, ClassScope, LineIndex, block_end, depth_between, extract_comments, parse_params

LANGUAGE = "php"

_USE_RE = re.compile(r"^use\s+(?:function\s+|const\s+)?\\?([\w\\]+)(?:\s+as\s+(\w+))?\s*;", re.MULTILINE)
_REQUIRE_RE = re.compile(
    r"\b(?:require|include)(?:_once)?\s*\(?\s*(?:['\"]([^'\"]+)['\"]|(\$\w+))",
)
_CLASS_RE = re.compile(
    r"(?:^[ \t]*|(?:<\?php|[;}])[ \t]*)(?:(?:abstract|final|readonly)\s+)*(class|interface|trait)\s+(\w+)"
    r"(?:\s+extends\s+(\\?[\w\\]+(?:\s*,\s*\\?[\w\\]+)*))?"
    r"(?:\s+implements\s+(\\?[\w\\]+(?:\s*,\s*\\?[\w\\]+)*))?\s*\{",
    re.MULTILINE,
)
_METHOD_RE = re.compile(
    r"((?:(?:public|protected|private|static|abstract|final)\s+)*)function\s+&?(\w+)\s*\("
    + PARAMS
    + r"\)(?:\s*:\s*(\??[\w|\\]+))?\s*[{;]"
)
_PROPERTY_RE = re.compile(
    r"^[ \t]*((?:(?:public|protected|private|static|readonly|var)\s+)+)(?:(\??[\w|\\]+)\s+)?\$(\w+)",
    re.MULTILINE,
)
_FUNCTION_RE = re.compile(
    r"(?:^[ \t]*|(?:<\?php|[;}])[ \t]*)function\s+&?(\w+)\s*\(" + PARAMS + r"\)(?:\s*:\s*(\??[\w|\\]+))?\s*\{",
    re.MULTILINE,
)

_VISIBILITIES = ("public", "protected", "private")


def scan(content: str, path: str) -> Dict[str, Any]:
    """Extract classes, functions, imports and comments from PHP source."""
    index = LineIndex(content)
    result: Dict[str, Any] = {
        "path": path,
        "language": LANGUAGE,
        "classes": [],
        "functions": [],
        "imports": [],
        "exports": [],
        "comments": extract_comments(content, index, hash_comments=True),
    }

    for match in _USE_RE.finditer(content):
        source, alias = match.group(1), match.group(2)
        result["imports"].append(
            {
                "source": source,
                "specifiers": [alias or source.rsplit("\\", 1)[-1]],
                "alias": alias,
                "type": "use",
                "line": index.line_of(match.start()),
            }
        )

    for match in _REQUIRE_RE.finditer(content):
        result["imports"].append(
            {
                "source": match.group(1) or match.group(2),
                "specifiers": [],
                "alias": None,
                "type": "require",
                "line": index.line_of(match.start()),
            }
        )

    headers: List[int] = []
    for match in _CLASS_RE.finditer(content):
        headers.append(match.start(1))
        open_index = match.end() - 1
        close_index = block_end(content, open_index)
        result["classes"].append(
            {
                "name": match.group(2),
                "kind": match.group(1),
                "extends": _names(match.group(3))[0] if match.group(3) else None,
                "implements": _names(match.group(4)),
                "methods": _methods(content, open_index, close_index, index),
                "properties": _properties(content, open_index, close_index),
                "line": index.line_of(match.start(1)),
            }
        )

    scope = ClassScope(content, headers)
    for match in _FUNCTION_RE.finditer(content):
        if scope.contains(match.start(1)):
            continue
        result["functions"].append(
            {
                "name": match.group(1),
                "params": parse_params(match.group(2)),
                "return_type": match.group(3),
                "type": "declaration",
                "is_async": False,
                "is_exported": False,
                "line": index.line_of(match.start(1)),
            }
        )

    return result


def _methods(content: str, open_index: int, close_index: int, index: LineIndex) -> List[Dict[str, Any]]:
    methods: List[Dict[str, Any]] = []
    for match in _METHOD_RE.finditer(content, open_index, close_index):
        if depth_between(content, open_index, match.start()) != 1:
            continue
        modifiers = match.group(1).split()
        name = match.group(2)
        visibility = next((word for word in modifiers if word in _VISIBILITIES), "public")
        methods.append(
            {
                "name": name,
                "visibility": visibility,
                "params": parse_params(match.group(3)),
                "return_type": match.group(4),
                "is_static": "static" in modifiers,
                "is_async": False,
                "is_constructor": name == "__construct",
                "is_magic": name.startswith("__"),
                "line": index.line_of(match.start(2)),
            }
        )
    return methods


def _properties(content: str, open_index: int, close_index: int) -> List[Dict[str, Any]]:
    properties: List[Dict[str, Any]] = []
    for match in _PROPERTY_RE.finditer(content, open_index, close_index):
        if depth_between(content, open_index, match.start()) != 1:
            continue
        modifiers = match.group(1).split()
        properties.append(
            {
                "name": match.group(3),
                "visibility": next((word for word in modifiers if word in _VISIBILITIES), "public"),
                "type": match.group(2),
                "is_static": "static" in modifiers,
            }
        )
    return properties


def _names(value: str | None) -> List[str]:
    if not value:
        return []
    return [name.strip().lstrip("\\") for name in value.split(",") if name.strip()]


__all__ = ["LANGUAGE", "scan"]
