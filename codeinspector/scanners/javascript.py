"""Regex-based structure scanner for JavaScript and TypeScript sources."""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from .blocks import PARAMS, ClassScope, LineIndex, block_end, depth_between, extract_comments, parse_params

TYPESCRIPT_EXTENSIONS = (".ts", ".tsx")

_IMPORT_RE = re.compile(
    r"^[ \t]*import\s+(?:type\s+)?(?:(?P<clause>[\w$*{}\s,]+?)\s+from\s+)?['\"](?P<source>[^'\"\n]+)['\"]",
    re.MULTILINE,
)
_REQUIRE_BINDING_RE = re.compile(
    r"\b(?:const|let|var)\s+(?:\{(?P<names>[^}]+)\}|(?P<name>[\w$]+))\s*=\s*require\s*\(\s*['\"](?P<source>[^'\"]+)['\"]\s*\)"
)
_REQUIRE_BARE_RE = re.compile(r"^[ \t]*require\s*\(\s*['\"](?P<source>[^'\"]+)['\"]\s*\)", re.MULTILINE)
_CLASS_RE = re.compile(
    r"(?<![\w$.])(?P<export>export\s+(?:default\s+)?)?(?:abstract\s+)?class\s+(?P<name>[\w$]+)(?:\s*<[^>{]*>)?"
    r"(?:\s+extends\s+(?P<extends>[\w$.]+)(?:\s*<[^>{]*>)?)?"
    r"(?:\s+implements\s+(?P<implements>[\w$.,\s<>]+?))?\s*\{"
)
_METHOD_RE = re.compile(
    r"(?:^|(?<=[{;}]))[ \t]*(?P<modifiers>(?:(?:public|private|protected|static|async|get|set|readonly|override|abstract)\s+)*)"
    r"(?:\*\s*)?(?P<name>#?[\w$]+)\s*(?:<[^>(\n]*>)?\s*\((?P<params>(?:[^()\n]|\([^()\n]*\))*)\)"
    r"(?:\s*:\s*(?P<returns>[^{;=\n]+?))?\s*\{",
    re.MULTILINE,
)
_FUNCTION_RE = re.compile(
    r"(?<![\w$.])(?P<export>export\s+(?:default\s+)?)?(?P<async>async\s+)?function\s*\*?\s*(?P<name>[\w$]+)\s*"
    r"(?:<[^>(]*>)?\s*\(" + PARAMS + r"\)(?:\s*:\s*(?P<returns>[^{;]+?))?\s*\{"
)
_ARROW_RE = re.compile(
    r"(?<![\w$.])(?P<export>export\s+)?(?:const|let|var)\s+(?P<name>[\w$]+)\s*(?::\s*[^=;\n]+?)?=\s*(?P<async>async\s+)?"
    r"(?:\((?P<params>(?:[^()]|\([^()]*\))*)\)(?:\s*:\s*(?P<returns>[^=;{\n]+?))?|(?P<single>[\w$]+))\s*=>"
)
_MODULE_EXPORTS_RE = re.compile(r"\bmodule\.exports\s*=\s*(?:\{(?P<names>[^}]*)\}|(?P<name>[\w$]+))")
_EXPORTS_PROPERTY_RE = re.compile(r"(?<![\w$.])(?:module\.)?exports\.(?P<name>[\w$]+)\s*=(?!=)")
_NAMED_EXPORT_RE = re.compile(r"(?<![\w$.])export\s+(?:type\s+)?\{(?P<names>[^}]*)\}")
_DECLARED_EXPORT_RE = re.compile(
    r"(?<![\w$.])export\s+(?!default\b)(?:declare\s+)?(?:async\s+)?"
    r"(?:const|let|var|function\s*\*?|class|interface|type|enum|abstract\s+class)\s+(?P<name>[\w$]+)"
)
_DEFAULT_EXPORT_RE = re.compile(
    r"(?<![\w$.])export\s+default\s+(?:abstract\s+)?(?:class\s+|(?:async\s+)?function\s*\*?\s*)?(?P<name>[\w$]+)"
)

_KEYWORDS = frozenset(
    {"if", "for", "while", "switch", "catch", "function", "return", "with", "else", "do", "typeof", "new", "await"}
)
_ACCESS = ("public", "private", "protected")

LIFECYCLE_METHODS = frozenset(
    {
        "render",
        "componentDidMount",
        "componentDidUpdate",
        "componentWillUnmount",
        "mounted",
        "created",
        "updated",
        "destroyed",
        "beforeMount",
        "beforeUpdate",
        "beforeDestroy",
        "unmounted",
    }
)


def language_for(path: str) -> str:
    return "typescript" if path.lower().endswith(TYPESCRIPT_EXTENSIONS) else "javascript"


def scan(content: str, path: str, *, language: Optional[str] = None, first_line: int = 1) -> Dict[str, Any]:
    """Extract classes, functions, imports, exports and comments from JS/TS source."""
    index = LineIndex(content, first_line)
    result: Dict[str, Any] = {
        "path": path,
        "language": language or language_for(path),
        "classes": [],
        "functions": [],
        "imports": _imports(content, index),
        "exports": _exports(content, index),
        "comments": extract_comments(content, index),
    }

    headers: List[int] = []
    for match in _CLASS_RE.finditer(content):
        headers.append(match.start("name"))
        open_index = match.end() - 1
        result["classes"].append(
            {
                "name": match.group("name"),
                "kind": "class",
                "extends": match.group("extends"),
                "implements": _split_names(match.group("implements")),
                "methods": _methods(content, open_index, block_end(content, open_index), index),
                "line": index.line_of(match.start("name")),
                "is_exported": bool(match.group("export")),
            }
        )

    scope = ClassScope(content, headers)
    found: List[tuple[int, Dict[str, Any]]] = []
    for match in _FUNCTION_RE.finditer(content):
        if scope.contains(match.start("name")):
            continue
        found.append(
            (
                match.start("name"),
                {
                    "name": match.group("name"),
                    "params": parse_params(match.group(4)),
                    "return_type": _clean(match.group("returns")),
                    "type": "declaration",
                    "is_async": bool(match.group("async")),
                    "is_exported": bool(match.group("export")),
                    "line": index.line_of(match.start("name")),
                },
            )
        )
    for match in _ARROW_RE.finditer(content):
        if scope.contains(match.start("name")):
            continue
        params = match.group("params") if match.group("single") is None else match.group("single")
        found.append(
            (
                match.start("name"),
                {
                    "name": match.group("name"),
                    "params": parse_params(params),
                    "return_type": _clean(match.group("returns")),
                    "type": "arrow",
                    "is_async": bool(match.group("async")),
                    "is_exported": bool(match.group("export")),
                    "line": index.line_of(match.start("name")),
                },
            )
        )
    found.sort(key=lambda item: item[0])
    result["functions"] = [function for _, function in found]
    return result


def _imports(content: str, index: LineIndex) -> List[Dict[str, Any]]:
    found: List[tuple[int, Dict[str, Any]]] = []

    for match in _IMPORT_RE.finditer(content):
        specifiers, alias = _import_clause(match.group("clause") or "")
        found.append(
            (
                match.start(),
                {
                    "source": match.group("source"),
                    "specifiers": specifiers,
                    "alias": alias,
                    "type": "es6",
                    "line": index.line_of(match.start()),
                },
            )
        )

    for match in _REQUIRE_BINDING_RE.finditer(content):
        if match.group("names"):
            specifiers = [_local_binding(part) for part in match.group("names").split(",")]
            specifiers = [name for name in specifiers if name]
        else:
            specifiers = [match.group("name")]
        found.append(
            (
                match.start(),
                {
                    "source": match.group("source"),
                    "specifiers": specifiers,
                    "alias": match.group("name"),
                    "type": "commonjs",
                    "line": index.line_of(match.start()),
                },
            )
        )

    for match in _REQUIRE_BARE_RE.finditer(content):
        found.append(
            (
                match.start(),
                {
                    "source": match.group("source"),
                    "specifiers": [],
                    "alias": None,
                    "type": "commonjs",
                    "line": index.line_of(match.start()),
                },
            )
        )

    found.sort(key=lambda item: item[0])
    return [entry for _, entry in found]


def _import_clause(clause: str) -> tuple[List[str], Optional[str]]:
    """Return local binding names and the namespace alias for an import clause."""
    specifiers: List[str] = []
    alias: Optional[str] = None
    named = re.search(r"\{([^}]*)\}", clause)
    if named:
        for part in named.group(1).split(","):
            part = re.sub(r"^\s*type\s+", "", part).strip()
            if not part:
                continue
            local = re.split(r"\s+as\s+", part)[-1].strip()
            if local:
                specifiers.append(local)
        clause = clause[: named.start()] + clause[named.end():]
    for token in clause.split(","):
        token = token.strip()
        if not token:
            continue
        namespace = re.match(r"\*\s*as\s+([\w$]+)", token)
        if namespace:
            alias = namespace.group(1)
            specifiers.append(alias)
        elif re.fullmatch(r"[\w$]+", token):
            specifiers.insert(0, token)
    return specifiers, alias


def _local_binding(part: str) -> str:
    part = part.split("=", 1)[0].strip()
    if ":" in part:
        part = part.split(":", 1)[1].strip()
    return part


def _exports(content: str, index: LineIndex) -> List[Dict[str, Any]]:
    found: List[tuple[int, Dict[str, Any]]] = []

    def _add(position: int, name: str, kind: str) -> None:
        if name:
            found.append((position, {"name": name, "type": kind, "line": index.line_of(position)}))

    for match in _MODULE_EXPORTS_RE.finditer(content):
        if match.group("names") is not None:
            for part in match.group("names").split(","):
                _add(match.start(), part.split(":", 1)[0].strip(), "commonjs")
        else:
            _add(match.start(), match.group("name"), "commonjs")
    for match in _EXPORTS_PROPERTY_RE.finditer(content):
        _add(match.start(), match.group("name"), "commonjs")
    for match in _NAMED_EXPORT_RE.finditer(content):
        for part in match.group("names").split(","):
            _add(match.start(), re.split(r"\s+as\s+", part.strip())[0].strip(), "es6")
    for match in _DECLARED_EXPORT_RE.finditer(content):
        _add(match.start(), match.group("name"), "es6")
    for match in _DEFAULT_EXPORT_RE.finditer(content):
        _add(match.start(), match.group("name"), "default")

    found.sort(key=lambda item: item[0])
    return [entry for _, entry in found]


def _methods(content: str, open_index: int, close_index: int, index: LineIndex) -> List[Dict[str, Any]]:
    methods: List[Dict[str, Any]] = []
    for match in _METHOD_RE.finditer(content, open_index + 1, close_index):
        name = match.group("name")
        if name in _KEYWORDS:
            continue
        if depth_between(content, open_index, match.start()) != 1:
            continue
        modifiers = match.group("modifiers").split()
        if name.startswith("#"):
            visibility = "private"
        else:
            visibility = next((word for word in modifiers if word in _ACCESS), "public")
        methods.append(
            {
                "name": name.lstrip("#"),
                "visibility": visibility,
                "params": parse_params(match.group("params")),
                "return_type": _clean(match.group("returns")),
                "is_static": "static" in modifiers,
                "is_async": "async" in modifiers,
                "is_getter": "get" in modifiers,
                "is_setter": "set" in modifiers,
                "is_constructor": name == "constructor",
                "is_magic": name in LIFECYCLE_METHODS,
                "line": index.line_of(match.start("name")),
            }
        )
    return methods


def _split_names(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [name.strip() for name in value.split(",") if name.strip()]


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


__all__ = ["LIFECYCLE_METHODS", "language_for", "scan"]
