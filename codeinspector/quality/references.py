"""Project-wide reference set: names seen in call, instantiation, type or import positions.

The set is a bag of bare identifiers with no provenance. It is deliberately
conservative: a function passed around by name without parentheses is never
counted as referenced.
"""

from __future__ import annotations

import re
from typing import Callable, Iterable, Mapping, Optional, Set

ProgressHook = Callable[[int, int, str], None]

_CALL_RE = re.compile(r"(?<![\w$])([A-Za-z_$][\w$]*)\s*\(")
_DECLARATION_PREFIX_RE = re.compile(r"\bfunction\s*\*?\s*&?\s*$")
_SHORTHAND_DECLARATION_RE = re.compile(
    r"(?:^|(?<=[{;}]))[ \t]*(?:(?:public|private|protected|static|async|get|set|readonly|override|abstract)\s+)*"
    r"(?:\*\s*)?#?([\w$]+)\s*(?:<[^>(\n]*>)?\s*\((?:[^()\n]|\([^()\n]*\))*\)(?:\s*:\s*[^{;=\n]+?)?\s*\{",
    re.MULTILINE,
)
_MEMBER_CALL_RE = re.compile(r"(?:->|\?->|\.|::)\s*([\w$]+)\s*\(")
_NEW_RE = re.compile(r"\bnew\s+\\?(?:\w+\\)*([A-Za-z_$][\w$]*)")
_STATIC_RE = re.compile(r"([A-Za-z_]\w*)\s*::")
_INHERITANCE_RE = re.compile(
    r"\b(?:extends|implements|instanceof)\s+(\\?[\w$.\\]+(?:\s*,\s*\\?[\w$.\\]+)*)"
)
_TYPE_ANNOTATION_RE = re.compile(r":\s*\??\s*(\\?[A-Za-z_][\w\\]*)")
_PHP_TYPED_PARAM_RE = re.compile(r"\b([A-Z]\w*)\s+&?(?:\.\.\.)?\$\w+")
_COMPONENT_TAG_RE = re.compile(r"<([A-Z][\w$]*)[\s/>.]")
_KEBAB_TAG_RE = re.compile(r"<([a-z][a-z0-9]*(?:-[a-z0-9]+)+)[\s/>]")
_IMPORT_CLAUSE_RE = re.compile(r"\bimport\s+(?:type\s+)?([\w$*{}\s,]+?)\s+from\b")
_REQUIRE_BINDING_RE = re.compile(r"\b(?:const|let|var)\s+(\{[^}]*\}|[\w$]+)\s*=\s*require\b")
_PHP_USE_RE = re.compile(r"\buse\s+(?:function\s+|const\s+)?\\?([\w\\]+)(?:\s+as\s+(\w+))?")
_EXPORT_LIST_RE = re.compile(r"\bexport\s+(?:type\s+)?\{([^}]*)\}")
_MODULE_EXPORTS_RE = re.compile(r"\bmodule\.exports\s*=\s*(\{[^}]*\}|[\w$]+)")
_IDENTIFIER_RE = re.compile(r"[A-Za-z_$][\w$]*")


def file_references(text: str) -> Set[str]:
    """Return the names referenced in a single file's text."""
    names: Set[str] = set()
    declared_at = {match.start(1) for match in _SHORTHAND_DECLARATION_RE.finditer(text)}

    for match in _CALL_RE.finditer(text):
        start = match.start(1)
        if start in declared_at:
            continue
        if _DECLARATION_PREFIX_RE.search(text, max(0, start - 24), start):
            continue
        names.add(match.group(1))

    for pattern in (_MEMBER_CALL_RE, _NEW_RE, _STATIC_RE, _PHP_TYPED_PARAM_RE, _COMPONENT_TAG_RE):
        names.update(match.group(1) for match in pattern.finditer(text))

    for match in _INHERITANCE_RE.finditer(text):
        names.update(_last_segment(name) for name in match.group(1).split(","))
    for match in _TYPE_ANNOTATION_RE.finditer(text):
        names.add(_last_segment(match.group(1)))
    for match in _KEBAB_TAG_RE.finditer(text):
        names.add("".join(part.capitalize() for part in match.group(1).split("-")))

    for pattern in (_IMPORT_CLAUSE_RE, _REQUIRE_BINDING_RE, _EXPORT_LIST_RE, _MODULE_EXPORTS_RE):
        for match in pattern.finditer(text):
            names.update(_IDENTIFIER_RE.findall(match.group(1)))
    for match in _PHP_USE_RE.finditer(text):
        names.add(_last_segment(match.group(1)))
        if match.group(2):
            names.add(match.group(2))

    names.discard("")
    return names


def build_reference_set(
    contents: Mapping[str, str],
    *,
    skip: Iterable[str] = (),
    char_limit: Optional[int] = None,
    progress: Optional[ProgressHook] = None,
) -> frozenset[str]:
    """Scan every file once and return the immutable project-wide reference set."""
    skipped = set(skip)
    paths = [path for path in sorted(contents) if path not in skipped and contents[path]]
    references: Set[str] = set()
    for position, path in enumerate(paths, start=1):
        text = contents[path]
        if char_limit is not None:
            text = text[:char_limit]
        references.update(file_references(text))
        if progress is not None:
            progress(position, len(paths), path)
    return frozenset(references)


def _last_segment(name: str) -> str:
    name = name.strip().rstrip("\\")
    return re.split(r"[\\.]", name)[-1] if name else ""


__all__ = ["build_reference_set", "file_references"]
