"""Vue single-file component scanner: every ``<script>`` block goes through the JS scanner."""

from __future__ import annotations

import re
from typing import Any, Dict

from . import javascript
from .blocks import LineIndex

LANGUAGE = "vue"

_SCRIPT_RE = re.compile(r"<script\b(?P<attrs>[^>]*)>(?P<body>.*?)</script\s*>", re.DOTALL | re.IGNORECASE)
_TS_LANG_RE = re.compile(r"\blang\s*=\s*['\"](?:ts|tsx)['\"]", re.IGNORECASE)


def scan(content: str, path: str) -> Dict[str, Any]:
    """Scan all script blocks of a component, keeping line numbers file-relative."""
    result: Dict[str, Any] = {
        "path": path,
        "language": LANGUAGE,
        "classes": [],
        "functions": [],
        "imports": [],
        "exports": [],
        "comments": [],
        "is_script_setup": False,
    }
    index = LineIndex(content)
    for match in _SCRIPT_RE.finditer(content):
        attrs = match.group("attrs")
        if re.search(r"\bsetup\b", attrs):
            result["is_script_setup"] = True
        block = javascript.scan(
            match.group("body"),
            path,
            language="typescript" if _TS_LANG_RE.search(attrs) else "javascript",
            first_line=index.line_of(match.start("body")),
        )
        for key in ("classes", "functions", "imports", "exports", "comments"):
            result[key].extend(block[key])
    return result


__all__ = ["LANGUAGE", "scan"]
