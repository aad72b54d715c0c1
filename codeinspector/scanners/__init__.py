"""Language scanners that recover declarations from source text without parsing."""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from . import javascript, php, vue

Scanner = Callable[[str, str], Dict[str, Any]]

_SCANNERS: Dict[str, Scanner] = {
    ".php": php.scan,
    ".js": javascript.scan,
    ".jsx": javascript.scan,
    ".mjs": javascript.scan,
    ".cjs": javascript.scan,
    ".ts": javascript.scan,
    ".tsx": javascript.scan,
    ".vue": vue.scan,
}

def scanner_for(extension: str) -> Optional[Scanner]:
    return _SCANNERS.get(extension.lower())


__all__ = ["Scanner", "scanner_for"]
