"""Quality analysis building blocks used by the code-quality stage."""

from __future__ import annotations

from .comments import find_commented_code
from .complexity import analyze_complexity
from .functions import find_large_functions
from .references import build_reference_set
from .symbols import DeclaredSymbols, collect_declared
from .unused import (
    detect_dynamic_loading,
    find_unused_classes,
    find_unused_dependencies,
    find_unused_imports,
    find_unused_symbols,
)

__all__ = [
    "DeclaredSymbols",
    "analyze_complexity",
    "build_reference_set",
    "collect_declared",
    "detect_dynamic_loading",
    "find_commented_code",
    "find_large_functions",
    "find_unused_classes",
    "find_unused_dependencies",
    "find_unused_imports",
    "find_unused_symbols",
]
