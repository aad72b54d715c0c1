"""Collect declared functions, methods and classes from structure analyses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping

from ..models import DeclaredSymbol

# Names invoked by frameworks or the runtime rather than by project code.
ENTRY_POINT_NAMES = frozenset(
    {
        "main", "init", "setup", "boot", "register", "run", "start", "execute", "handle",
        "__construct", "__destruct", "__get", "__set", "__call", "__callStatic",
        "__toString", "__invoke", "__clone",
        "render", "componentDidMount", "componentDidUpdate", "componentWillUnmount",
        "useEffect", "useState", "mounted", "created", "updated", "destroyed",
        "toJSON", "toString", "valueOf", "Symbol",
        "get", "set", "post", "put", "delete", "patch",
        "index", "store", "show", "update", "destroy", "create",
    }
)


def is_entry_point(name: str) -> bool:
    return name in ENTRY_POINT_NAMES


def is_implicit_method(name: str) -> bool:
    """Constructors and magic methods are called implicitly and never tracked."""
    return name in ("constructor", "__construct") or name.startswith("__")


@dataclass
class DeclaredSymbols:
    """Declaration sites grouped by kind, in file then line order."""

    functions: List[DeclaredSymbol] = field(default_factory=list)
    methods: List[DeclaredSymbol] = field(default_factory=list)
    classes: List[DeclaredSymbol] = field(default_factory=list)


def collect_declared(analyses: Iterable[Mapping[str, Any]]) -> DeclaredSymbols:
    declared = DeclaredSymbols()
    for analysis in sorted(analyses, key=lambda item: item["path"]):
        path = analysis["path"]
        language = analysis.get("language") or "unknown"
        for function in analysis.get("functions") or ():
            declared.functions.append(
                DeclaredSymbol(
                    name=function["name"],
                    kind="function",
                    file=path,
                    line=function["line"],
                    language=language,
                )
            )
        for cls in analysis.get("classes") or ():
            declared.classes.append(
                DeclaredSymbol(name=cls["name"], kind="class", file=path, line=cls["line"], language=language)
            )
            for method in cls.get("methods") or ():
                if is_implicit_method(method["name"]):
                    continue
                declared.methods.append(
                    DeclaredSymbol(
                        name=method["name"],
                        kind="method",
                        file=path,
                        line=method["line"],
                        language=language,
                        class_name=cls["name"],
                        visibility=method.get("visibility"),
                    )
                )
    return declared


__all__ = ["DeclaredSymbols", "ENTRY_POINT_NAMES", "collect_declared", "is_entry_point", "is_implicit_method"]
