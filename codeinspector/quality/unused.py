"""Unused function, method, class, import and dependency detection."""

from __future__ import annotations

import re
from typing import Any, Iterable, List, Mapping, Sequence

from ..manifests import MANIFEST_FILENAMES
from ..models import DeclaredSymbol, Issue
from .symbols import is_entry_point

# Runtimes and tooling families that are used without ever being imported.
IMPLICIT_RUNTIMES = ("php", "node")
IMPLICIT_DEPENDENCIES = (
    "typescript", "nodemon", "@types/", "eslint", "prettier", "jest", "mocha",
    "webpack", "vite", "babel", "autoprefixer", "postcss", "sass", "less", "dotenv",
)

_DYNAMIC_PATTERNS = (
    re.compile(r"\bnew\s+\$\$?\w+"),
    re.compile(r"\$\w+\s*=\s*ucfirst\s*\("),
    re.compile(r"\bcall_user_func(?:_array)?\s*\("),
    re.compile(r"\bnew\s+\\?ReflectionClass\s*\("),
)


def detect_dynamic_loading(contents: Mapping[str, str]) -> bool:
    """True when any PHP source instantiates or invokes classes by runtime-computed name."""
    for path in sorted(contents):
        if not path.lower().endswith(".php"):
            continue
        text = contents[path]
        if text and any(pattern.search(text) for pattern in _DYNAMIC_PATTERNS):
            return True
    return False


def find_unused_symbols(symbols: Sequence[DeclaredSymbol], references: frozenset[str]) -> List[Issue]:
    """Report functions and methods whose names never appear in the reference set."""
    issues: List[Issue] = []
    for symbol in symbols:
        if is_entry_point(symbol.name) or symbol.name in references:
            continue
        extra: dict[str, Any] = {"language": symbol.language}
        if symbol.kind == "method":
            extra["class_name"] = symbol.class_name
        issues.append(
            Issue(
                name=symbol.name,
                kind=f"unused_{symbol.kind}",
                severity="warning",
                file=symbol.file,
                line=symbol.line,
                tag="never called",
                description=f'"{symbol.name}" is declared but never referenced in the project',
                extra=extra,
            )
        )
    return issues


def find_unused_classes(
    classes: Sequence[DeclaredSymbol],
    references: frozenset[str],
    dynamic_loading: bool,
) -> List[Issue]:
    """Report unreferenced classes; PHP classes are downgraded when dynamic loading is present."""
    issues: List[Issue] = []
    for symbol in classes:
        if is_entry_point(symbol.name) or symbol.name in references:
            continue
        dynamic = dynamic_loading and symbol.language == "php"
        if dynamic:
            description = (
                f'"{symbol.name}" has no direct reference; it is likely loaded dynamically '
                "(runtime class instantiation detected)"
            )
        else:
            description = f'"{symbol.name}" is declared but never referenced in the project'
        issues.append(
            Issue(
                name=symbol.name,
                kind="unused_class",
                severity="info" if dynamic else "warning",
                file=symbol.file,
                line=symbol.line,
                tag="dynamic" if dynamic else "never instantiated",
                description=description,
                extra={"language": symbol.language, "dynamic": dynamic},
            )
        )
    return issues


def find_unused_imports(analyses: Iterable[Mapping[str, Any]], contents: Mapping[str, str]) -> List[Issue]:
    """Report import specifiers that occur only once (in the import itself) in their file."""
    issues: List[Issue] = []
    for analysis in sorted(analyses, key=lambda item: item["path"]):
        path = analysis["path"]
        text = contents.get(path)
        if not text:
            continue
        for entry in analysis.get("imports") or ():
            specifiers = list(entry.get("specifiers") or ())
            if not specifiers and entry.get("alias"):
                specifiers.append(entry["alias"])
            for specifier in specifiers:
                if not specifier or specifier.startswith("$"):
                    continue
                occurrences = len(re.findall(rf"(?<![\w$]){re.escape(specifier)}(?![\w$])", text))
                if occurrences > 1:
                    continue
                issues.append(
                    Issue(
                        name=specifier,
                        kind="unused_import",
                        severity="info",
                        file=path,
                        line=entry.get("line"),
                        tag="never used",
                        description=f'Import "{specifier}" from "{entry.get("source")}" is never used',
                        extra={"source": entry.get("source")},
                    )
                )
    return issues


def find_unused_dependencies(
    dependencies: Iterable[Mapping[str, Any]],
    contents: Mapping[str, str],
) -> List[Issue]:
    """Report production dependencies that no source file imports."""
    sources = [
        contents[path]
        for path in sorted(contents)
        if contents[path] and path.rsplit("/", 1)[-1] not in MANIFEST_FILENAMES
    ]
    issues: List[Issue] = []
    for dependency in dependencies:
        name = dependency.get("name")
        if not name or dependency.get("type", "production") != "production":
            continue
        if is_implicit_dependency(name):
            continue
        patterns = dependency_patterns(name)
        if any(pattern.search(text) for text in sources for pattern in patterns):
            continue
        source = dependency.get("source") or "the manifest"
        issues.append(
            Issue(
                name=name,
                kind="unused_dependency",
                severity="info",
                file=dependency.get("source"),
                line=None,
                tag="not imported",
                description=f'Dependency "{name}" is listed in {source} but not imported in code',
                extra={"version": dependency.get("version"), "source": dependency.get("source")},
            )
        )
    return issues


def is_implicit_dependency(name: str) -> bool:
    """Runtimes match exactly; tooling matches its whole package family."""
    if name in IMPLICIT_RUNTIMES:
        return True
    for family in IMPLICIT_DEPENDENCIES:
        if family.endswith("/"):
            if name.startswith(family):
                return True
        elif name == family or name.startswith((f"{family}-", f"@{family}/")):
            return True
    return False


def dependency_patterns(name: str) -> List[re.Pattern[str]]:
    """Import-like textual references to a package name."""
    quoted = re.escape(name)
    patterns = [
        re.compile(rf"['\"`]{quoted}['\"`/]"),
        re.compile(rf"\brequire\s*\(\s*['\"`]{quoted}"),
        re.compile(rf"\bfrom\s+['\"`]{quoted}"),
        re.compile(rf"\bimport\s*\(\s*['\"`]{quoted}"),
    ]
    if "/" in name and not name.startswith("@"):
        vendor, package = name.split("/", 1)
        vendor_ns = re.escape(vendor.replace("-", ""))
        package_ns = re.escape(package.replace("-", ""))
        patterns.append(re.compile(rf"\buse\s+\\?{vendor_ns}\\", re.IGNORECASE))
        patterns.append(re.compile(rf"\b{vendor_ns}\\{package_ns}\b", re.IGNORECASE))
    return patterns


__all__ = [
    "IMPLICIT_DEPENDENCIES",
    "IMPLICIT_RUNTIMES",
    "dependency_patterns",
    "detect_dynamic_loading",
    "find_unused_classes",
    "find_unused_dependencies",
    "find_unused_imports",
    "find_unused_symbols",
    "is_implicit_dependency",
]
