"""Core data models shared across codeinspector components."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

SEVERITY_ORDER = {"critical": 0, "warning": 1, "info": 2}


@dataclass
class ProjectContext:
    """Caller-supplied description of the project to analyze."""

    root_path: str
    name: Optional[str] = None
    excluded_folders: List[str] = field(default_factory=list)
    project_type: str = "auto"
    framework: Optional[str] = None

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        normalised = self.root_path.replace("\\", "/").rstrip("/")
        return normalised.rsplit("/", 1)[-1] or normalised


@dataclass
class FileRecord:
    """Metadata for a single catalogued file."""

    path: str
    name: str
    extension: str
    size: int
    lines: int
    last_modified: str
    content: Optional[str] = None
    obfuscated: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "name": self.name,
            "extension": self.extension,
            "size": self.size,
            "lines": self.lines,
            "last_modified": self.last_modified,
            "obfuscated": self.obfuscated,
        }


@dataclass(frozen=True)
class DeclaredSymbol:
    """A function, method or class declaration site."""

    name: str
    kind: str
    file: str
    line: int
    language: str
    class_name: Optional[str] = None
    visibility: Optional[str] = None


@dataclass(frozen=True)
class Issue:
    """A typed, severity-tagged finding emitted by the quality stage."""

    name: str
    kind: str
    severity: str
    file: Optional[str]
    line: Optional[int]
    tag: str
    description: str
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "kind": self.kind,
            "severity": self.severity,
            "file": self.file,
            "line": self.line,
            "tag": self.tag,
            "description": self.description,
        }
        for key, value in self.extra.items():
            data.setdefault(key, value)
        return data


@dataclass(frozen=True)
class ComplexityRecord:
    """Per-file branch complexity above the reporting threshold."""

    file: str
    complexity: int
    lines: int
    complexity_per_line: float
    breakdown: Dict[str, int]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ProgressEvent:
    """Progress notification forwarded to the caller."""

    stage: str
    current: int
    total: Optional[int]
    detail: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class StageRun:
    """Execution record for one pipeline stage."""

    name: str
    duration_ms: int
    status: str
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "duration_ms": self.duration_ms,
            "status": self.status,
        }
        if self.error is not None:
            data["error"] = self.error
        return data
