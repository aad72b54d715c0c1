"""Project tree walking, file metadata collection and tree rendering."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from .errors import PreconditionError
from .logging import get_logger
from .models import FileRecord

# Files whose contents are read and handed to later stages.
CODE_EXTENSIONS = frozenset(
    {
        ".php", ".js", ".jsx", ".mjs", ".cjs", ".ts", ".tsx", ".vue", ".svelte",
        ".html", ".htm", ".css", ".scss", ".less", ".sass",
        ".json", ".xml", ".yaml", ".yml", ".env", ".sql",
        ".md", ".txt", ".sh", ".bash", ".bat", ".ps1",
        ".py", ".rb", ".go", ".java", ".c", ".cpp", ".h",
        ".twig", ".ejs", ".pug", ".hbs",
    }
)

# Files listed individually in the rendered tree, along with extension-less files;
# everything else is an asset.
TREE_CODE_EXTENSIONS = CODE_EXTENSIONS | frozenset(
    {".config", ".lock", ".toml", ".ini", ".conf", ".graphql", ".prisma", ".proto"}
)

JS_FAMILY_EXTENSIONS = frozenset({".js", ".jsx", ".mjs", ".cjs"})

_MINIFIED_RE = re.compile(r"\.min\.(?:js|css|json)$", re.IGNORECASE)
_ESCAPE_RE = re.compile(r"\\x[0-9a-fA-F]{2}|\\u[0-9a-fA-F]{4}")

_OBFUSCATION_MIN_LENGTH = 512
_ESCAPE_DENSITY_LIMIT = 0.05
_WHITESPACE_RATIO_FLOOR = 0.05
_WHITESPACE_MIN_LENGTH = 1000
_LONG_LINE_LENGTH = 5000

TREE_DATE_FORMAT = "%d.%m.%Y %H:%M"

logger = get_logger("catalog")


def is_minified(name: str) -> bool:
    return bool(_MINIFIED_RE.search(name))


def is_hidden(name: str) -> bool:
    """Dotfiles are hidden except environment files and .htaccess."""
    return name.startswith(".") and not name.startswith((".env", ".htaccess"))


def is_excluded(name: str, relative_path: str, patterns: Sequence[str]) -> bool:
    if is_hidden(name):
        return True
    for pattern in patterns:
        if not pattern:
            continue
        if name == pattern or pattern in relative_path:
            return True
    return False


def count_lines(content: str) -> int:
    return content.count("\n") + 1


def looks_obfuscated(content: str) -> bool:
    """Heuristic for packed or obfuscated JavaScript."""
    length = len(content)
    if length < _OBFUSCATION_MIN_LENGTH:
        return False

    escaped = sum(len(match.group(0)) for match in _ESCAPE_RE.finditer(content))
    if escaped / length > _ESCAPE_DENSITY_LIMIT:
        return True

    if length >= _WHITESPACE_MIN_LENGTH:
        whitespace = sum(1 for char in content if char.isspace())
        if whitespace / length < _WHITESPACE_RATIO_FLOOR:
            return True

    return any(len(line) >= _LONG_LINE_LENGTH for line in content.split("\n"))


@dataclass
class CatalogResult:
    """Outcome of a single catalog walk."""

    root: Path
    files: List[FileRecord] = field(default_factory=list)
    total_folders: int = 0
    minified_skipped: int = 0
    tree: str = ""

    @property
    def total_lines(self) -> int:
        return sum(record.lines for record in self.files)

    def by_extension(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for record in self.files:
            key = record.extension or "(no ext)"
            counts[key] = counts.get(key, 0) + 1
        return dict(sorted(counts.items()))

    def folder_stats(self) -> List[Dict[str, object]]:
        stats: Dict[str, Dict[str, int]] = {}
        for record in self.files:
            folder = record.path.rsplit("/", 1)[0] if "/" in record.path else "."
            entry = stats.setdefault(folder, {"files": 0, "lines": 0, "size": 0})
            entry["files"] += 1
            entry["lines"] += record.lines
            entry["size"] += record.size
        ordered = sorted(stats.items(), key=lambda item: (-item[1]["files"], item[0]))
        return [{"folder": folder, **values} for folder, values in ordered]

    def contents(self) -> Dict[str, str]:
        return {record.path: record.content for record in self.files if record.content is not None}


class FileCatalog:
    """Walks a project once, collecting file records and a collapsed tree view."""

    def __init__(
        self,
        excluded: Iterable[str] = (),
        *,
        max_file_size: int = 5 * 1024 * 1024,
        recent_days: int = 7,
        now: Optional[datetime] = None,
        on_file: Optional[Callable[[int, str], None]] = None,
    ) -> None:
        patterns: List[str] = []
        for pattern in excluded:
            pattern = str(pattern).strip()
            if pattern and pattern not in patterns:
                patterns.append(pattern)
        self.patterns = patterns
        self.max_file_size = max_file_size
        self.recent_days = recent_days
        self.now = now
        self.on_file = on_file
        self._recent_cutoff = 0.0

    def scan(self, root: str | Path) -> CatalogResult:
        """Return file records, folder count and tree for ``root``."""
        root_path = Path(root).expanduser()
        if not root_path.exists():
            raise PreconditionError(f"Root path does not exist: {root}")
        if not root_path.is_dir():
            raise PreconditionError(f"Root path is not a directory: {root}")
        root_path = root_path.resolve()

        now = self.now or datetime.now(UTC)
        self._recent_cutoff = now.timestamp() - timedelta(days=self.recent_days).total_seconds()

        result = CatalogResult(root=root_path)
        tree_lines: List[str] = []
        self._walk(root_path, "", "", result, tree_lines)
        result.files.sort(key=lambda record: record.path)
        result.tree = "\n".join(tree_lines)
        return result

    # ------------------------------------------------------------------
    # Walking

    def _walk(
        self,
        directory: Path,
        rel_dir: str,
        prefix: str,
        result: CatalogResult,
        tree_lines: List[str],
    ) -> None:
        try:
            with os.scandir(directory) as iterator:
                entries = sorted(iterator, key=lambda entry: entry.name)
        except OSError as exc:
            logger.debug("Skipping unreadable directory %s: %s", directory, exc)
            return

        dirs: List[os.DirEntry] = []
        listed: List[os.DirEntry] = []
        assets = 0

        for entry in entries:
            rel_path = f"{rel_dir}/{entry.name}" if rel_dir else entry.name
            if is_excluded(entry.name, rel_path, self.patterns):
                continue
            try:
                if entry.is_dir(follow_symlinks=False):
                    dirs.append(entry)
                    continue
                if not entry.is_file():
                    continue
            except OSError:
                continue

            if is_minified(entry.name):
                result.minified_skipped += 1
                continue

            record = self._record(Path(entry.path), rel_path, entry.name)
            if record is not None:
                result.files.append(record)
                if self.on_file is not None:
                    self.on_file(len(result.files), rel_path)

            extension = _extension(entry.name)
            if not extension or extension in TREE_CODE_EXTENSIONS:
                listed.append(entry)
            else:
                assets += 1

        items: List[tuple[str, object]] = [("dir", entry) for entry in dirs]
        items.extend(("file", item) for item in listed)
        if assets:
            items.append(("assets", assets))

        for index, (kind, payload) in enumerate(items):
            last = index == len(items) - 1
            connector = "└── " if last else "├── "
            child_prefix = prefix + ("    " if last else "│   ")
            if kind == "dir":
                entry = payload  # type: ignore[assignment]
                tree_lines.append(f"{prefix}{connector}{entry.name}/")
                result.total_folders += 1
                child_rel = f"{rel_dir}/{entry.name}" if rel_dir else entry.name
                self._walk(Path(entry.path), child_rel, child_prefix, result, tree_lines)
            elif kind == "file":
                entry = payload  # type: ignore[assignment]
                tree_lines.append(f"{prefix}{connector}{entry.name}{self._recent_suffix(entry)}")
            else:
                plural = "s" if payload != 1 else ""
                tree_lines.append(f"{prefix}{connector}... {payload} asset file{plural} (images, fonts, media)")

    def _record(self, path: Path, rel_path: str, name: str) -> Optional[FileRecord]:
        try:
            stat_result = path.stat()
        except OSError as exc:
            logger.debug("Skipping %s: %s", rel_path, exc)
            return None

        extension = _extension(name)
        modified = datetime.fromtimestamp(stat_result.st_mtime, UTC).isoformat().replace("+00:00", "Z")
        record = FileRecord(
            path=rel_path,
            name=name,
            extension=extension,
            size=stat_result.st_size,
            lines=0,
            last_modified=modified,
        )

        if stat_result.st_size > self.max_file_size:
            return record
        if extension and extension not in CODE_EXTENSIONS:
            return record

        try:
            content = path.read_bytes().decode("utf-8", errors="replace")
        except OSError as exc:
            logger.debug("Unable to read %s: %s", rel_path, exc)
            return record

        record.content = content
        record.lines = count_lines(content)
        if extension in JS_FAMILY_EXTENSIONS:
            record.obfuscated = looks_obfuscated(content)
        return record

    def _recent_suffix(self, entry: os.DirEntry) -> str:
        try:
            mtime = entry.stat().st_mtime
        except OSError:
            return ""
        if mtime < self._recent_cutoff:
            return ""
        return f" ({datetime.fromtimestamp(mtime).strftime(TREE_DATE_FORMAT)})"


def _extension(name: str) -> str:
    return Path(name).suffix.lower()


__all__ = [
    "CODE_EXTENSIONS",
    "CatalogResult",
    "FileCatalog",
    "JS_FAMILY_EXTENSIONS",
    "TREE_CODE_EXTENSIONS",
    "count_lines",
    "is_excluded",
    "is_hidden",
    "is_minified",
    "looks_obfuscated",
]
