"""Stage that surfaces navigational hotspots: entry points, config, env and log files."""

from __future__ import annotations

import re
from typing import Any, Dict, List, Mapping, Sequence

from .base import Delta, Snapshot, Stage, StageContext

MAX_ENTRY_POINTS = 10
MAX_DB_CONFIG = 15
MAX_SQLITE_FILES = 10
MAX_DOTTED_CONFIG = 20
MAX_LOG_FOLDERS = 5
MAX_LOG_FILES_PER_FOLDER = 3

WEBHOOK_SAMPLE_CHARS = 15_000
DB_SAMPLE_CHARS = 50_000

ENTRY_CANDIDATES: Dict[str, Sequence[str]] = {
    "php": ("index.php", "public/index.php", "bootstrap.php", "vendor/autoload.php"),
    "nodejs": ("server.js", "index.js", "main.js", "app.js"),
    "spa": ("index.html", "index.htm", "src/main.js", "src/index.js"),
    "pwa": ("index.html", "src/main.js"),
    "telegram": ("index.html", "app.js"),
    "static": ("index.html", "index.htm"),
    "auto": (
        "index.php",
        "public/index.php",
        "index.html",
        "index.htm",
        "server.js",
        "main.js",
        "app.js",
        "bootstrap.php",
    ),
}

_WEBHOOK_PATTERNS = (
    re.compile(r"file_get_contents\s*\(\s*['\"]php://input['\"]\s*\)", re.IGNORECASE),
    re.compile(r"\$_REQUEST\b"),
    re.compile(r"\$_POST\b"),
    re.compile(r"webhook", re.IGNORECASE),
    re.compile(r"getUpdates|setWebhook|sendMessage", re.IGNORECASE),
)

_DB_PATTERNS = (
    re.compile(r"\bnew\s+PDO\s*\(", re.IGNORECASE),
    re.compile(r"\bmysqli_connect\s*\(", re.IGNORECASE),
    re.compile(r"\bDB_HOST\b", re.IGNORECASE),
    re.compile(r"\bDATABASE_URL\b", re.IGNORECASE),
    re.compile(r"\bmysql://", re.IGNORECASE),
    re.compile(r"\bpg_connect\s*\(", re.IGNORECASE),
    re.compile(r"config\s*\[\s*['\"]database['\"]\s*\]", re.IGNORECASE),
    re.compile(r"connect\s*\(\s*['\"]", re.IGNORECASE),
)

_SQLITE_RE = re.compile(r"\.(?:sqlite3?|db)$", re.IGNORECASE)
_ENV_NAME_RE = re.compile(r"^\.env(?:\.[\w.-]*)?$", re.IGNORECASE)


class LocationFinderStage(Stage):
    """Match entry-point names and scan content prefixes for config signatures."""

    name = "key-locations"
    reads = ("file_system", "_file_contents")
    provides = ("key_locations",)

    def process(self, snapshot: Snapshot, context: StageContext) -> Delta:
        files: Sequence[Mapping[str, Any]] = (snapshot.get("file_system") or {}).get("files") or ()
        contents: Mapping[str, str] = snapshot.get("_file_contents") or {}
        paths = sorted(record["path"] for record in files)
        project_type = (context.project.project_type or "auto").lower()

        if project_type == "telegram-php":
            entry_points = webhook_entry_points(contents)
        else:
            entry_points = candidate_entry_points(paths, project_type)

        env_files = [path for path in paths if _is_env_file(path)]
        return {
            "key_locations": {
                "project_type": project_type,
                "entry_points": entry_points[:MAX_ENTRY_POINTS],
                "db_config": db_config_files(contents)[:MAX_DB_CONFIG],
                "env_files": env_files,
                "sqlite_files": [path for path in paths if _SQLITE_RE.search(path)][:MAX_SQLITE_FILES],
                "dotted_config_files": [
                    path
                    for path in paths
                    if _basename(path).startswith(".") and not _basename(path).lower().startswith(".env")
                    and path not in env_files
                ][:MAX_DOTTED_CONFIG],
                "log_locations": log_locations(paths),
            }
        }


def candidate_entry_points(paths: Sequence[str], project_type: str) -> List[Dict[str, str]]:
    candidates = ENTRY_CANDIDATES.get(project_type, ENTRY_CANDIDATES["auto"])
    normalised = [(path, path.replace("\\", "/").lower()) for path in paths]
    found: List[Dict[str, str]] = []
    seen: set[str] = set()
    for candidate in candidates:
        target = candidate.lower()
        for path, lowered in normalised:
            if path in seen or not (lowered == target or lowered.endswith(f"/{target}")):
                continue
            seen.add(path)
            found.append({"path": path, "hint": candidate})
    return found


def webhook_entry_points(contents: Mapping[str, str]) -> List[Dict[str, str]]:
    found: List[Dict[str, str]] = []
    for path in sorted(contents):
        if not path.lower().endswith(".php") or not contents[path]:
            continue
        sample = contents[path][:WEBHOOK_SAMPLE_CHARS]
        if any(pattern.search(sample) for pattern in _WEBHOOK_PATTERNS):
            found.append({"path": path, "hint": "webhook/api"})
    return found


def db_config_files(contents: Mapping[str, str]) -> List[Dict[str, str]]:
    found: List[Dict[str, str]] = []
    for path in sorted(contents):
        sample = (contents[path] or "")[:DB_SAMPLE_CHARS]
        if sample and any(pattern.search(sample) for pattern in _DB_PATTERNS):
            found.append({"path": path})
    return found


def log_locations(paths: Sequence[str]) -> List[Dict[str, Any]]:
    folders: Dict[str, List[str]] = {}
    for path in paths:
        if path.lower().endswith(".log"):
            folders.setdefault(_dirname(path), []).append(path)
    return [
        {"folder": folder, "files": logs[:MAX_LOG_FILES_PER_FOLDER]}
        for folder, logs in list(folders.items())[:MAX_LOG_FOLDERS]
    ]


def _is_env_file(path: str) -> bool:
    return bool(_ENV_NAME_RE.match(_basename(path))) or path.endswith(".env")


def _basename(path: str) -> str:
    return path.rsplit("/", 1)[-1]


def _dirname(path: str) -> str:
    return path.rsplit("/", 1)[0] if "/" in path else "."


__all__ = [
    "ENTRY_CANDIDATES",
    "LocationFinderStage",
    "candidate_entry_points",
    "db_config_files",
    "log_locations",
    "webhook_entry_points",
]
