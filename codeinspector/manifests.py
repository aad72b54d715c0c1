"""Manifest parsing and stack heuristics shared by the stack and quality stages."""

from __future__ import annotations

import json
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

PACKAGE_JSON = "package.json"
COMPOSER_JSON = "composer.json"
TSCONFIG_JSON = "tsconfig.json"

# Manifest and lock files never count as a usage of the packages they declare.
MANIFEST_FILENAMES = frozenset(
    {
        PACKAGE_JSON,
        "package-lock.json",
        COMPOSER_JSON,
        "composer.lock",
        "yarn.lock",
        "pnpm-lock.yaml",
        TSCONFIG_JSON,
    }
)

LANGUAGE_NAMES: Dict[str, str] = {
    ".php": "PHP",
    ".js": "JavaScript",
    ".mjs": "JavaScript",
    ".cjs": "JavaScript",
    ".jsx": "JavaScript (JSX)",
    ".ts": "TypeScript",
    ".tsx": "TypeScript (TSX)",
    ".vue": "Vue",
    ".svelte": "Svelte",
    ".html": "HTML",
    ".htm": "HTML",
    ".css": "CSS",
    ".scss": "SCSS",
    ".less": "LESS",
    ".sass": "SASS",
    ".json": "JSON",
    ".xml": "XML",
    ".yaml": "YAML",
    ".yml": "YAML",
    ".sql": "SQL",
    ".py": "Python",
    ".rb": "Ruby",
    ".go": "Go",
    ".java": "Java",
    ".md": "Markdown",
}

_JS_FRAMEWORKS: Tuple[Tuple[str, str], ...] = (
    ("react", "React"),
    ("react-dom", "React"),
    ("next", "Next.js"),
    ("vue", "Vue.js"),
    ("nuxt", "Nuxt.js"),
    ("@angular/core", "Angular"),
    ("svelte", "Svelte"),
    ("express", "Express.js"),
    ("fastify", "Fastify"),
    ("koa", "Koa"),
    ("nest", "NestJS"),
    ("@nestjs/core", "NestJS"),
    ("electron", "Electron"),
    ("tailwindcss", "Tailwind CSS"),
    ("bootstrap", "Bootstrap"),
    ("jquery", "jQuery"),
    ("socket.io", "Socket.IO"),
    ("mongoose", "Mongoose (MongoDB)"),
    ("sequelize", "Sequelize (SQL ORM)"),
    ("prisma", "Prisma"),
    ("@prisma/client", "Prisma"),
)

_PHP_FRAMEWORKS: Tuple[Tuple[str, str], ...] = (
    ("laravel/framework", "Laravel"),
    ("symfony/framework-bundle", "Symfony"),
    ("yiisoft/yii2", "Yii2"),
    ("cakephp/cakephp", "CakePHP"),
    ("slim/slim", "Slim"),
    ("codeigniter4/framework", "CodeIgniter"),
    ("doctrine/orm", "Doctrine ORM"),
    ("phpunit/phpunit", "PHPUnit"),
)

CONFIG_INDICATORS: Tuple[Tuple[str, str], ...] = (
    (".eslintrc.json", "ESLint"),
    (".eslintrc.js", "ESLint"),
    (".prettierrc", "Prettier"),
    ("webpack.config.js", "Webpack"),
    ("vite.config.js", "Vite"),
    ("vite.config.ts", "Vite"),
    ("next.config.js", "Next.js"),
    ("next.config.mjs", "Next.js"),
    ("nuxt.config.js", "Nuxt.js"),
    ("nuxt.config.ts", "Nuxt.js"),
    ("vue.config.js", "Vue CLI"),
    ("tailwind.config.js", "Tailwind CSS"),
    ("tailwind.config.ts", "Tailwind CSS"),
    ("docker-compose.yml", "Docker"),
    ("Dockerfile", "Docker"),
    (".env", "dotenv"),
    ("artisan", "Laravel"),
    ("wp-config.php", "WordPress"),
)

FRAMEWORK_INDICATORS = frozenset({"Laravel", "WordPress", "Next.js", "Nuxt.js", "Vue CLI"})

ES_SOURCE_EXTENSIONS = (".js", ".jsx", ".mjs", ".cjs", ".ts", ".tsx")

# Highest matching level wins; each level lists the syntax that introduced it.
_ES_FEATURES: Tuple[Tuple[str, Tuple[re.Pattern[str], ...]], ...] = (
    ("ES2015", (re.compile(r"\b(?:let|const)\s"), re.compile(r"=>"), re.compile(r"\bclass\s+\w+"))),
    ("ES2016", (re.compile(r"\w\s*\*\*\s*\w"), re.compile(r"\.includes\("))),
    ("ES2017", (re.compile(r"\basync\s"), re.compile(r"\bawait\s"))),
    ("ES2018", (re.compile(r"\{\s*\.\.\.\w+"), re.compile(r"\bfor\s+await\b"))),
    ("ES2019", (re.compile(r"\.flat\("), re.compile(r"\.flatMap\("), re.compile(r"\bcatch\s*\{"))),
    ("ES2020", (re.compile(r"\?\.[\w\[(]"), re.compile(r"\?\?(?!=)"))),
    ("ES2021", (re.compile(r"\?\?="), re.compile(r"\|\|="), re.compile(r"&&="))),
    ("ES2022", (re.compile(r"\.at\("), re.compile(r"^\s*(?:static\s+)?#\w+\s*[=;]", re.MULTILINE))),
    ("ES2023", (re.compile(r"\.findLast(?:Index)?\("), re.compile(r"\A#!"))),
)

_PHP_FEATURES: Tuple[Tuple[str, Tuple[re.Pattern[str], ...]], ...] = (
    ("7.0", (re.compile(r"function\s+&?\w+\s*\([^)]*\)\s*:\s*\??\\?\w+"), re.compile(r"\?\?(?!=)"))),
    (
        "7.1",
        (
            re.compile(r"[(,]\s*\?\\?\w+\s+\$"),
            re.compile(r"\)\s*:\s*(?:\?\\?\w+|void)\b"),
        ),
    ),
    ("7.4", (re.compile(r"\bfn\s*\("), re.compile(r"\?\?="))),
    (
        "8.0",
        (
            re.compile(r"\?->"),
            re.compile(r"\bmatch\s*\("),
            re.compile(r"function\s+__construct\s*\(\s*(?:public|protected|private)"),
        ),
    ),
    ("8.1", (re.compile(r"\benum\s+\w+"), re.compile(r"\breadonly\s+(?:public|protected|private)"))),
    ("8.2", (re.compile(r"\breadonly\s+(?:final\s+)?class\b"),)),
)

PHP_BASELINE_VERSION = ">=5.6"

_JSONC_COMMENT_RE = re.compile(r'("(?:\\.|[^"\\])*")|//[^\n]*|/\*.*?\*/', re.DOTALL)
_JSONC_TRAILING_COMMA_RE = re.compile(r'("(?:\\.|[^"\\])*")|,(\s*[}\]])')


def parse_json(text: str) -> Optional[Dict[str, Any]]:
    """Return a JSON object or None when the text is not a JSON mapping."""
    try:
        data = json.loads(text)
    except (TypeError, ValueError):
        return None
    return data if isinstance(data, dict) else None


def parse_jsonc(text: str) -> Optional[Dict[str, Any]]:
    """Parse JSON that may contain comments and trailing commas (tsconfig style)."""
    stripped = _JSONC_COMMENT_RE.sub(lambda match: match.group(1) or "", text)
    stripped = _JSONC_TRAILING_COMMA_RE.sub(lambda match: match.group(1) or match.group(2), stripped)
    return parse_json(stripped)


def find_manifest(contents: Mapping[str, str], filename: str) -> Optional[Tuple[str, str]]:
    """Return ``(path, content)`` of the root-most file named ``filename``."""
    candidates = [path for path in contents if path.rsplit("/", 1)[-1] == filename]
    if not candidates:
        return None
    path = min(candidates, key=lambda item: (item.count("/"), item))
    return path, contents[path]


def node_package_manager(file_names: Iterable[str]) -> str:
    names = set(file_names)
    if "pnpm-lock.yaml" in names:
        return "pnpm"
    if "yarn.lock" in names:
        return "yarn"
    return "npm"


def dependency_entries(
    declared: Any,
    dep_type: str,
    source: str,
    *,
    skip_platform: bool = False,
) -> List[Dict[str, Any]]:
    if not isinstance(declared, dict):
        return []
    entries: List[Dict[str, Any]] = []
    for name, version in declared.items():
        if skip_platform and (name == "php" or name.startswith("ext-")):
            continue
        entries.append({"name": name, "version": version, "type": dep_type, "source": source})
    return entries


def detect_js_frameworks(dependencies: Mapping[str, Any]) -> List[Dict[str, Any]]:
    return _match_frameworks(dependencies, _JS_FRAMEWORKS, PACKAGE_JSON)


def detect_php_frameworks(dependencies: Mapping[str, Any]) -> List[Dict[str, Any]]:
    return _match_frameworks(dependencies, _PHP_FRAMEWORKS, COMPOSER_JSON)


def _match_frameworks(
    dependencies: Mapping[str, Any],
    table: Iterable[Tuple[str, str]],
    source: str,
) -> List[Dict[str, Any]]:
    frameworks: List[Dict[str, Any]] = []
    seen: set[str] = set()
    for dep, name in table:
        if dependencies.get(dep) and name not in seen:
            seen.add(name)
            frameworks.append({"name": name, "version": dependencies[dep], "source": source})
    return frameworks


def detect_ecmascript_version(sources: Iterable[str]) -> Optional[str]:
    """Return the newest ECMAScript edition whose syntax appears in ``sources``."""
    best = -1
    for content in sources:
        for index in range(len(_ES_FEATURES) - 1, best, -1):
            if any(pattern.search(content) for pattern in _ES_FEATURES[index][1]):
                best = index
                break
        if best == len(_ES_FEATURES) - 1:
            break
    return _ES_FEATURES[best][0] if best >= 0 else None


def detect_php_version(sources: Iterable[str]) -> Optional[str]:
    """Return a ``>=X.Y`` floor for PHP sources, or None when there are none."""
    seen_any = False
    best = -1
    for content in sources:
        seen_any = True
        for index in range(len(_PHP_FEATURES) - 1, best, -1):
            if any(pattern.search(content) for pattern in _PHP_FEATURES[index][1]):
                best = index
                break
    if not seen_any:
        return None
    if best < 0:
        return PHP_BASELINE_VERSION
    return f">={_PHP_FEATURES[best][0]}"


__all__ = [
    "COMPOSER_JSON",
    "CONFIG_INDICATORS",
    "FRAMEWORK_INDICATORS",
    "LANGUAGE_NAMES",
    "MANIFEST_FILENAMES",
    "PACKAGE_JSON",
    "TSCONFIG_JSON",
    "dependency_entries",
    "detect_ecmascript_version",
    "detect_js_frameworks",
    "detect_php_frameworks",
    "detect_php_version",
    "find_manifest",
    "node_package_manager",
    "parse_json",
    "parse_jsonc",
]
