"""Stage that profiles languages, manifests, frameworks and language versions."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

from .. import manifests
from ..logging import get_logger
from .base import Delta, Snapshot, Stage, StageContext

logger = get_logger("stages.tech_stack")


class StackProfilerStage(Stage):
    """Read manifests and sources to describe the project's technology stack."""

    name = "tech-stack"
    reads = ("file_system", "_file_contents")
    provides = ("tech_stack",)

    def process(self, snapshot: Snapshot, context: StageContext) -> Delta:
        file_system = snapshot.get("file_system") or {}
        files: Sequence[Mapping[str, Any]] = file_system.get("files") or ()
        contents: Mapping[str, str] = snapshot.get("_file_contents") or {}
        obfuscated = {record["path"] for record in files if record.get("obfuscated")}
        file_names = {record["name"] for record in files}

        result: Dict[str, Any] = {
            "languages": detect_languages(files),
            "frameworks": [],
            "runtime": {},
            "package_manager": None,
            "dependencies": [],
            "dev_dependencies": [],
            "scripts": {},
            "config_files": [],
            "php_extensions": [],
        }

        package = _load(contents, manifests.PACKAGE_JSON, manifests.parse_json)
        if package is not None:
            result["config_files"].append(manifests.PACKAGE_JSON)
            result["package_manager"] = manifests.node_package_manager(file_names)
            engines = package.get("engines")
            if isinstance(engines, dict) and engines.get("node"):
                result["runtime"]["node"] = engines["node"]
            if isinstance(package.get("scripts"), dict):
                result["scripts"] = dict(package["scripts"])
            result["dependencies"].extend(
                manifests.dependency_entries(package.get("dependencies"), "production", manifests.PACKAGE_JSON)
            )
            result["dev_dependencies"].extend(
                manifests.dependency_entries(package.get("devDependencies"), "dev", manifests.PACKAGE_JSON)
            )
            result["frameworks"].extend(
                manifests.detect_js_frameworks(
                    {**_as_mapping(package.get("dependencies")), **_as_mapping(package.get("devDependencies"))}
                )
            )

        composer = _load(contents, manifests.COMPOSER_JSON, manifests.parse_json)
        if composer is not None:
            result["config_files"].append(manifests.COMPOSER_JSON)
            require = _as_mapping(composer.get("require"))
            require_dev = _as_mapping(composer.get("require-dev"))
            if require.get("php"):
                result["runtime"]["php"] = require["php"]
            result["dependencies"].extend(
                manifests.dependency_entries(require, "production", manifests.COMPOSER_JSON, skip_platform=True)
            )
            result["dev_dependencies"].extend(
                manifests.dependency_entries(require_dev, "dev", manifests.COMPOSER_JSON)
            )
            result["php_extensions"] = [name[len("ext-"):] for name in require if name.startswith("ext-")]
            result["frameworks"].extend(manifests.detect_php_frameworks({**require, **require_dev}))

        tsconfig = _load(contents, manifests.TSCONFIG_JSON, manifests.parse_jsonc)
        if tsconfig is not None:
            result["config_files"].append(manifests.TSCONFIG_JSON)
            options = tsconfig.get("compilerOptions")
            if isinstance(options, dict):
                result["runtime"]["typescript"] = {
                    "target": options.get("target") or "unknown",
                    "module": options.get("module") or "unknown",
                    "strict": bool(options.get("strict", False)),
                }

        for filename, label in manifests.CONFIG_INDICATORS:
            if filename not in file_names:
                continue
            if filename not in result["config_files"]:
                result["config_files"].append(filename)
            known = any(framework["name"] == label for framework in result["frameworks"])
            if label in manifests.FRAMEWORK_INDICATORS and not known:
                result["frameworks"].append({"name": label, "source": filename})

        context.checkpoint()
        result["ecmascript_version"] = manifests.detect_ecmascript_version(
            _sources(contents, manifests.ES_SOURCE_EXTENSIONS, obfuscated)
        )
        result["php_version"] = manifests.detect_php_version(_sources(contents, (".php",), obfuscated))

        _apply_framework_hint(result["frameworks"], context.project.framework)
        return {"tech_stack": result}


def detect_languages(files: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Summarize files and lines per known language extension."""
    totals: Dict[str, Dict[str, int]] = {}
    for record in files:
        extension = record.get("extension") or ""
        if extension not in manifests.LANGUAGE_NAMES:
            continue
        entry = totals.setdefault(extension, {"files": 0, "lines": 0})
        entry["files"] += 1
        entry["lines"] += int(record.get("lines") or 0)

    languages = [
        {"name": manifests.LANGUAGE_NAMES[extension], "extension": extension, **counts}
        for extension, counts in totals.items()
    ]
    return sorted(languages, key=lambda item: (-item["lines"], item["extension"]))


def _load(contents: Mapping[str, str], filename: str, parser) -> Optional[Dict[str, Any]]:
    found = manifests.find_manifest(contents, filename)
    if found is None:
        return None
    path, text = found
    data = parser(text)
    if data is None:
        logger.debug("Skipping unparseable manifest %s", path)
    return data


def _sources(contents: Mapping[str, str], extensions: Sequence[str], skip: set[str]):
    for path in sorted(contents):
        if path in skip or not path.lower().endswith(tuple(extensions)):
            continue
        yield contents[path]


def _as_mapping(value: Any) -> Dict[str, Any]:
    return dict(value) if isinstance(value, Mapping) else {}


def _apply_framework_hint(frameworks: List[Dict[str, Any]], hint: Optional[str]) -> None:
    if not hint or hint.lower() == "none":
        return
    for framework in frameworks:
        if framework["name"].lower() == hint.lower():
            framework["primary"] = True
            return
    frameworks.insert(0, {"name": hint, "source": "user-specified", "primary": True})


__all__ = ["StackProfilerStage", "detect_languages"]
