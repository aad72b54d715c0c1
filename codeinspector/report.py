"""Render analysis reports as JSON or Markdown."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping

from jinja2 import Environment, FileSystemLoader

DEFAULT_TEMPLATE = "report.md.j2"
TOP_ISSUES = 25
TOP_COMPLEXITY = 15


def render_json(report: Mapping[str, Any]) -> str:
    return json.dumps(report, indent=2, ensure_ascii=False) + "\n"


def render_markdown(
    report: Mapping[str, Any],
    *,
    templates_dir: Path | None = None,
    template_name: str = DEFAULT_TEMPLATE,
) -> str:
    """Render ``report`` through the bundled template (or an override directory)."""
    env = _create_env(templates_dir)
    template = env.get_template(template_name)
    return template.render(**_template_context(report)).rstrip() + "\n"


def _create_env(templates_dir: Path | None) -> Environment:
    directories: List[str] = []
    if templates_dir:
        directories.append(str(templates_dir))
    directories.append(str(Path(__file__).with_name("templates")))
    loader = FileSystemLoader(directories)
    return Environment(loader=loader, autoescape=False, trim_blocks=True, lstrip_blocks=True)


def _template_context(report: Mapping[str, Any]) -> Dict[str, Any]:
    meta = report.get("meta") or {}
    quality = report.get("code_quality") or {}
    stack = report.get("tech_stack") or {}
    return {
        "meta": meta,
        "file_system": report.get("file_system") or {},
        "stack": stack,
        "frameworks": _framework_names(stack.get("frameworks") or ()),
        "structure": report.get("code_structure") or {},
        "quality": quality,
        "summary": quality.get("summary") or {},
        "issues": list(quality.get("issues") or ())[:TOP_ISSUES],
        "complexity": list(quality.get("complexity") or ())[:TOP_COMPLEXITY],
        "locations": report.get("key_locations") or {},
        "score": report.get("code_score"),
    }


def _framework_names(frameworks: Any) -> List[str]:
    return [str(framework["name"]) for framework in frameworks if framework.get("name")]


__all__ = ["render_json", "render_markdown"]
