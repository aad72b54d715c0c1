"""Tests for large function detection."""

from __future__ import annotations

from codeinspector.quality.functions import count_function_lines, find_large_functions


def _js_function(name: str, body_lines: int) -> str:
    body = "\n".join(f"  step{index}();" for index in range(body_lines))
    return f"function {name}() {{\n{body}\n}}\n"


def test_count_function_lines_follows_braces() -> None:
    lines = ["function a() {", "  if (x) {", "    y();", "  }", "}", "other();"]

    assert count_function_lines(lines, 0) == 5


def test_javascript_threshold_is_one_hundred_lines() -> None:
    content = _js_function("small", 98) + _js_function("big", 99)
    analyses = [
        {
            "path": "src/a.js",
            "language": "javascript",
            "functions": [{"name": "small", "line": 1}, {"name": "big", "line": 101}],
            "classes": [],
        }
    ]

    issues = find_large_functions(analyses, {"src/a.js": content})

    assert [(issue.name, issue.tag, issue.severity) for issue in issues] == [("big", "101 lines", "info")]
    assert issues[0].to_dict()["threshold"] == 100


def test_methods_are_named_with_their_class() -> None:
    body = "\n".join("    work();" for _ in range(160))
    content = f"class Job {{\n  run() {{\n{body}\n  }}\n}}\n"
    analyses = [
        {
            "path": "job.rb",
            "language": "ruby",
            "functions": [],
            "classes": [{"name": "Job", "methods": [{"name": "run", "line": 2}]}],
        }
    ]

    (issue,) = find_large_functions(analyses, {"job.rb": content})

    assert issue.name == "Job.run"
    assert issue.severity == "warning"
    assert issue.to_dict()["lines"] == 162
