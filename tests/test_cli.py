"""CLI behaviour tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from codeinspector.cli import _build_parser, main


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "analyze"])
    assert args.verbose is True
    assert args.command == "analyze"
    assert args.path == "."


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["analyze", "--verbose"])
    assert args.verbose is True
    assert args.command == "analyze"


def test_cli_collects_repeated_excludes() -> None:
    parser = _build_parser()
    args = parser.parse_args(
        ["analyze", "src", "--exclude", "vendor", "--exclude", "dist", "--project-type", "php"]
    )
    assert args.path == "src"
    assert args.exclude == ["vendor", "dist"]
    assert args.project_type == "php"
    assert args.format == "json"


def test_cli_serve_defaults() -> None:
    parser = _build_parser()
    args = parser.parse_args(["serve"])
    assert args.host == "127.0.0.1"
    assert args.port == 8000


def test_analyze_writes_json_report(project_builder, tmp_path: Path, capsys) -> None:
    project_builder.write({"index.php": "<?php\necho 'hi';\n"})
    output = tmp_path / "out" / "report.json"

    main(["analyze", str(project_builder.path()), "--output", str(output)])

    report = json.loads(output.read_text(encoding="utf-8"))
    assert report["meta"]["project_name"] == "project"
    assert report["file_system"]["total_files"] == 1
    assert "Report written to" in capsys.readouterr().out


def test_analyze_prints_markdown(project_builder, capsys) -> None:
    project_builder.write({"app.js": "console.log('hi');\n"})

    main(["analyze", str(project_builder.path()), "--format", "markdown", "--exclude", "node_modules"])

    assert capsys.readouterr().out.startswith("# Code inspection: project\n")


def test_analyze_missing_path_exits_with_error(tmp_path: Path, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["analyze", str(tmp_path / "missing")])

    assert excinfo.value.code == 1
    assert "Root path does not exist" in capsys.readouterr().err


def test_analyze_log_file_records_progress(project_builder, tmp_path: Path) -> None:
    project_builder.write({"index.php": "<?php\necho 'hi';\n"})
    log_file = tmp_path / "logs" / "run.log"

    main(
        [
            "analyze",
            str(project_builder.path()),
            "--quiet",
            "--log-file",
            str(log_file),
            "--output",
            str(tmp_path / "report.json"),
        ]
    )

    text = log_file.read_text(encoding="utf-8")
    assert "Starting analysis of" in text
    assert "codeinspector.progress: file-system 1/6: running" in text


def test_report_written_inside_project_is_not_analyzed(project_builder) -> None:
    project_builder.write({"index.php": "<?php\necho 'hi';\n"})
    output = project_builder.path() / "reports" / "report.json"
    argv = ["analyze", str(project_builder.path()), "--output", str(output)]

    main(argv)
    main(argv)

    report = json.loads(output.read_text(encoding="utf-8"))
    assert [record["path"] for record in report["file_system"]["files"]] == ["index.php"]
