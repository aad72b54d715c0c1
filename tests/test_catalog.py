"""Tests for codeinspector.catalog."""

from __future__ import annotations

import os
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from codeinspector.catalog import FileCatalog, is_excluded, is_hidden, is_minified, looks_obfuscated
from codeinspector.errors import PreconditionError


def _old(path: Path) -> None:
    stamp = (datetime.now(UTC) - timedelta(days=30)).timestamp()
    os.utime(path, (stamp, stamp))


def test_scan_collects_records_and_contents(project_builder) -> None:
    project_builder.write(
        {
            "index.php": "<?php\necho 'hi';\n",
            "src/app.js": "const a = 1;\n",
            "README": "plain\ntext",
        }
    )

    result = FileCatalog().scan(project_builder.path())

    assert [record.path for record in result.files] == ["README", "index.php", "src/app.js"]
    php = result.files[1]
    assert php.extension == ".php"
    assert php.lines == 3
    assert php.last_modified.endswith("Z")
    assert result.contents()["README"] == "plain\ntext"
    assert result.total_folders == 1
    assert result.by_extension() == {"(no ext)": 1, ".js": 1, ".php": 1}


def test_hidden_and_excluded_entries_are_skipped(project_builder) -> None:
    project_builder.write(
        {
            ".git/config": "[core]",
            ".env": "DB_HOST=localhost",
            ".htaccess": "RewriteEngine On",
            ".codeinspector/report.json": "{}",
            "node_modules/lodash/index.js": "module.exports = {};",
            "app.js": "run();",
        }
    )

    result = FileCatalog(["node_modules"]).scan(project_builder.path())

    assert sorted(record.path for record in result.files) == [".env", ".htaccess", "app.js"]
    assert "node_modules" not in result.tree
    assert ".git" not in result.tree


def test_minified_files_are_counted_and_skipped(project_builder) -> None:
    project_builder.write({"dist/app.min.js": "var a=1;", "dist/style.min.css": "a{}", "dist/app.js": "var a = 1;"})

    result = FileCatalog().scan(project_builder.path())

    assert [record.path for record in result.files] == ["dist/app.js"]
    assert result.minified_skipped == 2
    assert "app.min.js" not in result.tree


def test_tree_collapses_assets_and_marks_recent_files(project_builder) -> None:
    project_builder.write({"src/main.js": "start();", "old.php": "<?php"})
    project_builder.write_raw("img/logo.png", b"\x89PNG")
    project_builder.write_raw("img/icon.png", b"\x89PNG")
    _old(project_builder.path() / "old.php")

    result = FileCatalog().scan(project_builder.path())
    lines = result.tree.split("\n")

    assert lines[0] == "├── img/"
    assert lines[1] == "│   └── ... 2 asset files (images, fonts, media)"
    assert lines[2] == "├── src/"
    assert lines[3].startswith("│   └── main.js (")
    assert lines[4] == "└── old.php"
    png = next(record for record in result.files if record.path == "img/logo.png")
    assert png.lines == 0
    assert "img/logo.png" not in result.contents()


def test_single_asset_uses_singular_label(project_builder) -> None:
    project_builder.write_raw("font.woff2", b"\x00\x01")

    result = FileCatalog().scan(project_builder.path())

    assert result.tree == "└── ... 1 asset file (images, fonts, media)"


def test_large_files_are_recorded_without_content(project_builder) -> None:
    project_builder.write_raw("big.js", "x" * 2048)

    result = FileCatalog(max_file_size=1024).scan(project_builder.path())

    assert result.files[0].size == 2048
    assert result.contents() == {}


def test_obfuscated_javascript_is_flagged(project_builder) -> None:
    packed = "var _0x=" + "\\x41\\x42" * 200 + ";"
    project_builder.write_raw("packed.js", packed)
    project_builder.write_raw("plain.js", "function add(a, b) {\n  return a + b;\n}\n" * 30)

    records = {record.path: record for record in FileCatalog().scan(project_builder.path()).files}

    assert records["packed.js"].obfuscated is True
    assert records["plain.js"].obfuscated is False


def test_folder_stats_order_by_file_count(project_builder) -> None:
    project_builder.write({"a/one.js": "1", "b/one.js": "1", "b/two.js": "1\n2", "root.js": "1"})

    stats = FileCatalog().scan(project_builder.path()).folder_stats()

    assert [entry["folder"] for entry in stats] == ["b", ".", "a"]
    assert stats[0] == {"folder": "b", "files": 2, "lines": 3, "size": 4}


def test_missing_root_raises_precondition_error(tmp_path: Path) -> None:
    with pytest.raises(PreconditionError):
        FileCatalog().scan(tmp_path / "nope")


def test_name_helpers() -> None:
    assert is_minified("vendor.min.js")
    assert not is_minified("admin.js")
    assert is_hidden(".git")
    assert not is_hidden(".env.local")
    assert is_excluded("vendor", "vendor", ["vendor"])
    assert is_excluded("x.php", "legacy/old/x.php", ["legacy/old"])
    assert not is_excluded("src", "src", ["vendor"])


def test_short_files_are_never_obfuscated() -> None:
    assert not looks_obfuscated("\\x41" * 10)
    assert looks_obfuscated("a" * 6000)
