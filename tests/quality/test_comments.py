"""Tests for dead-comment detection."""

from __future__ import annotations

from codeinspector.quality.comments import find_comment_runs, find_commented_code


def _line_comments(count: int) -> str:
    return "\n".join(f"// old_call({index});" for index in range(count))


def test_seven_lines_are_not_reported() -> None:
    content = "const a = 1;\n" + _line_comments(7) + "\nconst b = 2;\n"

    assert find_commented_code("a.js", content) == []


def test_eight_lines_are_reported_with_exact_length() -> None:
    content = "const a = 1;\n" + _line_comments(8) + "\nconst b = 2;\n"

    (issue,) = find_commented_code("a.js", content)

    assert issue.kind == "commented_code"
    assert issue.line == 2
    assert issue.tag == "8 lines"
    assert issue.to_dict()["lines"] == 8
    assert issue.to_dict()["end_line"] == 9


def test_line_and_block_comments_extend_one_run() -> None:
    content = "\n".join(
        [
            "// a",
            "// b",
            "/* c",
            "   d",
            "   e */",
            "// f",
            "// g",
            "/* h */",
            "run();",
        ]
    )

    runs = find_comment_runs(content)

    assert [(run.start, run.length) for run in runs] == [(0, 8)]
    assert len(find_commented_code("a.js", content)) == 1


def test_doc_blocks_are_suppressed() -> None:
    content = "/**\n" + "\n".join(f" * line {index}" for index in range(10)) + "\n */\nfunction f() {}\n"

    runs = find_comment_runs(content)

    assert runs[0].documented is True
    assert find_commented_code("a.js", content) == []


def test_blank_lines_split_runs() -> None:
    content = _line_comments(4) + "\n\n" + _line_comments(4)

    assert [run.length for run in find_comment_runs(content)] == [4, 4]
    assert find_commented_code("a.js", content) == []


def test_hash_comments_count_for_php_only() -> None:
    content = "\n".join(f"# $legacy->call({index});" for index in range(8))

    assert len(find_commented_code("a.php", content)) == 1
    assert find_commented_code("a.js", content) == []


def test_min_lines_is_configurable() -> None:
    content = _line_comments(5)

    assert len(find_commented_code("a.js", content, min_lines=5)) == 1


def test_plain_block_after_doc_block_is_reported() -> None:
    content = "/** Helper docs. */\n/* disabled block */\n" + _line_comments(8) + "\nrun();\n"

    (issue,) = find_commented_code("a.js", content)

    assert issue.line == 1
    assert issue.to_dict()["lines"] == 10


def test_doc_block_closing_a_run_suppresses_it() -> None:
    content = _line_comments(8) + "\n/**\n * Runs the job.\n */\nfunction job() {}\n"

    assert find_commented_code("a.js", content) == []
