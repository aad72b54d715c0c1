"""Tests for codeinspector.manifests."""

from __future__ import annotations

from codeinspector.manifests import (
    dependency_entries,
    detect_ecmascript_version,
    detect_js_frameworks,
    detect_php_frameworks,
    detect_php_version,
    find_manifest,
    node_package_manager,
    parse_json,
    parse_jsonc,
)


def test_parse_json_rejects_non_objects() -> None:
    assert parse_json('{"name": "demo"}') == {"name": "demo"}
    assert parse_json("[1, 2]") is None
    assert parse_json("{broken") is None


def test_parse_jsonc_tolerates_comments_and_trailing_commas() -> None:
    text = """
    {
      // compiler settings
      "compilerOptions": {
        "target": "ES2020", /* modern */
        "paths": {"@/*": ["src/*"]},
      },
    }
    """

    data = parse_jsonc(text)

    assert data == {"compilerOptions": {"target": "ES2020", "paths": {"@/*": ["src/*"]}}}


def test_find_manifest_prefers_root_most_instance() -> None:
    contents = {"packages/ui/package.json": "{}", "package.json": '{"name": "root"}'}

    assert find_manifest(contents, "package.json") == ("package.json", '{"name": "root"}')
    assert find_manifest(contents, "composer.json") is None


def test_node_package_manager_from_lockfiles() -> None:
    assert node_package_manager(["package.json"]) == "npm"
    assert node_package_manager(["yarn.lock"]) == "yarn"
    assert node_package_manager(["pnpm-lock.yaml", "yarn.lock"]) == "pnpm"


def test_dependency_entries_skip_platform_requirements() -> None:
    entries = dependency_entries(
        {"php": ">=8.1", "ext-json": "*", "monolog/monolog": "^3.0"},
        "production",
        "composer.json",
        skip_platform=True,
    )

    assert entries == [
        {"name": "monolog/monolog", "version": "^3.0", "type": "production", "source": "composer.json"}
    ]


def test_framework_tables() -> None:
    js = detect_js_frameworks({"react": "^18.0.0", "react-dom": "^18.0.0", "express": "^4.0.0"})
    php = detect_php_frameworks({"laravel/framework": "^10.0"})

    assert [framework["name"] for framework in js] == ["React", "Express.js"]
    assert js[0] == {"name": "React", "version": "^18.0.0", "source": "package.json"}
    assert php == [{"name": "Laravel", "version": "^10.0", "source": "composer.json"}]


def test_ecmascript_version_takes_highest_feature() -> None:
    assert detect_ecmascript_version([]) is None
    assert detect_ecmascript_version(["var a = 1;"]) is None
    assert detect_ecmascript_version(["const a = 1;"]) == "ES2015"
    assert detect_ecmascript_version(["const a = 1;", "async function f() { await g(); }"]) == "ES2017"
    assert detect_ecmascript_version(["const v = user?.name ?? 'anon';"]) == "ES2020"


def test_php_version_floor() -> None:
    assert detect_php_version([]) is None
    assert detect_php_version(["<?php echo 1;"]) == ">=5.6"
    assert detect_php_version(["<?php function a(): int { return $x ?? 1; }"]) == ">=7.0"
    assert detect_php_version(["<?php $f = fn($x) => $x;"]) == ">=7.4"
    assert detect_php_version(["<?php $r = match($x) { 1 => 'a' };"]) == ">=8.0"
    assert detect_php_version(["<?php enum Suit { case Hearts; }"]) == ">=8.1"
