"""Tests for the PHP structure scanner."""

from __future__ import annotations

import textwrap

from codeinspector.scanners import php


def _scan(source: str):
    return php.scan(textwrap.dedent(source).lstrip("\n"), "src/Service.php")


def test_scan_extracts_class_members() -> None:
    result = _scan(
        """
        <?php
        namespace App\\Services;

        use App\\Models\\User;
        use Psr\\Log\\LoggerInterface as Logger;

        final class UserService extends BaseService implements Countable, \\JsonSerializable
        {
            private static ?Logger $logger = null;
            protected array $cache = [];

            public function __construct(Logger $logger, array $options = array())
            {
                $this->logger = $logger;
            }

            public static function find(int $id): ?User
            {
                if ($id > 0) {
                    return User::find($id);
                }
                return null;
            }

            private function normalise(string ...$names): array
            {
                return array_map(function ($name) { return trim($name); }, $names);
            }
        }
        """
    )

    assert [entry["specifiers"] for entry in result["imports"]] == [["User"], ["Logger"]]
    assert result["imports"][1]["alias"] == "Logger"
    assert result["imports"][0]["source"] == "App\\Models\\User"

    (cls,) = result["classes"]
    assert cls["name"] == "UserService"
    assert cls["kind"] == "class"
    assert cls["extends"] == "BaseService"
    assert cls["implements"] == ["Countable", "JsonSerializable"]
    assert cls["line"] == 7

    methods = {method["name"]: method for method in cls["methods"]}
    assert list(methods) == ["__construct", "find", "normalise"]
    assert methods["__construct"]["is_constructor"] is True
    assert methods["__construct"]["is_magic"] is True
    assert methods["__construct"]["params"] == ["Logger $logger", "array $options"]
    assert methods["find"]["is_static"] is True
    assert methods["find"]["return_type"] == "?User"
    assert methods["find"]["line"] == 17
    assert methods["normalise"]["visibility"] == "private"
    assert methods["normalise"]["params"] == ["string ...$names"]

    assert [prop["name"] for prop in cls["properties"]] == ["logger", "cache"]
    assert cls["properties"][0]["is_static"] is True
    assert result["functions"] == []


def test_scan_separates_functions_from_methods() -> None:
    result = _scan(
        """
        <?php
        require_once 'config.php';
        include $path;

        function helper($value) {
            return $value;
        }

        interface Shape { public function area(): float; }

        trait Greets {
            public function greet() { return 'hi'; }
        }
        """
    )

    assert [entry["source"] for entry in result["imports"]] == ["config.php", "$path"]
    assert [function["name"] for function in result["functions"]] == ["helper"]
    assert result["functions"][0]["line"] == 5
    kinds = {cls["name"]: cls["kind"] for cls in result["classes"]}
    assert kinds == {"Shape": "interface", "Greets": "trait"}
    shape = next(cls for cls in result["classes"] if cls["name"] == "Shape")
    assert [method["name"] for method in shape["methods"]] == ["area"]


def test_one_line_class_after_open_tag() -> None:
    result = php.scan("<?php class Foo { function bar(){} }", "a.php")

    assert result["classes"][0]["name"] == "Foo"
    assert [method["name"] for method in result["classes"][0]["methods"]] == ["bar"]
    assert result["functions"] == []


def test_hash_comments_are_collected() -> None:
    result = _scan(
        """
        <?php
        # legacy switch
        #[Attribute]
        /** Docblock summary */
        """
    )

    assert [(comment["text"], comment["type"]) for comment in result["comments"]] == [
        ("legacy switch", "line"),
        ("Docblock summary", "block"),
    ]
