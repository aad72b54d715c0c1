"""Tests for the tech-stack stage."""

from __future__ import annotations

import json

from codeinspector.stages.tech_stack import detect_languages


def _package_json() -> str:
    return json.dumps(
        {
            "name": "shop",
            "engines": {"node": ">=18"},
            "scripts": {"build": "vite build"},
            "dependencies": {"vue": "^3.4.0", "axios": "^1.6.0"},
            "devDependencies": {"eslint": "^8.0.0"},
        }
    )


def _composer_json() -> str:
    return json.dumps(
        {
            "require": {"php": ">=8.1", "ext-pdo": "*", "laravel/framework": "^10.0"},
            "require-dev": {"phpunit/phpunit": "^10.0"},
        }
    )


def test_stack_profile_from_manifests(project_builder) -> None:
    project_builder.write(
        {
            "package.json": _package_json(),
            "yarn.lock": "# yarn lockfile v1\n",
            "composer.json": _composer_json(),
            "tsconfig.json": '{\n  // strict mode\n  "compilerOptions": {"target": "ES2022", "strict": true,},\n}\n',
            "vite.config.js": "export default {};\n",
            "artisan": "#!/usr/bin/env php\n<?php\n",
            "src/main.ts": "const total = items?.length ?? 0;\n",
            "app/Models/User.php": "<?php\nenum Role { case Admin; }\n",
        }
    )

    stack = project_builder.analyze()["tech_stack"]

    assert stack["package_manager"] == "yarn"
    assert stack["runtime"]["node"] == ">=18"
    assert stack["runtime"]["php"] == ">=8.1"
    assert stack["runtime"]["typescript"] == {"target": "ES2022", "module": "unknown", "strict": True}
    assert stack["scripts"] == {"build": "vite build"}
    assert [dep["name"] for dep in stack["dependencies"]] == ["vue", "axios", "laravel/framework"]
    assert [dep["name"] for dep in stack["dev_dependencies"]] == ["eslint", "phpunit/phpunit"]
    assert stack["php_extensions"] == ["pdo"]
    names = [framework["name"] for framework in stack["frameworks"]]
    assert names == ["Vue.js", "Laravel", "PHPUnit"]
    assert {"package.json", "composer.json", "tsconfig.json", "vite.config.js", "artisan"} <= set(
        stack["config_files"]
    )
    assert stack["ecmascript_version"] == "ES2020"
    assert stack["php_version"] == ">=8.1"


def test_framework_hint_marks_primary_or_prepends(project_builder) -> None:
    project_builder.write({"package.json": json.dumps({"dependencies": {"react": "^18.0.0"}})})

    hinted = project_builder.analyze(framework="react")["tech_stack"]["frameworks"]
    custom = project_builder.analyze(framework="Alpine")["tech_stack"]["frameworks"]

    assert hinted == [{"name": "React", "version": "^18.0.0", "source": "package.json", "primary": True}]
    assert custom[0] == {"name": "Alpine", "source": "user-specified", "primary": True}


def test_unparseable_manifest_is_skipped(project_builder) -> None:
    project_builder.write({"package.json": "{not json", "index.js": "var a = 1;"})

    report = project_builder.analyze()
    stack = report["tech_stack"]

    assert stack["dependencies"] == []
    assert stack["package_manager"] is None
    assert stack["php_version"] is None
    assert stack["ecmascript_version"] is None
    assert all(layer["status"] == "completed" for layer in report["meta"]["layers_executed"])


def test_detect_languages_orders_by_lines() -> None:
    files = [
        {"extension": ".php", "lines": 10},
        {"extension": ".js", "lines": 40},
        {"extension": ".php", "lines": 5},
        {"extension": ".png", "lines": 0},
    ]

    assert detect_languages(files) == [
        {"name": "JavaScript", "extension": ".js", "files": 1, "lines": 40},
        {"name": "PHP", "extension": ".php", "files": 2, "lines": 15},
    ]
