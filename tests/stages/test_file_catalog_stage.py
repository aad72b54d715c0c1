"""Tests for the file-system stage."""

from __future__ import annotations

from codeinspector.config import InspectorConfig, LimitsConfig
from codeinspector.models import ProgressEvent
from codeinspector.stages.file_catalog import FileCatalogStage


def test_stage_publishes_inventory_and_internal_contents(project_builder) -> None:
    project_builder.write({"index.php": "<?php\necho 1;", "assets/site.css": "body {}"})

    delta = FileCatalogStage().process({}, project_builder.stage_context())

    inventory = delta["file_system"]
    assert inventory["total_files"] == 2
    assert inventory["total_lines"] == 3
    assert inventory["total_folders"] == 1
    assert inventory["by_extension"] == {".css": 1, ".php": 1}
    assert [record["path"] for record in inventory["files"]] == ["assets/site.css", "index.php"]
    assert "content" not in inventory["files"][0]
    assert delta["_file_contents"]["index.php"] == "<?php\necho 1;"
    assert "index.php" in inventory["file_tree"]


def test_stage_merges_project_and_config_exclusions(project_builder) -> None:
    project_builder.write({"vendor/lib.php": "<?php", "cache/tmp.php": "<?php", "app.php": "<?php"})
    config = InspectorConfig(root=project_builder.path(), exclude_paths=["cache"])

    delta = FileCatalogStage().process({}, project_builder.stage_context(config, excluded_folders=["vendor"]))

    assert [record["path"] for record in delta["file_system"]["files"]] == ["app.php"]


def test_stage_reports_scan_progress(project_builder) -> None:
    project_builder.write({f"src/file{index}.js": "run();" for index in range(5)})
    events: list[ProgressEvent] = []
    config = InspectorConfig(root=project_builder.path(), limits=LimitsConfig(progress_interval=2))
    context = project_builder.stage_context(config)
    context.emit = events.append

    FileCatalogStage().process({}, context)

    assert [event.current for event in events] == [2, 4, 5]
    assert all(event.stage == "file-system:scan" for event in events)
    assert events[-1].total == 5
