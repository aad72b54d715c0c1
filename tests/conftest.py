from __future__ import annotations

import logging
from pathlib import Path

import pytest

from tests._fixtures.project_builder import ProjectBuilder


@pytest.fixture
def project_builder(tmp_path: Path) -> ProjectBuilder:
    """Provide a reusable project builder rooted at the pytest tmp_path."""
    return ProjectBuilder(tmp_path)


@pytest.fixture(autouse=True)
def _clear_project_type_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("CODEINSPECTOR_PROJECT_TYPE", raising=False)


@pytest.fixture(autouse=True)
def _reset_codeinspector_logger():
    yield
    logger = logging.getLogger("codeinspector")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
