"""Fixtures for CLI integration tests."""

import sys
from pathlib import Path

import pytest
from loguru import logger


@pytest.fixture
def diary_path(tmp_path: Path, monkeypatch) -> Path:
    """Point the CLI at a fresh diary file and log directory."""
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "diary.json"
    monkeypatch.setenv("PLEVA_DATA_PATH", str(path))
    monkeypatch.setenv("PLEVA_LOG_DIR", str(tmp_path / "logs"))
    yield path
    logger.remove()
    logger.add(sys.stderr)
