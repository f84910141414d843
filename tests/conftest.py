"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest


@pytest.fixture
def golden_dir(tmp_path: Path) -> Path:
    """Temporary directory holding golden files written by a test."""
    path = tmp_path / "testdata"
    path.mkdir()
    return path
