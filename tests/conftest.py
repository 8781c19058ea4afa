"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest


@pytest.fixture
def write_source(tmp_path: Path):
    """Return a helper that writes a file under tmp_path, creating parents."""

    def _write(rel_path: str, content: str) -> Path:
        file_path = tmp_path / rel_path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding="utf-8")
        return file_path

    return _write
