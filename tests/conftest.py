"""
Shared pytest fixtures for the context pack test suite.
"""

import shutil
from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Create temporary directory for tests."""
    return tmp_path


@pytest.fixture
def frontend_project(tmp_path: Path) -> Path:
    """Copy of the sample React/TypeScript project."""
    fixture_path = FIXTURES_DIR / "sample_react_project"

    if not fixture_path.exists():
        pytest.skip("React fixture not found")

    project_path = tmp_path / "react_project"
    shutil.copytree(fixture_path, project_path)
    return project_path


@pytest.fixture
def write_files():
    """Return a helper writing {relative path: content} under a root."""

    def _write(root: Path, files: dict[str, str]) -> Path:
        for relative, content in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return root

    return _write
