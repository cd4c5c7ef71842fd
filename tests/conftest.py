"""
Pytest configuration and fixtures for litepersist tests.

This module provides shared fixtures used across unit and integration
tests. Integration tests write to a temporary database file unless the
SQLITE_DB environment variable names another one.
"""

import os
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from litepersist.config import ConfigParams


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def db_path(temp_dir: Path) -> str:
    """Return the database path integration tests connect to."""
    return os.environ.get("SQLITE_DB") or str(temp_dir / "test.db")


@pytest.fixture
def db_config(db_path: str) -> ConfigParams:
    """Return component config pointing at the test database."""
    return ConfigParams.from_tuples("connection.database", db_path)


@pytest.fixture
def config_yaml(temp_dir: Path, db_path: str) -> Path:
    """Write a CLI config file pointing at the test database."""
    path = temp_dir / "config.yaml"
    path.write_text(
        f"""
connection:
  database: {db_path}
options:
  max_page_size: 50
"""
    )
    return path
