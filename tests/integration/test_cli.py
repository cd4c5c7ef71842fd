"""
Integration tests for the CLI.

Tests cover:
- Version output
- check, tables, page and clear commands
- JSON output and error reporting
"""

import json
import sqlite3
from pathlib import Path

import pytest
from typer.testing import CliRunner

from litepersist import __version__
from litepersist.cli import app


runner = CliRunner()


# =============================================================================
# Test Fixtures
# =============================================================================


@pytest.fixture
def notes_db(db_path: str) -> str:
    """Create a notes table with three rows in the test database."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(db_path) as conn:
        conn.execute("DROP TABLE IF EXISTS notes")
        conn.execute("CREATE TABLE notes (id TEXT PRIMARY KEY, title TEXT)")
        conn.executemany(
            "INSERT INTO notes (id, title) VALUES (?, ?)",
            [("1", "alpha"), ("2", "beta"), ("3", "gamma")],
        )
    conn.close()
    return db_path


@pytest.fixture
def bad_config_yaml(temp_dir: Path) -> Path:
    """Write a config whose uri uses the wrong protocol."""
    path = temp_dir / "bad.yaml"
    path.write_text("connection:\n  uri: http://localhost/app.db\n")
    return path


# =============================================================================
# CLI Tests
# =============================================================================


class TestVersion:
    """Tests for `litepersist --version`."""

    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestCheckCommand:
    """Tests for `litepersist check`."""

    def test_check_ok(self, config_yaml: Path, db_path: str) -> None:
        result = runner.invoke(app, ["check", str(config_yaml)])
        assert result.exit_code == 0
        assert "Connected" in result.stdout

    def test_check_json(self, config_yaml: Path, db_path: str) -> None:
        result = runner.invoke(app, ["check", str(config_yaml), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data == {"ok": True, "database": db_path}

    def test_check_wrong_protocol(self, bad_config_yaml: Path) -> None:
        result = runner.invoke(app, ["check", str(bad_config_yaml)])
        assert result.exit_code == 1
        assert "file://" in result.stdout

    def test_check_wrong_protocol_json(self, bad_config_yaml: Path) -> None:
        result = runner.invoke(app, ["check", str(bad_config_yaml), "--json"])
        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["error"] is True
        assert data["error_type"] == "WrongProtocolError"
        assert data["code"] == 1003

    def test_check_missing_file(self, temp_dir: Path) -> None:
        result = runner.invoke(app, ["check", str(temp_dir / "missing.yaml")])
        assert result.exit_code != 0


class TestTablesCommand:
    """Tests for `litepersist tables`."""

    def test_tables(self, config_yaml: Path, notes_db: str) -> None:
        result = runner.invoke(app, ["tables", str(config_yaml)])
        assert result.exit_code == 0
        assert "notes" in result.stdout
        assert "3" in result.stdout

    def test_tables_json(self, config_yaml: Path, notes_db: str) -> None:
        result = runner.invoke(app, ["tables", str(config_yaml), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert {"name": "notes", "count": 3} in data["tables"]


class TestPageCommand:
    """Tests for `litepersist page`."""

    def test_page_json(self, config_yaml: Path, notes_db: str) -> None:
        result = runner.invoke(app, [
            "page", str(config_yaml), "notes",
            "--sort", "title DESC", "--take", "2", "--total", "--json",
        ])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [row["title"] for row in data["data"]] == ["gamma", "beta"]
        assert data["total"] == 3

    def test_page_filter(self, config_yaml: Path, notes_db: str) -> None:
        result = runner.invoke(app, [
            "page", str(config_yaml), "notes", "--filter", "title='beta'", "--json",
        ])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["data"] == [{"id": "2", "title": "beta"}]
        assert data["total"] is None

    def test_page_table_output(self, config_yaml: Path, notes_db: str) -> None:
        result = runner.invoke(app, ["page", str(config_yaml), "notes", "--total"])
        assert result.exit_code == 0
        assert "alpha" in result.stdout
        assert "Showing 3 of 3" in result.stdout

    def test_page_unknown_table(self, config_yaml: Path, notes_db: str) -> None:
        result = runner.invoke(app, ["page", str(config_yaml), "missing", "--json"])
        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["error_type"] == "StorageReadError"


class TestClearCommand:
    """Tests for `litepersist clear`."""

    def test_clear_with_yes(self, config_yaml: Path, notes_db: str) -> None:
        result = runner.invoke(app, ["clear", str(config_yaml), "notes", "--yes"])
        assert result.exit_code == 0
        assert "Cleared" in result.stdout

        with sqlite3.connect(notes_db) as conn:
            count = conn.execute("SELECT COUNT(*) FROM notes").fetchone()[0]
        conn.close()
        assert count == 0

    def test_clear_aborted(self, config_yaml: Path, notes_db: str) -> None:
        result = runner.invoke(app, ["clear", str(config_yaml), "notes"], input="n\n")
        assert result.exit_code == 1
        assert "Aborted" in result.stdout

        with sqlite3.connect(notes_db) as conn:
            count = conn.execute("SELECT COUNT(*) FROM notes").fetchone()[0]
        conn.close()
        assert count == 3
