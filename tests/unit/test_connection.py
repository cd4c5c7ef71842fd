"""
Unit tests for the SQLite connection component.

Tests cover:
- Opening from database paths, uris and :memory:
- Idempotent open and close
- Parent directory creation
- Configuration and driver failures
"""

import sqlite3
import threading
from pathlib import Path

import pytest

from litepersist.config import ConfigParams
from litepersist.connect import MemoryDiscovery
from litepersist.errors import ConnectError, MissingConnectionError, UnresolvedConnectionError
from litepersist.persistence import SqliteConnection
from litepersist.refer import Descriptor, References


def _connection(*tuples: object) -> SqliteConnection:
    connection = SqliteConnection()
    connection.configure(ConfigParams.from_tuples(*tuples))
    return connection


class TestOpenClose:
    """Tests for the connection lifecycle."""

    def test_open_and_close(self, temp_dir: Path) -> None:
        database = str(temp_dir / "app.db")
        connection = _connection("connection.database", database)

        assert connection.is_open() is False
        connection.open(None)
        assert connection.is_open() is True
        assert connection.get_database_name() == database
        assert isinstance(connection.get_connection(), sqlite3.Connection)

        connection.close(None)
        assert connection.is_open() is False
        assert connection.get_connection() is None
        assert connection.get_database_name() is None

    def test_open_from_uri(self, temp_dir: Path) -> None:
        database = str(temp_dir / "app.db")
        connection = _connection("connection.uri", "file://" + database)
        connection.open(None)
        assert connection.get_database_name() == database
        connection.close(None)

    def test_open_memory(self) -> None:
        connection = _connection("connection.database", ":memory:")
        connection.open(None)
        row = connection.get_connection().execute("SELECT 1 AS one").fetchone()
        assert row["one"] == 1
        connection.close(None)

    def test_open_twice_keeps_handle(self, temp_dir: Path) -> None:
        connection = _connection("connection.database", str(temp_dir / "app.db"))
        connection.open(None)
        handle = connection.get_connection()
        connection.open(None)
        assert connection.get_connection() is handle
        connection.close(None)

    def test_close_when_closed(self) -> None:
        SqliteConnection().close(None)

    def test_creates_parent_directory(self, temp_dir: Path) -> None:
        database = temp_dir / "nested" / "dir" / "app.db"
        connection = _connection("connection.database", str(database))
        connection.open(None)
        assert database.parent.is_dir()
        connection.close(None)

    def test_timeout_option(self, temp_dir: Path) -> None:
        connection = _connection(
            "connection.database", str(temp_dir / "app.db"),
            "options.timeout", 0.5,
        )
        connection.open(None)
        assert connection.is_open()
        connection.close(None)

    def test_concurrent_open_shares_handle(self, temp_dir: Path) -> None:
        connection = _connection("connection.database", str(temp_dir / "app.db"))
        barrier = threading.Barrier(8)
        handles = []

        def open_connection() -> None:
            barrier.wait()
            connection.open(None)
            handles.append(connection.get_connection())

        threads = [threading.Thread(target=open_connection) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(handles) == 8
        assert len({id(handle) for handle in handles}) == 1
        connection.close(None)

    def test_via_discovery(self, temp_dir: Path) -> None:
        database = str(temp_dir / "discovered.db")
        connection = _connection("connection.discovery_key", "main")
        connection.set_references(References.from_tuples(
            Descriptor("app", "discovery", "memory", "default", "1.0"),
            MemoryDiscovery(ConfigParams.from_tuples("main", "database=" + database)),
        ))
        connection.open(None)
        assert connection.get_database_name() == database
        connection.close(None)


class TestOpenFailures:
    """Tests for open failures."""

    def test_missing_config(self) -> None:
        with pytest.raises(MissingConnectionError):
            SqliteConnection().open(None)

    def test_unresolved_discovery(self) -> None:
        connection = _connection("connection.discovery_key", "main")
        with pytest.raises(UnresolvedConnectionError):
            connection.open(None)

    def test_driver_failure(self, temp_dir: Path) -> None:
        # A directory cannot be opened as a database file
        connection = _connection("connection.database", str(temp_dir))
        with pytest.raises(ConnectError) as exc_info:
            connection.open("123")
        assert exc_info.value.correlation_id == "123"
        assert isinstance(exc_info.value.__cause__, sqlite3.Error)
        assert connection.is_open() is False
