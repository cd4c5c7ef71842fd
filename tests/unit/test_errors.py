"""
Unit tests for error hierarchy.

Tests cover:
- Base LitePersistError behavior
- Configuration errors with defaults and context
- Connection, state and wiring errors
- Storage errors
- Error serialization
"""

import pytest

from litepersist.errors import (
    ERROR_CANNOT_CREATE,
    ERROR_CONFIG_INVALID,
    ERROR_CONFIG_NO_CONNECTION,
    ERROR_CONFIG_WRONG_PROTOCOL,
    ERROR_CONNECT_FAILED,
    ERROR_DISCONNECT_FAILED,
    ERROR_REF_NOT_FOUND,
    ERROR_STATE_NO_CONNECTION,
    ERROR_STATE_NO_TABLE,
    ERROR_STORAGE_WRITE,
    ConfigError,
    ConnectError,
    ConnectionMissingError,
    CreateError,
    DisconnectError,
    InvalidConfigError,
    InvalidStateError,
    LitePersistError,
    MissingConnectionError,
    ReferenceNotFoundError,
    StorageError,
    StorageWriteError,
    TableNotDefinedError,
    WrongProtocolError,
)


class TestLitePersistError:
    """Tests for the base error class."""

    def test_str_includes_code_and_message(self) -> None:
        error = LitePersistError(message="boom", code=42)
        assert str(error) == "[E42] boom"

    def test_str_includes_suggestion(self) -> None:
        error = LitePersistError(message="boom", code=1, suggestion="try again")
        assert "Suggestion: try again" in str(error)

    def test_can_be_raised_and_caught(self) -> None:
        with pytest.raises(LitePersistError):
            raise LitePersistError(message="boom")

    def test_to_dict(self) -> None:
        error = LitePersistError(message="boom", code=7, correlation_id="123")
        data = error.to_dict()
        assert data["error_type"] == "LitePersistError"
        assert data["message"] == "boom"
        assert data["code"] == 7
        assert data["correlation_id"] == "123"


class TestConfigErrors:
    """Tests for configuration errors."""

    def test_config_error_defaults(self) -> None:
        error = ConfigError(setting="options.timeout")
        assert error.code == ERROR_CONFIG_INVALID
        assert "options.timeout" in error.message
        assert error.context["setting"] == "options.timeout"

    def test_missing_connection(self) -> None:
        error = MissingConnectionError(correlation_id="abc")
        assert error.code == ERROR_CONFIG_NO_CONNECTION
        assert error.message == "Database connection is not set"
        assert error.setting == "connection"
        assert error.correlation_id == "abc"
        assert isinstance(error, ConfigError)

    def test_wrong_protocol_keeps_uri(self) -> None:
        error = WrongProtocolError(uri="http://localhost")
        assert error.code == ERROR_CONFIG_WRONG_PROTOCOL
        assert error.context["uri"] == "http://localhost"
        assert "file://" in error.message

    def test_invalid_config_file(self) -> None:
        error = InvalidConfigError(path="config.yaml", validation_error="bad indent")
        assert "config.yaml" in error.message
        assert error.context["validation_error"] == "bad indent"


class TestConnectionErrors:
    """Tests for connection errors."""

    def test_connect_error_defaults(self) -> None:
        error = ConnectError(database="./data/app.db")
        assert error.code == ERROR_CONNECT_FAILED
        assert error.message == "Connection to sqlite failed"
        assert error.context["database"] == "./data/app.db"

    def test_connect_error_custom_message(self) -> None:
        error = ConnectError(message="SQLite connection is not opened")
        assert error.message == "SQLite connection is not opened"

    def test_disconnect_error(self) -> None:
        error = DisconnectError(database="app.db")
        assert error.code == ERROR_DISCONNECT_FAILED
        assert isinstance(error, ConnectError)


class TestStateAndWiringErrors:
    """Tests for invalid state and wiring errors."""

    def test_connection_missing(self) -> None:
        error = ConnectionMissingError(component="NotesPersistence")
        assert error.code == ERROR_STATE_NO_CONNECTION
        assert error.message == "SQLite connection is missing"
        assert isinstance(error, InvalidStateError)

    def test_table_not_defined(self) -> None:
        error = TableNotDefinedError(component="NotesPersistence")
        assert error.code == ERROR_STATE_NO_TABLE
        assert error.context["component"] == "NotesPersistence"

    def test_reference_not_found(self) -> None:
        error = ReferenceNotFoundError(locator="*:connection:sqlite:*:1.0")
        assert error.code == ERROR_REF_NOT_FOUND
        assert "*:connection:sqlite:*:1.0" in error.message

    def test_create_error(self) -> None:
        error = CreateError(locator="app:factory:x:y:1.0")
        assert error.code == ERROR_CANNOT_CREATE


class TestStorageErrors:
    """Tests for storage errors."""

    def test_storage_write_error(self) -> None:
        error = StorageWriteError(
            operation="create",
            table="notes",
            underlying_error="UNIQUE constraint failed",
        )
        assert error.code == ERROR_STORAGE_WRITE
        assert "UNIQUE constraint failed" in error.message
        assert error.context["operation"] == "create"
        assert error.context["table"] == "notes"
        assert isinstance(error, StorageError)

    def test_to_dict_serializes_context(self) -> None:
        error = StorageWriteError(operation="set", table="notes", underlying_error="x")
        data = error.to_dict()
        assert data["error_type"] == "StorageWriteError"
        assert data["context"]["operation"] == "set"
