"""
Exception hierarchy for litepersist.

All litepersist exceptions inherit from LitePersistError, allowing callers to
catch every library-specific failure with a single except clause.

Exception Categories:
    - ConfigError: Connection settings are missing or malformed
    - ConnectError: The SQLite driver failed to open or close a database
    - InvalidStateError: A component was used before it was ready
    - ReferenceNotFoundError / CreateError: Wiring of components failed
    - StorageError: A query or write against an open database failed

Every error carries a numeric code, the correlation id of the call that
failed (when one was given) and a context dict for debugging.
"""

from dataclasses import dataclass, field
from typing import Any


# =============================================================================
# Error Codes
# =============================================================================

# Configuration errors: 1xxx
ERROR_CONFIG_NO_CONNECTION = 1001
ERROR_CONFIG_NO_DATABASE = 1002
ERROR_CONFIG_WRONG_PROTOCOL = 1003
ERROR_CONFIG_CANNOT_RESOLVE = 1004
ERROR_CONFIG_BAD_DESCRIPTOR = 1005
ERROR_CONFIG_INVALID = 1006

# Connection errors: 2xxx
ERROR_CONNECT_FAILED = 2001
ERROR_DISCONNECT_FAILED = 2002

# State errors: 3xxx
ERROR_STATE_NO_CONNECTION = 3001
ERROR_STATE_NO_TABLE = 3002

# Wiring errors: 4xxx
ERROR_REF_NOT_FOUND = 4001
ERROR_CANNOT_CREATE = 4002

# Storage errors: 5xxx
ERROR_STORAGE_READ = 5001
ERROR_STORAGE_WRITE = 5002


# =============================================================================
# Base Exception
# =============================================================================


@dataclass
class LitePersistError(Exception):
    """
    Base exception for all litepersist errors.

    Attributes:
        message: Human-readable error description
        code: Numeric error code for programmatic handling
        correlation_id: Id of the call chain that raised the error
        suggestion: Optional hint for how to resolve the error
        context: Optional dict with additional debugging info
    """

    message: str = ""
    code: int = 0
    correlation_id: str | None = None
    suggestion: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Format error for display."""
        parts = [f"[E{self.code}] {self.message}"]
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def __repr__(self) -> str:
        """Format error for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code}, "
            f"correlation_id={self.correlation_id!r}, "
            f"context={self.context!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "correlation_id": self.correlation_id,
            "suggestion": self.suggestion,
            "context": self.context,
        }


# =============================================================================
# Configuration Errors
# =============================================================================


@dataclass
class ConfigError(LitePersistError):
    """
    Raised when configuration parameters cannot be used.

    Attributes:
        setting: The configuration key (or section) at fault
    """

    setting: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Invalid configuration: {self.setting}"
        if self.code == 0:
            self.code = ERROR_CONFIG_INVALID
        self.context["setting"] = self.setting


@dataclass
class MissingConnectionError(ConfigError):
    """Raised when no connection parameters are configured."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = "Database connection is not set"
        if self.code == 0:
            self.code = ERROR_CONFIG_NO_CONNECTION
        if not self.setting:
            self.setting = "connection"
        if not self.suggestion:
            self.suggestion = "Set connection.database or connection.uri"
        super().__post_init__()


@dataclass
class MissingDatabaseError(ConfigError):
    """Raised when a connection has neither a uri nor a database path."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = "Connection database is not set"
        if self.code == 0:
            self.code = ERROR_CONFIG_NO_DATABASE
        if not self.setting:
            self.setting = "connection.database"
        super().__post_init__()


@dataclass
class WrongProtocolError(ConfigError):
    """Raised when a connection uri does not use the file:// protocol."""

    uri: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = "Connection protocol must be file://"
        if self.code == 0:
            self.code = ERROR_CONFIG_WRONG_PROTOCOL
        if not self.setting:
            self.setting = "connection.uri"
        if not self.suggestion:
            self.suggestion = "Use a uri like file://./data/app.db"
        super().__post_init__()
        self.context["uri"] = self.uri


@dataclass
class UnresolvedConnectionError(ConfigError):
    """Raised when a discovery key cannot be resolved."""

    discovery_key: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Cannot resolve connection with discovery key {self.discovery_key}"
        if self.code == 0:
            self.code = ERROR_CONFIG_CANNOT_RESOLVE
        if not self.setting:
            self.setting = "connection.discovery_key"
        if not self.suggestion:
            self.suggestion = "Reference a discovery service that knows this key"
        super().__post_init__()
        self.context["discovery_key"] = self.discovery_key


@dataclass
class DescriptorFormatError(ConfigError):
    """Raised when a descriptor string is not group:type:kind:name:version."""

    value: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Descriptor {self.value} is in wrong format"
        if self.code == 0:
            self.code = ERROR_CONFIG_BAD_DESCRIPTOR
        super().__post_init__()
        self.context["value"] = self.value


@dataclass
class InvalidConfigError(ConfigError):
    """Raised when a configuration file cannot be loaded."""

    path: str = ""
    validation_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Invalid configuration file {self.path}: {self.validation_error}"
        super().__post_init__()
        self.context.update({
            "path": self.path,
            "validation_error": self.validation_error,
        })


# =============================================================================
# Connection Errors
# =============================================================================


@dataclass
class ConnectError(LitePersistError):
    """
    Raised when the driver cannot open a database or a component
    cannot attach to one.

    Attributes:
        database: Path of the database involved, when known
    """

    database: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = "Connection to sqlite failed"
        if self.code == 0:
            self.code = ERROR_CONNECT_FAILED
        if not self.suggestion and self.code == ERROR_CONNECT_FAILED:
            self.suggestion = "Check that the database path is valid and writable"
        self.context["database"] = self.database


@dataclass
class DisconnectError(ConnectError):
    """Raised when closing the driver handle fails."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = "Disconnect from sqlite failed"
        if self.code == 0:
            self.code = ERROR_DISCONNECT_FAILED
        super().__post_init__()


# =============================================================================
# State Errors
# =============================================================================


@dataclass
class InvalidStateError(LitePersistError):
    """
    Raised when a component is called in a state that cannot serve it.

    Attributes:
        component: Name of the component class
    """

    component: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"{self.component} is in an invalid state"
        self.context["component"] = self.component


@dataclass
class ConnectionMissingError(InvalidStateError):
    """Raised when a persistence has no connection to work with."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = "SQLite connection is missing"
        if self.code == 0:
            self.code = ERROR_STATE_NO_CONNECTION
        super().__post_init__()


@dataclass
class TableNotDefinedError(InvalidStateError):
    """Raised when a table operation runs without a table name."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = "Table name is not defined"
        if self.code == 0:
            self.code = ERROR_STATE_NO_TABLE
        if not self.suggestion:
            self.suggestion = "Pass a table name to the constructor or set the table config key"
        super().__post_init__()


# =============================================================================
# Wiring Errors
# =============================================================================


@dataclass
class ReferenceNotFoundError(LitePersistError):
    """Raised when a required reference is not registered."""

    locator: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Cannot locate reference: {self.locator}"
        if self.code == 0:
            self.code = ERROR_REF_NOT_FOUND
        self.context["locator"] = self.locator


@dataclass
class CreateError(LitePersistError):
    """Raised when a factory cannot create a component."""

    locator: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Requested component {self.locator} cannot be created"
        if self.code == 0:
            self.code = ERROR_CANNOT_CREATE
        self.context["locator"] = self.locator


# =============================================================================
# Storage Errors
# =============================================================================


@dataclass
class StorageError(LitePersistError):
    """
    Base class for query and write failures.

    Attributes:
        operation: The operation that failed (e.g., "create", "get_one_by_id")
        table: The table the operation ran against
    """

    operation: str = ""
    table: str | None = None

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        self.context["operation"] = self.operation
        self.context["table"] = self.table


@dataclass
class StorageReadError(StorageError):
    """Raised when a read operation fails."""

    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Database read failed: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_STORAGE_READ
        super().__post_init__()
        self.context["underlying_error"] = self.underlying_error


@dataclass
class StorageWriteError(StorageError):
    """Raised when a write operation fails."""

    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Database write failed: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_STORAGE_WRITE
        super().__post_init__()
        self.context["underlying_error"] = self.underlying_error
