"""
SQLite connection component.

A SqliteConnection owns one sqlite3 handle. Sharing a single connection
between several persistence components (through References) keeps the
number of open database handles down; every driver call made through it
is serialized by its lock.

Configuration parameters:
    - connection(s):
        - discovery_key: (optional) key to resolve the connection via discovery
        - database: database file path
        - uri: resource uri with file:// protocol
    - options:
        - timeout: seconds the driver waits on a locked database (default: 5.0)

References:
    - *:discovery:*:*:1.0         (optional) discovery services
    - *:credential-store:*:*:1.0  (optional) credential stores
"""

import logging
import sqlite3
import threading
from pathlib import Path

from litepersist.config import ConfigParams
from litepersist.connect.sqlite import SqliteConnectionResolver
from litepersist.errors import ConnectError, DisconnectError
from litepersist.refer import References

logger = logging.getLogger(__name__)

MEMORY_DATABASE = ":memory:"


class SqliteConnection:
    """
    SQLite connection using the plain sqlite3 driver.

    Usage:
        connection = SqliteConnection()
        connection.configure(ConfigParams.from_tuples("connection.database", "app.db"))
        connection.open(None)
        ...
        connection.close(None)
    """

    _default_config = ConfigParams.from_tuples(
        "options.timeout", 5.0,
    )

    def __init__(self) -> None:
        self._connection_resolver = SqliteConnectionResolver()
        self._options = ConfigParams()
        self._connection: sqlite3.Connection | None = None
        self._database_name: str | None = None
        self.lock = threading.RLock()

    def configure(self, config: ConfigParams) -> None:
        config = config.set_defaults(self._default_config)
        self._connection_resolver.configure(config)
        self._options = self._options.override(config.get_section("options"))

    def set_references(self, references: References) -> None:
        self._connection_resolver.set_references(references)

    def is_open(self) -> bool:
        return self._connection is not None

    def open(self, correlation_id: str | None) -> None:
        """
        Resolve the configured database and open it.

        Raises:
            ConfigError: If the connection settings are invalid
            ConnectError: If the driver fails to open the database
        """
        with self.lock:
            if self._connection is not None:
                return

            config = self._connection_resolver.resolve(correlation_id)

            logger.debug("Connecting to sqlite", extra={"correlation_id": correlation_id})

            database = config.database
            self._ensure_directory(database, correlation_id)

            timeout = self._options.get_as_float_with_default("timeout", 5.0)
            try:
                connection = sqlite3.connect(
                    database,
                    timeout=timeout,
                    check_same_thread=False,
                )
                connection.row_factory = sqlite3.Row
            except sqlite3.Error as e:
                raise ConnectError(
                    database=database,
                    correlation_id=correlation_id,
                    context={"cause": str(e)},
                ) from e

            self._connection = connection
            self._database_name = database

    def _ensure_directory(self, database: str, correlation_id: str | None) -> None:
        if not database or database == MEMORY_DATABASE:
            return

        db_file = Path(database)
        if db_file.parent.exists():
            return

        logger.info(
            "Creating database directory: %s",
            db_file.parent,
            extra={"correlation_id": correlation_id},
        )
        try:
            db_file.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConnectError(
                database=database,
                correlation_id=correlation_id,
                context={"cause": str(e)},
            ) from e

    def close(self, correlation_id: str | None) -> None:
        """
        Close the driver handle.

        Raises:
            DisconnectError: If the driver fails to close the database
        """
        with self.lock:
            if self._connection is None:
                return

            database = self._database_name
            try:
                self._connection.close()
            except sqlite3.Error as e:
                raise DisconnectError(
                    database=database or "",
                    correlation_id=correlation_id,
                    context={"cause": str(e)},
                ) from e
            finally:
                self._connection = None
                self._database_name = None

        logger.debug(
            "Disconnected from sqlite database %s",
            database,
            extra={"correlation_id": correlation_id},
        )

    def get_connection(self) -> sqlite3.Connection | None:
        return self._connection

    def get_database_name(self) -> str | None:
        return self._database_name
