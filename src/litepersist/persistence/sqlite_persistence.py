"""
Abstract SQLite persistence component.

SqlitePersistence stores items of any shape in one table. It knows how to
open (and if needed create) its table, build column and parameter lists,
and run paged, counted, listed, random, insert and delete queries whose
WHERE/ORDER BY/SELECT fragments come from child classes.

Configuration parameters:
    - collection / table: (optional) table name
    - connection(s): see SqliteConnection
    - options:
        - max_page_size: maximum number of items in a page (default: 100)

References:
    - *:connection:sqlite:*:1.0   (optional) shared SqliteConnection
    - *:discovery:*:*:1.0         (optional) discovery services
    - *:credential-store:*:*:1.0  (optional) credential stores

Example:
    class NotesPersistence(SqlitePersistence[dict]):
        def __init__(self) -> None:
            super().__init__("notes")
            self.ensure_schema(
                'CREATE TABLE IF NOT EXISTS "notes" (id TEXT PRIMARY KEY, title TEXT)'
            )

        def get_page_by_title(self, correlation_id, title, paging):
            return self.get_page_by_filter(correlation_id, "title=?", paging, None, None, [title])
"""

import dataclasses
import logging
import random
import sqlite3
import threading
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from litepersist.config import ConfigParams
from litepersist.data import DataPage, PagingParams
from litepersist.errors import (
    ConnectError,
    ConnectionMissingError,
    StorageReadError,
    StorageWriteError,
    TableNotDefinedError,
)
from litepersist.persistence.connection import SqliteConnection
from litepersist.refer import DependencyResolver, References

logger = logging.getLogger(__name__)

T = TypeVar("T")

NO_SUCH_TABLE = "no such table"


class SqlitePersistence(Generic[T]):
    """
    Base persistence that stores data items in a SQLite table.

    Child classes describe their schema with ensure_schema()/ensure_index()
    (or by overriding define_schema()) and expose typed queries on top of
    get_page_by_filter(), get_list_by_filter() and friends.
    """

    _default_config = ConfigParams.from_tuples(
        "collection", None,
        "dependencies.connection", "*:connection:sqlite:*:1.0",
        "options.max_page_size", 100,
    )

    def __init__(self, table_name: str | None = None) -> None:
        self._table_name = table_name
        self._schema_statements: list[str] = []
        self._dependency_resolver = DependencyResolver(self._default_config)
        self._config: ConfigParams | None = None
        self._references: References | None = None
        self._opened = False
        self._local_connection = False
        self._connection: SqliteConnection | None = None
        self._client: sqlite3.Connection | None = None
        self._database_name: str | None = None
        self._max_page_size = 100

    # =========================================================================
    # Configuration and References
    # =========================================================================

    def configure(self, config: ConfigParams) -> None:
        config = config.set_defaults(self._default_config)
        self._config = config

        self._dependency_resolver.configure(config)

        self._table_name = config.get_as_string_with_default("collection", self._table_name)
        self._table_name = config.get_as_string_with_default("table", self._table_name)
        self._max_page_size = config.get_as_integer_with_default(
            "options.max_page_size", self._max_page_size
        )

    def set_references(self, references: References) -> None:
        self._references = references

        # Use a shared connection when one is referenced, otherwise own one
        self._dependency_resolver.set_references(references)
        self._connection = self._dependency_resolver.get_one_optional("connection")
        if self._connection is None:
            self._connection = self._create_connection()
            self._local_connection = True
        else:
            self._local_connection = False

    def unset_references(self) -> None:
        self._connection = None

    def _create_connection(self) -> SqliteConnection:
        connection = SqliteConnection()
        if self._config is not None:
            connection.configure(self._config)
        if self._references is not None:
            connection.set_references(self._references)
        return connection

    # =========================================================================
    # Schema
    # =========================================================================

    def ensure_index(
        self,
        name: str,
        keys: Mapping[str, Any],
        unique: bool = False,
        type: str | None = None,
    ) -> None:
        """
        Add an index definition to create when the table is first created.

        Args:
            name: Index name
            keys: Column name to direction; a falsy direction means DESC
            unique: Create a UNIQUE index
            type: Optional index type inserted before the column list
        """
        builder = "CREATE"
        if unique:
            builder += " UNIQUE"

        builder += (
            " INDEX IF NOT EXISTS " + self.quote_identifier(name)
            + " ON " + self.quote_identifier(self._table_name)
        )

        if type:
            builder += " " + type

        fields = []
        for key, ascending in keys.items():
            field = self.quote_identifier(key)
            if not ascending:
                field += " DESC"
            fields.append(field)

        builder += "(" + ", ".join(fields) + ")"

        self.ensure_schema(builder)

    def auto_create_object(self, schema_statement: str) -> None:
        """Add a statement to the schema definition. Prefer ensure_schema()."""
        self.ensure_schema(schema_statement)

    def ensure_schema(self, schema_statement: str) -> None:
        self._schema_statements.append(schema_statement)

    def clear_schema(self) -> None:
        self._schema_statements = []

    def define_schema(self) -> None:
        """Override to declare the schema; called on every open()."""

    def create_schema(self, correlation_id: str | None) -> None:
        """
        Run the schema statements if the table does not exist yet.

        Raises:
            TableNotDefinedError: If there are statements but no table name
            sqlite3.Error: If probing the table or a schema statement fails
        """
        if not self._schema_statements:
            return

        if self._table_name is None:
            raise TableNotDefinedError(
                component=type(self).__name__,
                correlation_id=correlation_id,
            )

        client = self._require_client()
        query = "SELECT * FROM " + self.quote_identifier(self._table_name) + " LIMIT 1"
        with self._lock:
            try:
                client.execute(query).fetchone()
                return
            except sqlite3.OperationalError as e:
                if NO_SUCH_TABLE not in str(e):
                    raise

            logger.debug(
                "Table %s does not exist. Creating database objects...",
                self._table_name,
                extra={"correlation_id": correlation_id},
            )

            for statement in self._schema_statements:
                try:
                    client.execute(statement)
                except sqlite3.Error:
                    logger.error(
                        "Failed to autocreate database object",
                        exc_info=True,
                        extra={"correlation_id": correlation_id, "statement": statement},
                    )
                    raise
            client.commit()

    # =========================================================================
    # Conversion and SQL Builders
    # =========================================================================

    def convert_to_public(self, value: Any) -> Any:
        """Convert a row (as a dict) into the public item format."""
        return value

    def convert_from_public(self, value: Any) -> Any:
        """
        Convert a public item into a column -> value dict.

        Mappings pass through; pydantic models, dataclasses and plain
        objects are turned into dicts of their fields.
        """
        if value is None or isinstance(value, Mapping):
            return value
        if isinstance(value, BaseModel):
            return value.model_dump(mode="json")
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            return dataclasses.asdict(value)
        return dict(vars(value))

    def quote_identifier(self, value: str | None) -> str | None:
        if value is None or value == "":
            return value
        if value[0] == '"':
            return value
        return '"' + value + '"'

    def generate_columns(self, values: Mapping[str, Any] | Iterable[str]) -> str:
        """Generate a column list like '"column1","column2"'."""
        return ",".join(self.quote_identifier(column) for column in _keys(values))

    def generate_parameters(self, values: Mapping[str, Any] | Iterable[Any]) -> str:
        """Generate a parameter list like '?,?,?'."""
        return ",".join("?" for _ in _keys(values))

    def generate_set_parameters(self, values: Mapping[str, Any]) -> str:
        """Generate an UPDATE set list like '"column1"=?,"column2"=?'."""
        return ",".join(self.quote_identifier(column) + "=?" for column in values)

    def generate_values(self, values: Mapping[str, Any]) -> list[Any]:
        return list(values.values())

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def is_open(self) -> bool:
        return self._opened

    def open(self, correlation_id: str | None) -> None:
        """
        Open the persistence, opening a local connection if it owns one.

        Raises:
            ConfigError: If a local connection cannot resolve its settings
            ConnectError: If the connection is not open or the schema fails
            TableNotDefinedError: If a schema is declared without a table name
        """
        if self._opened:
            return

        if self._connection is None:
            self._connection = self._create_connection()
            self._local_connection = True

        if self._local_connection:
            self._connection.open(correlation_id)

        if not self._connection.is_open():
            raise ConnectError(
                message="SQLite connection is not opened",
                correlation_id=correlation_id,
            )

        self._client = self._connection.get_connection()
        self._database_name = self._connection.get_database_name()

        self.define_schema()

        try:
            self.create_schema(correlation_id)
        except sqlite3.Error as e:
            self._release_after_failed_open(correlation_id)
            raise ConnectError(
                database=self._database_name or "",
                correlation_id=correlation_id,
                context={"cause": str(e)},
            ) from e
        except TableNotDefinedError:
            self._release_after_failed_open(correlation_id)
            raise

        self._opened = True
        logger.debug(
            "Connected to sqlite database %s, collection %s",
            self._database_name,
            self.quote_identifier(self._table_name),
            extra={"correlation_id": correlation_id},
        )

    def _release_after_failed_open(self, correlation_id: str | None) -> None:
        self._client = None
        if self._local_connection and self._connection is not None:
            self._connection.close(correlation_id)

    def close(self, correlation_id: str | None) -> None:
        """
        Close the persistence, closing the connection only if it owns it.

        Raises:
            ConnectionMissingError: If the connection was unset while open
            DisconnectError: If closing a local connection fails
        """
        if not self._opened:
            return

        if self._connection is None:
            raise ConnectionMissingError(
                component=type(self).__name__,
                correlation_id=correlation_id,
            )

        try:
            if self._local_connection:
                self._connection.close(correlation_id)
        finally:
            self._opened = False
            self._client = None

    def clear(self, correlation_id: str | None) -> None:
        """
        Delete every row from the table.

        Raises:
            TableNotDefinedError: If no table name is set
            ConnectError: If the delete fails
        """
        if self._table_name is None:
            raise TableNotDefinedError(
                component=type(self).__name__,
                correlation_id=correlation_id,
            )

        client = self._require_client()
        query = "DELETE FROM " + self.quote_identifier(self._table_name)
        with self._lock:
            try:
                client.execute(query)
                client.commit()
            except sqlite3.Error as e:
                raise ConnectError(
                    database=self._database_name or "",
                    correlation_id=correlation_id,
                    context={"cause": str(e)},
                ) from e

    def __enter__(self) -> "SqlitePersistence[T]":
        """Open on entering a with block."""
        self.open(None)
        return self

    def __exit__(self, *args: Any) -> None:
        """Close on leaving a with block."""
        self.close(None)

    # =========================================================================
    # Driver Access
    # =========================================================================

    @property
    def _lock(self) -> threading.RLock:
        if self._connection is None:
            raise ConnectionMissingError(component=type(self).__name__)
        return self._connection.lock

    def _require_client(self) -> sqlite3.Connection:
        if self._client is None:
            raise ConnectionMissingError(
                component=type(self).__name__,
                message=f"{type(self).__name__} is not opened",
            )
        return self._client

    def _fetch_all(
        self, operation: str, query: str, params: Sequence[Any] = ()
    ) -> list[dict[str, Any]]:
        client = self._require_client()
        with self._lock:
            try:
                return [dict(row) for row in client.execute(query, params).fetchall()]
            except sqlite3.Error as e:
                raise StorageReadError(
                    operation=operation,
                    table=self._table_name,
                    underlying_error=str(e),
                ) from e

    def _fetch_one(
        self, operation: str, query: str, params: Sequence[Any] = ()
    ) -> dict[str, Any] | None:
        client = self._require_client()
        with self._lock:
            try:
                row = client.execute(query, params).fetchone()
            except sqlite3.Error as e:
                raise StorageReadError(
                    operation=operation,
                    table=self._table_name,
                    underlying_error=str(e),
                ) from e
        return dict(row) if row is not None else None

    def _execute(self, operation: str, query: str, params: Sequence[Any] = ()) -> int:
        """Run a write statement, commit, and return the affected row count."""
        client = self._require_client()
        with self._lock:
            try:
                cursor = client.execute(query, params)
                client.commit()
                return cursor.rowcount
            except sqlite3.Error as e:
                client.rollback()
                raise StorageWriteError(
                    operation=operation,
                    table=self._table_name,
                    underlying_error=str(e),
                ) from e

    def _count(self, filter: str | None, params: Sequence[Any] = ()) -> int:
        query = "SELECT COUNT(*) AS count FROM " + self.quote_identifier(self._table_name)
        if filter:
            query += " WHERE " + filter
        row = self._fetch_one("count", query, params)
        return int(row["count"]) if row is not None else 0

    # =========================================================================
    # Queries
    # =========================================================================

    def get_page_by_filter(
        self,
        correlation_id: str | None,
        filter: str | None,
        paging: PagingParams | None,
        sort: str | None,
        select: str | None,
        params: Sequence[Any] = (),
    ) -> DataPage[T]:
        """
        Get a page of items matching a filter, sorted and projected.

        Child classes call this from a public method that turns
        FilterParams into a WHERE fragment.

        Args:
            correlation_id: (optional) id to trace the call chain
            filter: (optional) WHERE fragment
            paging: (optional) paging parameters
            sort: (optional) ORDER BY fragment
            select: (optional) column list, defaults to *
            params: (optional) values bound to ? placeholders in filter

        Returns:
            DataPage with the items, and the total when paging.total is set
        """
        select = select if select else "*"
        query = "SELECT " + select + " FROM " + self.quote_identifier(self._table_name)

        paging = paging or PagingParams()
        skip = paging.get_skip(-1)
        take = paging.get_take(self._max_page_size)

        if filter:
            query += " WHERE " + filter

        if sort:
            query += " ORDER BY " + sort

        query += " LIMIT " + str(take)
        if skip >= 0:
            query += " OFFSET " + str(skip)

        with self._lock:
            rows = self._fetch_all("get_page_by_filter", query, params)
            logger.debug(
                "Retrieved %d from %s",
                len(rows),
                self._table_name,
                extra={"correlation_id": correlation_id},
            )
            items = [self.convert_to_public(row) for row in rows]

            if paging.total:
                return DataPage(data=items, total=self._count(filter, params))
        return DataPage(data=items)

    def get_count_by_filter(
        self, correlation_id: str | None, filter: str | None, params: Sequence[Any] = ()
    ) -> int:
        """Count items matching a WHERE fragment."""
        count = self._count(filter, params)
        logger.debug(
            "Counted %d items in %s",
            count,
            self._table_name,
            extra={"correlation_id": correlation_id},
        )
        return count

    def get_list_by_filter(
        self,
        correlation_id: str | None,
        filter: str | None,
        sort: str | None,
        select: str | None,
        params: Sequence[Any] = (),
    ) -> list[T]:
        """Get every item matching a filter, sorted and projected."""
        select = select if select else "*"
        query = "SELECT " + select + " FROM " + self.quote_identifier(self._table_name)

        if filter:
            query += " WHERE " + filter

        if sort:
            query += " ORDER BY " + sort

        rows = self._fetch_all("get_list_by_filter", query, params)
        logger.debug(
            "Retrieved %d from %s",
            len(rows),
            self._table_name,
            extra={"correlation_id": correlation_id},
        )
        return [self.convert_to_public(row) for row in rows]

    def get_one_random(
        self, correlation_id: str | None, filter: str | None, params: Sequence[Any] = ()
    ) -> T | None:
        """Get a uniformly random item among those matching a filter."""
        with self._lock:
            count = self._count(filter, params)
            if count == 0:
                logger.debug(
                    "Random item wasn't found from %s",
                    self._table_name,
                    extra={"correlation_id": correlation_id},
                )
                return None

            query = "SELECT * FROM " + self.quote_identifier(self._table_name)
            if filter:
                query += " WHERE " + filter

            pos = random.randint(0, count - 1)
            query += " LIMIT 1 OFFSET " + str(pos)

            row = self._fetch_one("get_one_random", query, params)

        if row is None:
            logger.debug(
                "Random item wasn't found from %s",
                self._table_name,
                extra={"correlation_id": correlation_id},
            )
            return None

        logger.debug(
            "Retrieved random item from %s",
            self._table_name,
            extra={"correlation_id": correlation_id},
        )
        return self.convert_to_public(row)

    def create(self, correlation_id: str | None, item: T | None) -> T | None:
        """
        Insert an item.

        Returns:
            The item as given, or None when item is None

        Raises:
            StorageWriteError: If the insert fails (e.g. duplicate key)
        """
        if item is None:
            return None

        row = self.convert_from_public(item)
        columns = self.generate_columns(row)
        params = self.generate_parameters(row)
        values = self.generate_values(row)

        query = (
            "INSERT INTO " + self.quote_identifier(self._table_name)
            + " (" + columns + ") VALUES (" + params + ")"
        )
        self._execute("create", query, values)

        logger.debug(
            "Created in %s with id = %s",
            self.quote_identifier(self._table_name),
            row.get("id"),
            extra={"correlation_id": correlation_id},
        )
        return item

    def delete_by_filter(
        self, correlation_id: str | None, filter: str | None, params: Sequence[Any] = ()
    ) -> int:
        """
        Delete items matching a WHERE fragment.

        Returns:
            Number of deleted rows
        """
        query = "DELETE FROM " + self.quote_identifier(self._table_name)
        if filter:
            query += " WHERE " + filter

        count = self._execute("delete_by_filter", query, params)
        logger.debug(
            "Deleted %d items from %s",
            count,
            self._table_name,
            extra={"correlation_id": correlation_id},
        )
        return count


def _keys(values: Mapping[str, Any] | Iterable[Any]) -> list[Any]:
    if isinstance(values, Mapping):
        return list(values.keys())
    return list(values)
