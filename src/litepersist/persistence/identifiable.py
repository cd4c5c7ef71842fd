"""
SQLite persistence for items with unique ids.

IdentifiableSqlitePersistence adds id-based CRUD on top of
SqlitePersistence. Items must carry an ``id``, either as a mapping key
or as an attribute (pydantic models, dataclasses). The table must have
an ``id`` primary key column.

In basic scenarios child classes only override get_page_by_filter(),
get_list_by_filter() or delete_by_filter() with their own filters; the
id-based operations work out of the box.

Example:
    class NotesPersistence(IdentifiableSqlitePersistence[Note, str]):
        def __init__(self) -> None:
            super().__init__("notes")

        def define_schema(self) -> None:
            self.clear_schema()
            self.ensure_schema(
                'CREATE TABLE IF NOT EXISTS "notes" (id TEXT PRIMARY KEY, title TEXT)'
            )

        def convert_to_public(self, value):
            return Note.model_validate(value) if value is not None else None

    persistence = NotesPersistence()
    persistence.configure(ConfigParams.from_tuples("connection.database", "./data/app.db"))
    persistence.open("123")
    note = persistence.create("123", Note(title="ABC"))
    persistence.delete_by_id("123", note.id)
"""

import copy
import dataclasses
import logging
from collections.abc import Mapping, Sequence
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from litepersist.data import AnyValueMap, IdGenerator
from litepersist.persistence.sqlite_persistence import SqlitePersistence

logger = logging.getLogger(__name__)

T = TypeVar("T")
K = TypeVar("K")


def get_item_id(item: Any) -> Any:
    """Get the id of a mapping or an object, or None."""
    if isinstance(item, Mapping):
        return item.get("id")
    return getattr(item, "id", None)


def with_item_id(item: Any, id: Any) -> Any:
    """Return a copy of item with its id set; the original is not modified."""
    if isinstance(item, BaseModel):
        return item.model_copy(update={"id": id})
    if isinstance(item, Mapping):
        return {**item, "id": id}
    if dataclasses.is_dataclass(item) and not isinstance(item, type):
        return dataclasses.replace(item, id=id)
    result = copy.copy(item)
    result.id = id
    return result


class IdentifiableSqlitePersistence(SqlitePersistence[T], Generic[T, K]):
    """Persistence with create/read/update/delete operations by item id."""

    def __init__(self, table_name: str) -> None:
        if table_name is None:
            raise ValueError("Table name could not be None")
        super().__init__(table_name)

    def convert_from_public_partial(self, value: Any) -> Any:
        """Convert a partial update map into columns. Defaults to convert_from_public."""
        return self.convert_from_public(value)

    def _get_by_id(self, operation: str, id: K) -> T | None:
        query = "SELECT * FROM " + self.quote_identifier(self._table_name) + " WHERE id=?"
        row = self._fetch_one(operation, query, [id])
        return self.convert_to_public(row) if row is not None else None

    def get_list_by_ids(self, correlation_id: str | None, ids: Sequence[K]) -> list[T]:
        """Get the items with the given ids, in table order."""
        if not ids:
            return []

        params = self.generate_parameters(ids)
        query = (
            "SELECT * FROM " + self.quote_identifier(self._table_name)
            + " WHERE id IN(" + params + ")"
        )

        rows = self._fetch_all("get_list_by_ids", query, list(ids))
        logger.debug(
            "Retrieved %d from %s",
            len(rows),
            self._table_name,
            extra={"correlation_id": correlation_id},
        )
        return [self.convert_to_public(row) for row in rows]

    def get_one_by_id(self, correlation_id: str | None, id: K) -> T | None:
        item = self._get_by_id("get_one_by_id", id)

        if item is None:
            logger.debug(
                "Nothing found from %s with id = %s",
                self._table_name,
                id,
                extra={"correlation_id": correlation_id},
            )
        else:
            logger.debug(
                "Retrieved from %s with id = %s",
                self._table_name,
                id,
                extra={"correlation_id": correlation_id},
            )
        return item

    def create(self, correlation_id: str | None, item: T | None) -> T | None:
        """Insert an item, generating an id when it has none."""
        if item is None:
            return None

        if get_item_id(item) is None:
            item = with_item_id(item, IdGenerator.next_long())

        return super().create(correlation_id, item)

    def set(self, correlation_id: str | None, item: T | None) -> T | None:
        """
        Insert the item, or update it when its id already exists.

        Returns:
            The stored item as read back from the table
        """
        if item is None:
            return None

        if get_item_id(item) is None:
            item = with_item_id(item, IdGenerator.next_long())
        id = get_item_id(item)

        row = self.convert_from_public(item)
        columns = self.generate_columns(row)
        params = self.generate_parameters(row)
        set_params = self.generate_set_parameters(row)
        values = self.generate_values(row)
        values.extend(list(values))

        query = (
            "INSERT INTO " + self.quote_identifier(self._table_name)
            + " (" + columns + ") VALUES (" + params + ")"
            + " ON CONFLICT(id) DO UPDATE SET " + set_params
        )

        with self._lock:
            self._execute("set", query, values)
            logger.debug(
                "Set in %s with id = %s",
                self.quote_identifier(self._table_name),
                id,
                extra={"correlation_id": correlation_id},
            )
            return self._get_by_id("set", id)

    def update(self, correlation_id: str | None, item: T | None) -> T | None:
        """
        Update an existing item by its id.

        Returns:
            The updated item, or None if the item or its id is None
            or no row has that id
        """
        if item is None or get_item_id(item) is None:
            return None
        id = get_item_id(item)

        row = self.convert_from_public(item)
        params = self.generate_set_parameters(row)
        values = self.generate_values(row)
        values.append(id)

        query = "UPDATE " + self.quote_identifier(self._table_name) + " SET " + params + " WHERE id=?"

        with self._lock:
            self._execute("update", query, values)
            logger.debug(
                "Updated in %s with id = %s",
                self._table_name,
                id,
                extra={"correlation_id": correlation_id},
            )
            return self._get_by_id("update", id)

    def update_partially(
        self, correlation_id: str | None, id: K | None, data: AnyValueMap | None
    ) -> T | None:
        """Update only the given columns of an item."""
        if data is None or id is None:
            return None

        row = self.convert_from_public_partial(data)
        params = self.generate_set_parameters(row)
        values = self.generate_values(row)
        values.append(id)

        query = "UPDATE " + self.quote_identifier(self._table_name) + " SET " + params + " WHERE id=?"

        with self._lock:
            self._execute("update_partially", query, values)
            logger.debug(
                "Updated partially in %s with id = %s",
                self._table_name,
                id,
                extra={"correlation_id": correlation_id},
            )
            return self._get_by_id("update_partially", id)

    def delete_by_id(self, correlation_id: str | None, id: K) -> T | None:
        """
        Delete an item by id.

        Returns:
            The deleted item, or None if nothing had that id
        """
        with self._lock:
            item = self._get_by_id("delete_by_id", id)
            if item is None:
                return None

            query = "DELETE FROM " + self.quote_identifier(self._table_name) + " WHERE id=?"
            self._execute("delete_by_id", query, [id])

        logger.debug(
            "Deleted from %s with id = %s",
            self._table_name,
            id,
            extra={"correlation_id": correlation_id},
        )
        return item

    def delete_by_ids(self, correlation_id: str | None, ids: Sequence[K]) -> int:
        """
        Delete the items with the given ids.

        Returns:
            Number of deleted rows
        """
        if not ids:
            return 0

        params = self.generate_parameters(ids)
        query = (
            "DELETE FROM " + self.quote_identifier(self._table_name)
            + " WHERE id IN(" + params + ")"
        )

        count = self._execute("delete_by_ids", query, list(ids))
        logger.debug(
            "Deleted %d items from %s",
            count,
            self._table_name,
            extra={"correlation_id": correlation_id},
        )
        return count
