"""
SQLite persistence that stores whole items as JSON documents.

The table has only two columns: ``id`` and ``data``. Filters address
document fields with SQLite's JSON functions:

    JSON_EXTRACT(data, '$.name')='ABC'

Example:
    class NotesPersistence(IdentifiableJsonSqlitePersistence[dict, str]):
        def __init__(self) -> None:
            super().__init__("notes_json")

        def define_schema(self) -> None:
            self.clear_schema()
            self.ensure_table()

        def get_page_by_name(self, correlation_id, name, paging):
            return self.get_page_by_filter(
                correlation_id, "JSON_EXTRACT(data, '$.name')=?", paging, None, None, [name]
            )
"""

import json
import logging
from typing import Any, Generic, TypeVar

from litepersist.data import AnyValueMap
from litepersist.persistence.identifiable import IdentifiableSqlitePersistence

logger = logging.getLogger(__name__)

T = TypeVar("T")
K = TypeVar("K")


class IdentifiableJsonSqlitePersistence(IdentifiableSqlitePersistence[T, K], Generic[T, K]):
    """Identifiable persistence over an (id, data JSON) table."""

    def ensure_table(self, id_type: str = "VARCHAR(32)", data_type: str = "JSON") -> None:
        """
        Add a statement that creates the JSON table.

        Args:
            id_type: Type of the id column
            data_type: Type of the data column
        """
        query = (
            "CREATE TABLE IF NOT EXISTS " + self.quote_identifier(self._table_name)
            + " (id " + id_type + " PRIMARY KEY, data " + data_type + ")"
        )
        self.ensure_schema(query)

    def convert_to_public(self, value: Any) -> Any:
        if value is None:
            return None
        return json.loads(value["data"])

    def convert_from_public(self, value: Any) -> Any:
        if value is None:
            return None
        document = dict(super().convert_from_public(value))
        return {
            "id": document.get("id"),
            "data": json.dumps(document, default=str),
        }

    def update_partially(
        self, correlation_id: str | None, id: K | None, data: AnyValueMap | None
    ) -> T | None:
        """Merge the given fields into the stored document with JSON_PATCH."""
        if data is None or id is None:
            return None

        values = [json.dumps(data, default=str), id]
        query = (
            "UPDATE " + self.quote_identifier(self._table_name)
            + " SET data=JSON_PATCH(data,?) WHERE id=?"
        )

        with self._lock:
            self._execute("update_partially", query, values)
            logger.debug(
                "Updated partially in %s with id = %s",
                self._table_name,
                id,
                extra={"correlation_id": correlation_id},
            )
            return self._get_by_id("update_partially", id)
