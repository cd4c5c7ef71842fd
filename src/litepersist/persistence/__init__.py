"""
SQLite persistence components.

Components:
    - SqliteConnection: a shareable sqlite3 handle with a lifecycle
    - SqlitePersistence: table-level queries over hand-built SQL
    - IdentifiableSqlitePersistence: CRUD by item id
    - IdentifiableJsonSqlitePersistence: CRUD over (id, data JSON) tables

All components follow the same lifecycle:
    configure() -> set_references() -> open() -> ... -> close()
"""

from litepersist.persistence.connection import SqliteConnection
from litepersist.persistence.identifiable import (
    IdentifiableSqlitePersistence,
    get_item_id,
    with_item_id,
)
from litepersist.persistence.identifiable_json import IdentifiableJsonSqlitePersistence
from litepersist.persistence.sqlite_persistence import SqlitePersistence

__all__ = [
    "IdentifiableJsonSqlitePersistence",
    "IdentifiableSqlitePersistence",
    "SqliteConnection",
    "SqlitePersistence",
    "get_item_id",
    "with_item_id",
]
