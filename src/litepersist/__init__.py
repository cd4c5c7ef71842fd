"""
litepersist - SQLite persistence components with a configure/open/close lifecycle.

litepersist wraps Python's sqlite3 driver in components that are
configured from flat config params, wired through References, and opened
and closed explicitly. On top of a shared connection it offers:
- Paged, counted, listed and random queries by SQL filter
- CRUD by item id
- CRUD over JSON documents stored in (id, data) tables

Example usage:
    >>> persistence = MyPersistence()
    >>> persistence.configure(ConfigParams.from_tuples("connection.database", "app.db"))
    >>> persistence.open(None)
    >>> persistence.create(None, {"id": "1", "name": "ABC"})

    $ litepersist page config.yaml notes --take 10
"""

from litepersist.config import ConfigParams
from litepersist.data import AnyValueMap, DataPage, FilterParams, IdGenerator, PagingParams
from litepersist.persistence import (
    IdentifiableJsonSqlitePersistence,
    IdentifiableSqlitePersistence,
    SqliteConnection,
    SqlitePersistence,
)
from litepersist.refer import Descriptor, References

__version__ = "0.1.0"
__author__ = "litepersist Contributors"

__all__ = [
    "AnyValueMap",
    "ConfigParams",
    "DataPage",
    "Descriptor",
    "FilterParams",
    "IdGenerator",
    "IdentifiableJsonSqlitePersistence",
    "IdentifiableSqlitePersistence",
    "PagingParams",
    "References",
    "SqliteConnection",
    "SqlitePersistence",
    "__author__",
    "__version__",
]
