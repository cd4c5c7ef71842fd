"""
Connection resolution for litepersist.

Resolves where a component connects to from its configuration, optionally
via discovery services and credential stores found in References.

Components:
    - ConnectionParams / CredentialParams: parameter models
    - ConnectionResolver / CredentialResolver: generic resolution
    - MemoryDiscovery / MemoryCredentialStore: in-process lookup services
    - SqliteConnectionResolver: validation and composition for SQLite
"""

from litepersist.connect.discovery import (
    ICredentialStore,
    IDiscovery,
    MemoryCredentialStore,
    MemoryDiscovery,
)
from litepersist.connect.params import ConnectionParams, CredentialParams, parse_key_values
from litepersist.connect.resolvers import ConnectionResolver, CredentialResolver
from litepersist.connect.sqlite import SqliteConfig, SqliteConnectionResolver

__all__ = [
    "ConnectionParams",
    "ConnectionResolver",
    "CredentialParams",
    "CredentialResolver",
    "ICredentialStore",
    "IDiscovery",
    "MemoryCredentialStore",
    "MemoryDiscovery",
    "SqliteConfig",
    "SqliteConnectionResolver",
    "parse_key_values",
]
