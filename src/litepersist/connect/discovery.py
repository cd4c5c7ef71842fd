"""
In-memory discovery services and credential stores.

Connections and credentials can be configured by key instead of inline:

    connection.discovery_key: main-db
    credential.store_key: main-db

A MemoryDiscovery (or any object with the same methods) registered in
References under ``*:discovery:*:*:1.0`` then answers for the key.
Configuration of the in-memory services uses "key=value;..." strings:

    main-db: "uri=file://./data/main.db"
"""

import logging
from typing import Protocol, runtime_checkable

from litepersist.config import ConfigParams
from litepersist.connect.params import ConnectionParams, CredentialParams

logger = logging.getLogger(__name__)


@runtime_checkable
class IDiscovery(Protocol):
    def register(
        self, correlation_id: str | None, key: str, connection: ConnectionParams
    ) -> ConnectionParams: ...

    def resolve_one(self, correlation_id: str | None, key: str) -> ConnectionParams | None: ...

    def resolve_all(self, correlation_id: str | None, key: str) -> list[ConnectionParams]: ...


@runtime_checkable
class ICredentialStore(Protocol):
    def store(
        self, correlation_id: str | None, key: str, credential: CredentialParams | None
    ) -> None: ...

    def lookup(self, correlation_id: str | None, key: str) -> CredentialParams | None: ...


class MemoryDiscovery:
    """Discovery service that keeps connections in a local list."""

    def __init__(self, config: ConfigParams | None = None) -> None:
        self._items: list[tuple[str, ConnectionParams]] = []
        if config is not None:
            self.configure(config)

    def configure(self, config: ConfigParams) -> None:
        for key, value in config.items():
            if value is None:
                continue
            self._items.append((key, ConnectionParams.from_string(value)))

    def register(
        self, correlation_id: str | None, key: str, connection: ConnectionParams
    ) -> ConnectionParams:
        self._items.append((key, connection))
        logger.debug(
            "Registered connection under key %s",
            key,
            extra={"correlation_id": correlation_id},
        )
        return connection

    def resolve_one(self, correlation_id: str | None, key: str) -> ConnectionParams | None:
        for item_key, connection in self._items:
            if item_key == key:
                return connection
        return None

    def resolve_all(self, correlation_id: str | None, key: str) -> list[ConnectionParams]:
        return [connection for item_key, connection in self._items if item_key == key]


class MemoryCredentialStore:
    """Credential store that keeps credentials in a local map."""

    def __init__(self, config: ConfigParams | None = None) -> None:
        self._items: dict[str, CredentialParams] = {}
        if config is not None:
            self.configure(config)

    def configure(self, config: ConfigParams) -> None:
        for key, value in config.items():
            if value is None:
                continue
            self._items[key] = CredentialParams.from_string(value)

    def store(
        self, correlation_id: str | None, key: str, credential: CredentialParams | None
    ) -> None:
        if credential is None:
            self._items.pop(key, None)
        else:
            self._items[key] = credential

    def lookup(self, correlation_id: str | None, key: str) -> CredentialParams | None:
        return self._items.get(key)
