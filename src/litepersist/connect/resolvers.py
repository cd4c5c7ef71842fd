"""
Resolution of configured connections and credentials.

Inline settings are used as-is. Settings that name a ``discovery_key``
or ``store_key`` are looked up in the discovery services and credential
stores found in References.
"""

import logging

from litepersist.config import ConfigParams
from litepersist.connect.discovery import ICredentialStore, IDiscovery
from litepersist.connect.params import ConnectionParams, CredentialParams, many_from_config
from litepersist.errors import ReferenceNotFoundError, UnresolvedConnectionError
from litepersist.refer import Descriptor, References

logger = logging.getLogger(__name__)

DISCOVERY_DESCRIPTOR = Descriptor("*", "discovery", "*", "*", "1.0")
CREDENTIAL_STORE_DESCRIPTOR = Descriptor("*", "credential-store", "*", "*", "1.0")


class ConnectionResolver:
    """
    Resolves ``connection`` / ``connections.*`` settings.

    Example config:
        connection.database: ./data/app.db
    or
        connections.0.discovery_key: main-db
        connections.1.uri: file://./data/replica.db
    """

    def __init__(self, config: ConfigParams | None = None, references: References | None = None) -> None:
        self._connections: list[ConnectionParams] = []
        self._references: References | None = None
        if config is not None:
            self.configure(config)
        if references is not None:
            self.set_references(references)

    def configure(self, config: ConfigParams) -> None:
        self._connections = [
            ConnectionParams.from_config(section)
            for section in many_from_config(config, "connection", "connections")
        ]

    def set_references(self, references: References) -> None:
        self._references = references

    def get_all(self) -> list[ConnectionParams]:
        return list(self._connections)

    def add(self, connection: ConnectionParams) -> None:
        self._connections.append(connection)

    def _resolve_in_discovery(
        self, correlation_id: str | None, connection: ConnectionParams
    ) -> list[ConnectionParams]:
        key = connection.discovery_key or ""
        discoveries: list[IDiscovery] = (
            self._references.get_optional(DISCOVERY_DESCRIPTOR) if self._references else []
        )
        if not discoveries:
            raise UnresolvedConnectionError(
                discovery_key=key,
                correlation_id=correlation_id,
                message="Discovery wasn't found to make resolution",
            )

        resolved: list[ConnectionParams] = []
        for discovery in discoveries:
            resolved.extend(discovery.resolve_all(correlation_id, key))
        if not resolved:
            raise UnresolvedConnectionError(discovery_key=key, correlation_id=correlation_id)

        logger.debug(
            "Resolved %d connection(s) for discovery key %s",
            len(resolved),
            key,
            extra={"correlation_id": correlation_id},
        )
        return resolved

    def resolve_all(self, correlation_id: str | None) -> list[ConnectionParams]:
        """
        Resolve every configured connection.

        Raises:
            UnresolvedConnectionError: If a discovery key cannot be resolved
        """
        result: list[ConnectionParams] = []
        for connection in self._connections:
            if connection.use_discovery:
                result.extend(self._resolve_in_discovery(correlation_id, connection))
            else:
                result.append(connection)
        return result


class CredentialResolver:
    """Resolves ``credential`` / ``credentials.*`` settings."""

    def __init__(self, config: ConfigParams | None = None, references: References | None = None) -> None:
        self._credentials: list[CredentialParams] = []
        self._references: References | None = None
        if config is not None:
            self.configure(config)
        if references is not None:
            self.set_references(references)

    def configure(self, config: ConfigParams) -> None:
        self._credentials = [
            CredentialParams.from_config(section)
            for section in many_from_config(config, "credential", "credentials")
        ]

    def set_references(self, references: References) -> None:
        self._references = references

    def get_all(self) -> list[CredentialParams]:
        return list(self._credentials)

    def _lookup_in_stores(
        self, correlation_id: str | None, credential: CredentialParams
    ) -> CredentialParams | None:
        if self._references is None:
            return None
        stores: list[ICredentialStore] = self._references.get_optional(CREDENTIAL_STORE_DESCRIPTOR)
        if not stores:
            raise ReferenceNotFoundError(
                locator=str(CREDENTIAL_STORE_DESCRIPTOR),
                correlation_id=correlation_id,
                message="Credential store wasn't found to make lookup",
            )
        for store in stores:
            found = store.lookup(correlation_id, credential.store_key or "")
            if found is not None:
                return found
        return None

    def lookup(self, correlation_id: str | None) -> CredentialParams | None:
        """
        Get the first credential that resolves, or None.

        Raises:
            ReferenceNotFoundError: If a store key is set but no store is referenced
        """
        for credential in self._credentials:
            if not credential.use_credential_store:
                return credential
            found = self._lookup_in_stores(correlation_id, credential)
            if found is not None:
                return found
        return None
