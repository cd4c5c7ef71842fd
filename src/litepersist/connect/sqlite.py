"""
SQLite connection resolution.

Turns ``connection(s).*`` settings (inline or via discovery) into the
database path the driver opens. Two forms are accepted:

    connection.database: ./data/app.db
    connection.uri: file://./data/app.db

When several connections are configured they are applied in order and
the last one wins; an explicit ``database`` beats a ``uri`` in the same
connection.
"""

from pydantic import BaseModel, ConfigDict, Field

from litepersist.config import ConfigParams
from litepersist.connect.params import ConnectionParams, CredentialParams
from litepersist.connect.resolvers import ConnectionResolver, CredentialResolver
from litepersist.errors import MissingConnectionError, MissingDatabaseError, WrongProtocolError
from litepersist.refer import References

FILE_PROTOCOL = "file://"


class SqliteConfig(BaseModel):
    """Resolved settings for opening a SQLite database."""

    model_config = ConfigDict(frozen=True)

    database: str = Field(..., description="Database file path or :memory:")


class SqliteConnectionResolver:
    """
    Resolves SQLite connection and credential parameters and validates them.

    Example:
        >>> resolver = SqliteConnectionResolver()
        >>> resolver.configure(ConfigParams.from_tuples("connection.uri", "file://./data/app.db"))
        >>> resolver.resolve(None).database
        './data/app.db'
    """

    def __init__(self) -> None:
        self._connection_resolver = ConnectionResolver()
        self._credential_resolver = CredentialResolver()

    def configure(self, config: ConfigParams) -> None:
        self._connection_resolver.configure(config)
        self._credential_resolver.configure(config)

    def set_references(self, references: References) -> None:
        self._connection_resolver.set_references(references)
        self._credential_resolver.set_references(references)

    def _validate_connection(self, correlation_id: str | None, connection: ConnectionParams) -> None:
        uri = connection.uri
        if uri is not None:
            if not uri.startswith(FILE_PROTOCOL):
                raise WrongProtocolError(uri=uri, correlation_id=correlation_id)
            return

        if connection.get_as_nullable_string("database") is None:
            raise MissingDatabaseError(correlation_id=correlation_id)

    def _validate_connections(
        self, correlation_id: str | None, connections: list[ConnectionParams]
    ) -> None:
        if not connections:
            raise MissingConnectionError(correlation_id=correlation_id)
        for connection in connections:
            self._validate_connection(correlation_id, connection)

    def _compose_config(
        self, connections: list[ConnectionParams], credential: CredentialParams | None
    ) -> SqliteConfig:
        database = ""
        for connection in connections:
            if connection.uri:
                database = connection.uri[len(FILE_PROTOCOL):]
            explicit = connection.get_as_nullable_string("database")
            if explicit:
                database = explicit

        # SQLite has no authentication, credentials only need to resolve
        return SqliteConfig(database=database)

    def resolve(self, correlation_id: str | None) -> SqliteConfig:
        """
        Resolve and validate the configured connection.

        Raises:
            MissingConnectionError: If no connection is configured
            WrongProtocolError: If a uri does not start with file://
            MissingDatabaseError: If a connection has no uri and no database
            UnresolvedConnectionError: If a discovery key cannot be resolved
        """
        connections = self._connection_resolver.resolve_all(correlation_id)
        self._validate_connections(correlation_id, connections)
        credential = self._credential_resolver.lookup(correlation_id)
        return self._compose_config(connections, credential)
