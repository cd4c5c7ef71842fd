"""
Connection and credential parameter models.

Both models accept arbitrary extra keys so that component-specific
settings (such as ``database`` for SQLite) travel alongside the common
ones.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from litepersist.config import ConfigParams


def parse_key_values(value: str | None) -> dict[str, str]:
    """
    Parse a "key1=value1;key2=value2" string.

    Example:
        >>> parse_key_values("uri=file://./app.db;timeout=5")
        {'uri': 'file://./app.db', 'timeout': '5'}
    """
    result: dict[str, str] = {}
    if not value:
        return result
    for token in value.split(";"):
        token = token.strip()
        if not token:
            continue
        key, sep, item = token.partition("=")
        result[key.strip()] = item.strip() if sep else ""
    return result


class _ParamsModel(BaseModel):
    model_config = ConfigDict(extra="allow")

    @classmethod
    def from_config(cls, config: dict[str, str | None]):
        return cls.model_validate({key: value for key, value in config.items() if value is not None})

    @classmethod
    def from_string(cls, value: str | None):
        return cls.model_validate(parse_key_values(value))

    def get_as_nullable_string(self, key: str) -> str | None:
        """Get a declared or extra field as a string."""
        if key in type(self).model_fields:
            value: Any = getattr(self, key)
        else:
            value = (self.model_extra or {}).get(key)
        return None if value is None else str(value)


class ConnectionParams(_ParamsModel):
    """
    Where a component connects to.

    Attributes:
        discovery_key: Key to look the connection up in discovery services
        uri: Resource uri (file://path for SQLite)
        database: Database file path
        host, port, protocol: Network settings for servers that need them
    """

    discovery_key: str | None = Field(default=None)
    uri: str | None = Field(default=None)
    database: str | None = Field(default=None)
    host: str | None = Field(default=None)
    port: int | None = Field(default=None)
    protocol: str | None = Field(default=None)

    @property
    def use_discovery(self) -> bool:
        return self.discovery_key is not None


class CredentialParams(_ParamsModel):
    """Credentials a component authenticates with."""

    store_key: str | None = Field(default=None)
    username: str | None = Field(default=None)
    password: str | None = Field(default=None)

    @property
    def use_credential_store(self) -> bool:
        return self.store_key is not None


def many_from_config(config: ConfigParams, single: str, plural: str) -> list[ConfigParams]:
    """
    Read either a list section (``connections.*``) or a single section
    (``connection``) from component config.
    """
    sections: list[ConfigParams] = []
    many = config.get_section(plural)
    if many:
        for name in many.get_section_names():
            section = many.get_section(name)
            if section:
                sections.append(section)
    else:
        section = config.get_section(single)
        if section:
            sections.append(section)
    return sections
