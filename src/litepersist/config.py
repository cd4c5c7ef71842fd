"""
Configuration parameters for litepersist components.

Components are configured with a flat map of dotted keys, for example:

    connection.database: ./data/app.db
    options.max_page_size: 50
    dependencies.connection: "*:connection:sqlite:*:1.0"

Nested YAML documents are flattened into the same shape, so a config
file and a set of hand-written tuples are interchangeable.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from litepersist.errors import InvalidConfigError

_TRUE_VALUES = {"true", "1", "yes", "y", "on"}
_FALSE_VALUES = {"false", "0", "no", "n", "off"}


def _to_string(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _flatten(prefix: str, value: Any, result: dict[str, str | None]) -> None:
    if isinstance(value, dict):
        for key, item in value.items():
            _flatten(f"{prefix}.{key}" if prefix else str(key), item, result)
    elif isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            _flatten(f"{prefix}.{index}" if prefix else str(index), item, result)
    else:
        result[prefix] = _to_string(value)


class ConfigParams(dict[str, str | None]):
    """
    Flat string map of configuration parameters keyed by dotted paths.

    A key set to None counts as "not set" for every typed getter.

    Example:
        >>> config = ConfigParams.from_tuples(
        ...     "connection.database", "./data/app.db",
        ...     "options.max_page_size", 50,
        ... )
        >>> config.get_section("connection")
        {'database': './data/app.db'}
    """

    @classmethod
    def from_tuples(cls, *tuples: Any) -> ConfigParams:
        """Create params from alternating key/value arguments."""
        result = cls()
        for index in range(0, len(tuples) - 1, 2):
            result[str(tuples[index])] = _to_string(tuples[index + 1])
        return result

    @classmethod
    def from_value(cls, value: Any) -> ConfigParams:
        """Create params by flattening a nested mapping."""
        result: dict[str, str | None] = {}
        if value is not None:
            _flatten("", value, result)
        return cls(result)

    @classmethod
    def from_yaml(cls, path: str | Path) -> ConfigParams:
        """
        Load params from a YAML file.

        Args:
            path: Path to a YAML document whose root is a mapping

        Raises:
            InvalidConfigError: If the file is missing, unparseable or
                not a mapping
        """
        config_path = Path(path)
        try:
            with config_path.open() as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise InvalidConfigError(
                path=str(config_path),
                validation_error=str(e),
            ) from e
        except yaml.YAMLError as e:
            raise InvalidConfigError(
                path=str(config_path),
                validation_error=f"Invalid YAML: {e}",
            ) from e

        if data is None:
            raise InvalidConfigError(
                path=str(config_path),
                validation_error="Empty configuration file",
            )
        if not isinstance(data, dict):
            raise InvalidConfigError(
                path=str(config_path),
                validation_error="Configuration root must be a mapping",
            )
        return cls.from_value(data)

    # =========================================================================
    # Sections
    # =========================================================================

    def get_section_names(self) -> list[str]:
        """Get distinct first path segments, in insertion order."""
        names: list[str] = []
        for key in self:
            name = key.split(".", 1)[0]
            if name and name not in names:
                names.append(name)
        return names

    def get_section(self, name: str) -> ConfigParams:
        """Get the parameters under ``name.`` with the prefix removed."""
        prefix = name + "."
        return ConfigParams(
            {key[len(prefix):]: value for key, value in self.items() if key.startswith(prefix)}
        )

    def add_section(self, name: str, section: dict[str, str | None]) -> None:
        """Add parameters from another map under ``name.``."""
        for key, value in section.items():
            self[f"{name}.{key}" if name else key] = value

    def set_defaults(self, defaults: dict[str, str | None]) -> ConfigParams:
        """Return new params where own keys take precedence over defaults."""
        result = ConfigParams(defaults)
        result.update(self)
        return result

    def override(self, other: dict[str, str | None]) -> ConfigParams:
        """Return new params where keys from ``other`` take precedence."""
        result = ConfigParams(self)
        result.update(other)
        return result

    # =========================================================================
    # Typed Getters
    # =========================================================================

    def get_as_nullable_string(self, key: str) -> str | None:
        return self.get(key)

    def get_as_string_with_default(self, key: str, default: str | None) -> str | None:
        value = self.get(key)
        return value if value is not None else default

    def get_as_nullable_integer(self, key: str) -> int | None:
        value = self.get(key)
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            try:
                return int(float(value))
            except ValueError:
                return None

    def get_as_integer_with_default(self, key: str, default: int) -> int:
        value = self.get_as_nullable_integer(key)
        return value if value is not None else default

    def get_as_nullable_float(self, key: str) -> float | None:
        value = self.get(key)
        if value is None:
            return None
        try:
            return float(value)
        except ValueError:
            return None

    def get_as_float_with_default(self, key: str, default: float) -> float:
        value = self.get_as_nullable_float(key)
        return value if value is not None else default

    def get_as_nullable_boolean(self, key: str) -> bool | None:
        value = self.get(key)
        if value is None:
            return None
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        return None

    def get_as_boolean_with_default(self, key: str, default: bool) -> bool:
        value = self.get_as_nullable_boolean(key)
        return value if value is not None else default
