"""
Component references and dependency resolution.

Components find their collaborators (connections, discovery services,
credential stores) through a References registry instead of importing
them. Each registration is keyed by a locator, normally a Descriptor:

    group:type:kind:name:version    e.g. "app:connection:sqlite:default:1.0"

Any descriptor field may be "*" to match everything in that position.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from litepersist.config import ConfigParams
from litepersist.errors import DescriptorFormatError, ReferenceNotFoundError


# =============================================================================
# Component Protocols
# =============================================================================


@runtime_checkable
class IConfigurable(Protocol):
    def configure(self, config: ConfigParams) -> None: ...


@runtime_checkable
class IReferenceable(Protocol):
    def set_references(self, references: References) -> None: ...


@runtime_checkable
class IUnreferenceable(Protocol):
    def unset_references(self) -> None: ...


@runtime_checkable
class IOpenable(Protocol):
    def is_open(self) -> bool: ...

    def open(self, correlation_id: str | None) -> None: ...

    def close(self, correlation_id: str | None) -> None: ...


@runtime_checkable
class ICleanable(Protocol):
    def clear(self, correlation_id: str | None) -> None: ...


# =============================================================================
# Descriptor
# =============================================================================


def _field_matches(a: str | None, b: str | None) -> bool:
    if a is None or b is None or a == "*" or b == "*":
        return True
    return a == b


@dataclass(frozen=True)
class Descriptor:
    """
    Locator for a component: group, type, kind, name and version.

    Example:
        >>> Descriptor("app", "connection", "sqlite", "*", "1.0").match(
        ...     Descriptor.from_string("app:connection:sqlite:default:1.0"))
        True
    """

    group: str | None
    type: str | None
    kind: str | None
    name: str | None
    version: str | None

    @classmethod
    def from_string(cls, value: str | None) -> Descriptor | None:
        """
        Parse a "group:type:kind:name:version" string.

        Raises:
            DescriptorFormatError: If the string does not have five parts
        """
        if value is None or value == "":
            return None
        parts = value.split(":")
        if len(parts) != 5:
            raise DescriptorFormatError(value=value, setting="descriptor")
        return cls(*parts)

    def match(self, other: Descriptor) -> bool:
        """Compare field by field, treating "*" on either side as a wildcard."""
        return (
            _field_matches(self.group, other.group)
            and _field_matches(self.type, other.type)
            and _field_matches(self.kind, other.kind)
            and _field_matches(self.name, other.name)
            and _field_matches(self.version, other.version)
        )

    def __str__(self) -> str:
        return ":".join(
            part if part is not None else "*"
            for part in (self.group, self.type, self.kind, self.name, self.version)
        )


def locator_matches(registered: Any, locator: Any) -> bool:
    if isinstance(registered, Descriptor) and isinstance(locator, Descriptor):
        return registered.match(locator)
    return registered == locator


# =============================================================================
# References
# =============================================================================


class References:
    """
    Registry of components keyed by locators.

    Lookups return the most recently registered matches first.

    Example:
        >>> refs = References.from_tuples(
        ...     Descriptor("app", "connection", "sqlite", "default", "1.0"), connection,
        ... )
        >>> refs.get_one_optional(Descriptor("*", "connection", "sqlite", "*", "*"))
    """

    def __init__(self, tuples: list[tuple[Any, Any]] | None = None) -> None:
        self._references: list[tuple[Any, Any]] = []
        for locator, component in tuples or []:
            self.put(locator, component)

    @classmethod
    def from_tuples(cls, *tuples: Any) -> References:
        """Create references from alternating locator/component arguments."""
        result = cls()
        for index in range(0, len(tuples) - 1, 2):
            result.put(tuples[index], tuples[index + 1])
        return result

    def put(self, locator: Any, component: Any) -> None:
        if component is None:
            raise ValueError("Component cannot be None")
        self._references.append((locator, component))

    def remove(self, locator: Any) -> Any:
        """Remove the most recent component matching ``locator`` and return it."""
        for index in range(len(self._references) - 1, -1, -1):
            registered, component = self._references[index]
            if locator_matches(registered, locator):
                del self._references[index]
                return component
        return None

    def get_all_locators(self) -> list[Any]:
        return [locator for locator, _ in self._references]

    def get_all(self) -> list[Any]:
        return [component for _, component in self._references]

    def get_optional(self, locator: Any) -> list[Any]:
        return [
            component
            for registered, component in reversed(self._references)
            if locator_matches(registered, locator)
        ]

    def get_one_optional(self, locator: Any) -> Any:
        components = self.get_optional(locator)
        return components[0] if components else None

    def get_required(self, locator: Any) -> list[Any]:
        """
        Get all components matching ``locator``.

        Raises:
            ReferenceNotFoundError: If nothing matches
        """
        components = self.get_optional(locator)
        if not components:
            raise ReferenceNotFoundError(locator=str(locator))
        return components

    def get_one_required(self, locator: Any) -> Any:
        return self.get_required(locator)[0]


# =============================================================================
# Dependency Resolver
# =============================================================================


class DependencyResolver:
    """
    Resolves named dependencies declared in configuration.

    Each ``dependencies.<name>`` key holds a descriptor string; the
    resolver then looks the descriptor up in the references it was given.

    Example:
        >>> resolver = DependencyResolver(ConfigParams.from_tuples(
        ...     "dependencies.connection", "*:connection:sqlite:*:1.0"))
        >>> resolver.set_references(refs)
        >>> resolver.get_one_optional("connection")
    """

    def __init__(self, config: ConfigParams | None = None) -> None:
        self._dependencies: dict[str, Any] = {}
        self._references: References | None = None
        if config is not None:
            self.configure(config)

    def configure(self, config: ConfigParams) -> None:
        dependencies = config.get_section("dependencies")
        for name in dependencies.get_section_names():
            value = dependencies.get(name)
            if value is None:
                continue
            try:
                self._dependencies[name] = Descriptor.from_string(value)
            except DescriptorFormatError:
                self._dependencies[name] = value

    def set_references(self, references: References) -> None:
        self._references = references

    def put(self, name: str, locator: Any) -> None:
        self._dependencies[name] = locator

    def _locate(self, name: str) -> Any:
        if name not in self._dependencies:
            raise ReferenceNotFoundError(
                locator=name,
                message=f"Dependency {name} is not declared",
            )
        return self._dependencies[name]

    def get_optional(self, name: str) -> list[Any]:
        locator = self._dependencies.get(name)
        if locator is None or self._references is None:
            return []
        return self._references.get_optional(locator)

    def get_one_optional(self, name: str) -> Any:
        components = self.get_optional(name)
        return components[0] if components else None

    def get_one_required(self, name: str) -> Any:
        """
        Get the dependency called ``name``.

        Raises:
            ReferenceNotFoundError: If the dependency is undeclared or missing
        """
        locator = self._locate(name)
        if self._references is None:
            raise ReferenceNotFoundError(locator=str(locator))
        return self._references.get_one_required(locator)
