"""
Component factories.

A Factory maps locators (usually Descriptors) to callables that create
components, so a container can build components named in configuration.
"""

from collections.abc import Callable
from typing import Any

from litepersist.errors import CreateError
from litepersist.persistence.connection import SqliteConnection
from litepersist.refer import Descriptor, locator_matches


class Factory:
    """Creates components from registered locators."""

    def __init__(self) -> None:
        self._registrations: list[tuple[Any, Callable[[Any], Any]]] = []

    def register(self, locator: Any, factory: Callable[[Any], Any]) -> None:
        """
        Register a callable that receives the requested locator and
        returns a new component.
        """
        if locator is None:
            raise ValueError("Locator cannot be None")
        if factory is None:
            raise ValueError("Factory cannot be None")
        self._registrations.append((locator, factory))

    def register_as_type(self, locator: Any, component_type: type) -> None:
        """Register a class whose no-argument constructor creates the component."""
        if component_type is None:
            raise ValueError("Component type cannot be None")
        self.register(locator, lambda _locator: component_type())

    def can_create(self, locator: Any) -> Any:
        """Return the registered locator that matches, or None."""
        for registered, _ in self._registrations:
            if locator_matches(registered, locator):
                return registered
        return None

    def create(self, locator: Any) -> Any:
        """
        Create a component for ``locator``.

        Raises:
            CreateError: If no registration matches
        """
        for registered, factory in self._registrations:
            if locator_matches(registered, locator):
                return factory(locator)
        raise CreateError(locator=str(locator))


class DefaultSqliteFactory(Factory):
    """Creates SQLite components by their descriptors."""

    descriptor = Descriptor("pip-services", "factory", "sqlite", "default", "1.0")
    sqlite_connection_descriptor = Descriptor("pip-services", "connection", "sqlite", "*", "1.0")

    def __init__(self) -> None:
        super().__init__()
        self.register_as_type(self.sqlite_connection_descriptor, SqliteConnection)
