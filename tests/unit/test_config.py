"""
Unit tests for configuration parameters.

Tests cover:
- Construction from tuples, nested values and YAML files
- Sections, defaults and overrides
- Typed getters
"""

from pathlib import Path

import pytest

from litepersist.config import ConfigParams
from litepersist.errors import InvalidConfigError


class TestConstruction:
    """Tests for ConfigParams constructors."""

    def test_from_tuples(self) -> None:
        config = ConfigParams.from_tuples(
            "connection.database", "app.db",
            "options.max_page_size", 50,
            "options.debug", True,
        )
        assert config["connection.database"] == "app.db"
        assert config["options.max_page_size"] == "50"
        assert config["options.debug"] == "true"

    def test_from_tuples_keeps_none(self) -> None:
        config = ConfigParams.from_tuples("collection", None)
        assert "collection" in config
        assert config["collection"] is None

    def test_from_value_flattens_nested(self) -> None:
        config = ConfigParams.from_value({
            "connection": {"database": "app.db"},
            "connections": [{"uri": "file://a.db"}, {"uri": "file://b.db"}],
        })
        assert config["connection.database"] == "app.db"
        assert config["connections.0.uri"] == "file://a.db"
        assert config["connections.1.uri"] == "file://b.db"

    def test_from_yaml(self, temp_dir: Path) -> None:
        path = temp_dir / "config.yaml"
        path.write_text("connection:\n  database: ./data/app.db\noptions:\n  timeout: 2.5\n")
        config = ConfigParams.from_yaml(path)
        assert config["connection.database"] == "./data/app.db"
        assert config.get_as_float_with_default("options.timeout", 0) == 2.5

    def test_from_yaml_missing_file(self, temp_dir: Path) -> None:
        with pytest.raises(InvalidConfigError):
            ConfigParams.from_yaml(temp_dir / "missing.yaml")

    def test_from_yaml_invalid_yaml(self, temp_dir: Path) -> None:
        path = temp_dir / "bad.yaml"
        path.write_text("connection: [unclosed\n")
        with pytest.raises(InvalidConfigError) as exc_info:
            ConfigParams.from_yaml(path)
        assert "Invalid YAML" in exc_info.value.validation_error

    def test_from_yaml_empty_file(self, temp_dir: Path) -> None:
        path = temp_dir / "empty.yaml"
        path.write_text("")
        with pytest.raises(InvalidConfigError):
            ConfigParams.from_yaml(path)

    def test_from_yaml_non_mapping_root(self, temp_dir: Path) -> None:
        path = temp_dir / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(InvalidConfigError):
            ConfigParams.from_yaml(path)


class TestSections:
    """Tests for section handling."""

    def test_get_section(self) -> None:
        config = ConfigParams.from_tuples(
            "connection.database", "app.db",
            "connection.uri", "file://app.db",
            "options.timeout", 1,
        )
        assert config.get_section("connection") == {
            "database": "app.db",
            "uri": "file://app.db",
        }

    def test_get_missing_section_is_empty(self) -> None:
        assert ConfigParams().get_section("connection") == {}

    def test_get_section_names(self) -> None:
        config = ConfigParams.from_tuples(
            "connection.database", "app.db",
            "options.timeout", 1,
            "options.max_page_size", 10,
            "table", "notes",
        )
        assert config.get_section_names() == ["connection", "options", "table"]

    def test_add_section(self) -> None:
        config = ConfigParams()
        config.add_section("options", {"timeout": "3"})
        assert config["options.timeout"] == "3"

    def test_set_defaults_keeps_own_values(self) -> None:
        config = ConfigParams.from_tuples("options.max_page_size", 10)
        result = config.set_defaults(ConfigParams.from_tuples(
            "options.max_page_size", 100,
            "options.timeout", 5,
        ))
        assert result["options.max_page_size"] == "10"
        assert result["options.timeout"] == "5"

    def test_override_replaces_values(self) -> None:
        config = ConfigParams.from_tuples("table", "a")
        result = config.override(ConfigParams.from_tuples("table", "b"))
        assert result["table"] == "b"
        assert config["table"] == "a"


class TestTypedGetters:
    """Tests for typed getters."""

    def test_integer(self) -> None:
        config = ConfigParams.from_tuples("a", "12", "b", "3.7", "c", "abc")
        assert config.get_as_nullable_integer("a") == 12
        assert config.get_as_nullable_integer("b") == 3
        assert config.get_as_nullable_integer("c") is None
        assert config.get_as_integer_with_default("missing", 5) == 5

    def test_float(self) -> None:
        config = ConfigParams.from_tuples("a", "1.5")
        assert config.get_as_nullable_float("a") == 1.5
        assert config.get_as_float_with_default("missing", 2.0) == 2.0

    def test_boolean(self) -> None:
        config = ConfigParams.from_tuples("a", "yes", "b", "False", "c", "maybe")
        assert config.get_as_nullable_boolean("a") is True
        assert config.get_as_nullable_boolean("b") is False
        assert config.get_as_nullable_boolean("c") is None
        assert config.get_as_boolean_with_default("c", True) is True

    def test_string_with_default_treats_none_as_unset(self) -> None:
        config = ConfigParams.from_tuples("collection", None)
        assert config.get_as_nullable_string("collection") is None
        assert config.get_as_string_with_default("collection", "notes") == "notes"
