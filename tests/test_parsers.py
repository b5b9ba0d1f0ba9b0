"""Tests for object parsers."""

import json

import pytest

from remote_config.errors import ConfigurationError, ParseError
from remote_config.parsers import (
    JsonObjectParser,
    TomlObjectParser,
    YamlObjectParser,
    flatten,
    parser_for_key,
)


class TestFlatten:
    """Test flattening nested documents."""

    def test_nested_values(self):
        document = {
            "name": "app",
            "database": {"host": "localhost", "port": 5432},
            "hosts": ["a", "b"],
            "debug": False,
            "empty": None,
        }

        assert flatten(document) == {
            "name": "app",
            "database:host": "localhost",
            "database:port": "5432",
            "hosts:0": "a",
            "hosts:1": "b",
            "debug": "false",
            "empty": "",
        }

    def test_custom_delimiter(self):
        assert flatten({"a": {"b": 1}}, delimiter=".") == {"a.b": "1"}

    def test_empty_containers_produce_no_keys(self):
        assert flatten({"a": {}, "b": []}) == {}


class TestJsonObjectParser:
    """Test JSON parsing."""

    def test_parse(self, settings):
        parser = JsonObjectParser()
        data = parser.parse(json.dumps(settings).encode())

        assert data["name"] == "TestApp"
        assert data["debug"] == "true"
        assert data["database:port"] == "5432"
        assert data["features:1"] == "export"

    def test_empty_payload(self):
        assert JsonObjectParser().parse(b"") == {}
        assert JsonObjectParser().parse(b"  \n") == {}

    def test_byte_order_mark(self):
        assert JsonObjectParser().parse('\ufeff{"a": "b"}'.encode()) == {"a": "b"}

    @pytest.mark.parametrize(
        "payload",
        [b"{not json", b"[1, 2, 3]", b'"text"', b"\xff\xfe\x00"],
    )
    def test_malformed_payload(self, payload):
        """Malformed input raises ParseError instead of crashing."""
        with pytest.raises(ParseError):
            JsonObjectParser().parse(payload)


class TestYamlObjectParser:
    """Test YAML parsing."""

    def test_parse(self):
        payload = b"server:\n  host: 127.0.0.1\n  port: 8080\nworkers: [1, 2]\n"

        assert YamlObjectParser().parse(payload) == {
            "server:host": "127.0.0.1",
            "server:port": "8080",
            "workers:0": "1",
            "workers:1": "2",
        }

    def test_malformed(self):
        with pytest.raises(ParseError):
            YamlObjectParser().parse(b"key: [unclosed")


class TestTomlObjectParser:
    """Test TOML parsing."""

    def test_parse(self):
        payload = b'name = "app"\n\n[database]\nhost = "db"\nport = 5434\n'

        assert TomlObjectParser().parse(payload) == {
            "name": "app",
            "database:host": "db",
            "database:port": "5434",
        }

    def test_malformed(self):
        with pytest.raises(ParseError):
            TomlObjectParser().parse(b"name = ")


class TestParserForKey:
    """Test parser detection from object keys."""

    @pytest.mark.parametrize(
        "key, parser_type",
        [
            ("settings.json", JsonObjectParser),
            ("env/prod.YAML", YamlObjectParser),
            ("env/prod.yml", YamlObjectParser),
            ("app.toml", TomlObjectParser),
        ],
    )
    def test_detects_format(self, key, parser_type):
        assert isinstance(parser_for_key(key), parser_type)

    def test_unknown_extension(self):
        with pytest.raises(ConfigurationError):
            parser_for_key("settings.ini")
