"""Object parser implementations."""

from pathlib import PurePosixPath

from ..errors import ConfigurationError
from .base import DEFAULT_DELIMITER, ObjectParser, StructuredObjectParser, flatten
from .json import JsonObjectParser
from .toml import TomlObjectParser
from .yaml import YamlObjectParser


def parser_for_key(object_key: str) -> ObjectParser:
    """Pick a parser from the object key's extension.

    Raises:
        ConfigurationError: If the extension is not recognised
    """
    suffix = PurePosixPath(object_key).suffix.lower()
    if suffix == ".json":
        return JsonObjectParser()
    elif suffix in (".yaml", ".yml"):
        return YamlObjectParser()
    elif suffix == ".toml":
        return TomlObjectParser()
    else:
        raise ConfigurationError(f"Unknown configuration format for object key '{object_key}'")


__all__ = [
    "DEFAULT_DELIMITER",
    "JsonObjectParser",
    "ObjectParser",
    "StructuredObjectParser",
    "TomlObjectParser",
    "YamlObjectParser",
    "flatten",
    "parser_for_key",
]
