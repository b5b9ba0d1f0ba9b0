"""Configuration loaded from a remote object store and kept fresh."""

from .errors import (
    AuthError,
    ConfigurationError,
    NotFoundError,
    NotModifiedError,
    ParseError,
    RemoteConfigError,
    RemoteStoreError,
    TransientTransportError,
)
from .extensions import add_json_s3_object, add_s3_object, wait_for_reload_to_complete
from .parsers import JsonObjectParser, ObjectParser, TomlObjectParser, YamlObjectParser
from .provider import ConfigurationProvider, ProviderState
from .source import ConfigurationSource
from .stores import InMemoryStore, RemoteStore, S3Store
from .tokens import ChangeToken, on_change
from .trigger import ReloadTrigger

__all__ = [
    "AuthError",
    "ChangeToken",
    "ConfigurationError",
    "ConfigurationProvider",
    "ConfigurationSource",
    "InMemoryStore",
    "JsonObjectParser",
    "NotFoundError",
    "NotModifiedError",
    "ObjectParser",
    "ParseError",
    "ProviderState",
    "ReloadTrigger",
    "RemoteConfigError",
    "RemoteStore",
    "RemoteStoreError",
    "S3Store",
    "TomlObjectParser",
    "TransientTransportError",
    "YamlObjectParser",
    "add_json_s3_object",
    "add_s3_object",
    "on_change",
    "wait_for_reload_to_complete",
]

__version__ = "0.1.0"
