"""Shortcuts for wiring remote configuration into an application."""

import time
from datetime import timedelta
from typing import Iterable, Optional, Union

from .parsers import JsonObjectParser, ObjectParser
from .provider import ConfigurationProvider
from .source import ConfigurationSource
from .stores import RemoteStore
from .trigger import to_seconds


def add_s3_object(
    bucket_name: str,
    key: str,
    optional: bool = False,
    reload_after: Optional[Union[float, timedelta]] = None,
    parser: Optional[ObjectParser] = None,
    store: Optional[RemoteStore] = None,
) -> ConfigurationProvider:
    """Build and load a provider for one object.

    Example:
        settings = add_s3_object("my-config", "settings.json", reload_after=30)
        settings.get("Logging:Level")
    """
    source = ConfigurationSource(
        container_name=bucket_name,
        object_key=key,
        optional=optional,
        reload_after=reload_after,
        parser=parser or JsonObjectParser(),
    )
    provider = source.build(store)
    provider.load()
    return provider


def add_json_s3_object(
    bucket_name: str,
    key: str,
    optional: bool = False,
    reload_after: Optional[Union[float, timedelta]] = None,
    store: Optional[RemoteStore] = None,
) -> ConfigurationProvider:
    """Build and load a provider for a JSON object."""
    return add_s3_object(bucket_name, key, optional, reload_after, JsonObjectParser(), store)


def wait_for_reload_to_complete(
    providers: Iterable[object],
    timeout: Union[float, timedelta],
) -> bool:
    """Block while any remote configuration provider is reloading.

    Objects that are not ``ConfigurationProvider`` instances are skipped, so
    a mixed list of configuration providers can be passed as is. The timeout
    applies to the whole call.

    Returns:
        True if every provider is idle, False if the timeout elapsed first
    """
    deadline = time.monotonic() + to_seconds(timeout)
    for provider in providers:
        if not isinstance(provider, ConfigurationProvider):
            continue
        remaining = max(0.0, deadline - time.monotonic())
        if not provider.wait_for_reload_to_complete(remaining):
            return False
    return True
