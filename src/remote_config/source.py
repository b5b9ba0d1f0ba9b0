"""Declarative description of a remote configuration object."""

import os
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Optional, Union
from urllib.parse import urlparse

from loguru import logger

from .errors import ConfigurationError
from .parsers import JsonObjectParser, ObjectParser, parser_for_key
from .provider import ConfigurationProvider
from .stores import RemoteStore, S3Store
from .trigger import ReloadTrigger, to_seconds

DEFAULT_ENV_PREFIX = "REMOTE_CONFIG_"

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


@dataclass(frozen=True)
class ConfigurationSource:
    """Where a configuration object lives and how to treat it.

    Attributes:
        container_name: Bucket holding the object
        object_key: Key of the object within the bucket
        optional: Whether a failed initial load is tolerated
        reload_after: Interval between reloads; None disables reloading
        parser: Parser for the object body
    """

    container_name: Optional[str]
    object_key: Optional[str]
    optional: bool = False
    reload_after: Optional[Union[float, timedelta]] = None
    parser: Optional[ObjectParser] = field(default_factory=JsonObjectParser)

    def validate(self) -> None:
        """Check the descriptor is complete.

        Raises:
            ConfigurationError: If a required field is missing or invalid
        """
        if self.container_name is None:
            raise ConfigurationError("container_name must be set to build a provider")
        if self.object_key is None:
            raise ConfigurationError("object_key must be set to build a provider")
        if self.parser is None:
            raise ConfigurationError("parser must be set to build a provider")
        if self.reload_after is not None and to_seconds(self.reload_after) <= 0:
            raise ConfigurationError(f"reload_after must be positive, got {self.reload_after!r}")

    def build(self, store: Optional[RemoteStore] = None) -> ConfigurationProvider:
        """Create the provider (and its trigger, if reloading is enabled).

        Args:
            store: Remote store client. Defaults to an ``S3Store`` using the
                ambient AWS credentials.

        Returns:
            An unloaded provider; call ``load()`` on it
        """
        self.validate()
        if store is None:
            store = S3Store()

        trigger = None
        if self.reload_after is not None:
            trigger = ReloadTrigger(self.reload_after, name=f"reload:{self.container_name}/{self.object_key}")

        logger.debug(f"Building provider for {self}")
        return ConfigurationProvider(self, store, self.parser, trigger)

    @classmethod
    def from_url(
        cls,
        url: str,
        optional: bool = False,
        reload_after: Optional[Union[float, timedelta]] = None,
        parser: Optional[ObjectParser] = None,
    ) -> "ConfigurationSource":
        """Create a source from an ``s3://bucket/key`` URL.

        The parser is picked from the key's extension when not given.
        """
        parsed = urlparse(url)
        key = parsed.path.lstrip("/")
        if parsed.scheme != "s3" or not parsed.netloc or not key:
            raise ConfigurationError(f"Expected a URL of the form s3://bucket/key, got '{url}'")
        return cls(
            container_name=parsed.netloc,
            object_key=key,
            optional=optional,
            reload_after=reload_after,
            parser=parser or parser_for_key(key),
        )

    @classmethod
    def from_env(cls, prefix: str = DEFAULT_ENV_PREFIX) -> "ConfigurationSource":
        """Create a source from environment variables.

        Reads ``{prefix}BUCKET``, ``{prefix}KEY``, ``{prefix}OPTIONAL`` and
        ``{prefix}RELOAD_AFTER`` (seconds).
        """
        bucket = os.environ.get(f"{prefix}BUCKET")
        key = os.environ.get(f"{prefix}KEY")
        if not bucket or not key:
            raise ConfigurationError(f"{prefix}BUCKET and {prefix}KEY must both be set")

        optional_value = os.environ.get(f"{prefix}OPTIONAL", "").strip().lower()
        if optional_value in _TRUE_VALUES:
            optional = True
        elif optional_value in _FALSE_VALUES:
            optional = False
        else:
            raise ConfigurationError(f"Invalid boolean for {prefix}OPTIONAL: '{optional_value}'")

        reload_after = None
        reload_value = os.environ.get(f"{prefix}RELOAD_AFTER", "").strip()
        if reload_value:
            try:
                reload_after = float(reload_value)
            except ValueError:
                raise ConfigurationError(
                    f"Invalid number of seconds for {prefix}RELOAD_AFTER: '{reload_value}'"
                )

        return cls(
            container_name=bucket,
            object_key=key,
            optional=optional,
            reload_after=reload_after,
            parser=parser_for_key(key),
        )

    def __str__(self) -> str:
        return f"s3://{self.container_name}/{self.object_key}"
