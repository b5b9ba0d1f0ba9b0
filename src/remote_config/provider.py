"""Configuration provider backed by a remote object store."""

import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from loguru import logger

from .errors import ConfigurationError, NotModifiedError, ParseError, RemoteStoreError
from .parsers import ObjectParser
from .stores import RemoteStore
from .tokens import ChangeToken
from .trigger import Interval, ReloadTrigger, to_seconds


class ProviderState(Enum):
    """Lifecycle of a provider."""

    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    LOADED = "loaded"
    FAILED_OPTIONAL = "failed_optional"
    RELOADING = "reloading"


@dataclass(frozen=True)
class Snapshot:
    """Loaded data and the etag it was parsed from, published together."""

    data: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    etag: str = ""
    _index: Mapping[str, str] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def create(cls, data: Dict[str, str], etag: str) -> "Snapshot":
        frozen = dict(data)
        index = {key.lower(): value for key, value in frozen.items()}
        return cls(MappingProxyType(frozen), etag, MappingProxyType(index))

    def lookup(self, key: str) -> Tuple[bool, Optional[str]]:
        lowered = key.lower()
        if lowered in self._index:
            return True, self._index[lowered]
        return False, None


class ConfigurationProvider:
    """Loads a single object from a remote store and keeps it fresh.

    The initial ``load`` may fail the caller unless the source is optional.
    Reloads, whether triggered by the ``ReloadTrigger`` or called directly,
    never raise: failures are logged, recorded in ``last_error`` and the
    last good data stays in place.

    Example:
        provider = ConfigurationProvider(source, store, JsonObjectParser())
        with on_change(provider.get_reload_token, refresh_settings):
            provider.load()
    """

    def __init__(
        self,
        source: Any,
        store: RemoteStore,
        parser: Optional[ObjectParser] = None,
        trigger: Optional[ReloadTrigger] = None,
    ):
        """Initialize the provider.

        Args:
            source: Descriptor with ``container_name``, ``object_key`` and
                ``optional`` attributes
            store: Remote store client; owned by the provider from here on
            parser: Parser for the object body. Defaults to ``source.parser``
            trigger: Optional trigger that drives periodic reloads

        Raises:
            ConfigurationError: If the descriptor is incomplete
        """
        if source is None:
            raise ConfigurationError("A configuration source is required")
        if getattr(source, "container_name", None) is None:
            raise ConfigurationError("Configuration source container_name cannot be None")
        if getattr(source, "object_key", None) is None:
            raise ConfigurationError("Configuration source object_key cannot be None")

        parser = parser if parser is not None else getattr(source, "parser", None)
        if parser is None:
            raise ConfigurationError(
                f"No parser configured for {source.container_name}/{source.object_key}"
            )

        self.source = source
        self.container = source.container_name
        self.key = source.object_key
        self.optional = bool(getattr(source, "optional", False))
        self._store = store
        self._parser = parser
        self._trigger = trigger

        self._snapshot = Snapshot()
        self._state = ProviderState.UNINITIALIZED
        self._loaded = False
        self._reload_token = ChangeToken()
        self._lock = threading.RLock()

        self._busy_lock = threading.Lock()
        self._busy_count = 0
        self._idle = threading.Condition(self._busy_lock)
        self._local = threading.local()

        self.last_error: Optional[BaseException] = None
        self.last_reload_at: Optional[datetime] = None

        if self._trigger is not None:
            self._trigger.on_triggered(self._on_triggered)

    @property
    def name(self) -> str:
        return f"{self.container}/{self.key}"

    @property
    def state(self) -> ProviderState:
        return self._state

    @property
    def data(self) -> Mapping[str, str]:
        """Read-only view of the currently loaded data."""
        return self._snapshot.data

    @property
    def etag(self) -> str:
        """Etag of the currently loaded data, empty before the first load."""
        return self._snapshot.etag

    @property
    def trigger(self) -> Optional[ReloadTrigger]:
        return self._trigger

    @property
    def is_reloading(self) -> bool:
        return self._busy_count > 0

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get a value by key, ignoring case."""
        found, value = self._snapshot.lookup(key)
        return value if found else default

    def try_get(self, key: str) -> Tuple[bool, Optional[str]]:
        """Look up a key, ignoring case.

        Returns:
            ``(True, value)`` if present, ``(False, None)`` otherwise
        """
        return self._snapshot.lookup(key)

    def keys(self) -> List[str]:
        return list(self._snapshot.data.keys())

    def __getitem__(self, key: str) -> str:
        found, value = self._snapshot.lookup(key)
        if not found:
            raise KeyError(key)
        return value

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self._snapshot.lookup(key)[0]

    def get_reload_token(self) -> ChangeToken:
        """Token that fires the next time the data changes.

        Callbacks run on the thread that performed the reload.
        """
        return self._reload_token

    def load(self) -> None:
        """Download, parse and publish the object unconditionally.

        Starts the reload trigger once the load settles.

        Raises:
            RemoteStoreError: If the fetch fails and the source is mandatory
            ParseError: If the payload is malformed and the source is mandatory
        """
        with self._lock, self._busy():
            previous_state = self._state
            self._state = ProviderState.LOADING
            try:
                stored = self._store.get(self.container, self.key)
                if stored is None:
                    raise RemoteStoreError(
                        self.container, self.key, "store returned no content"
                    )
                data = self._parse(stored.content)
            except Exception as e:
                self.last_error = e
                if not self.optional:
                    self._state = previous_state
                    logger.error(f"Failed to load configuration {self.name}: {e}")
                    raise
                logger.warning(f"Optional configuration {self.name} not loaded: {e}")
                if not self._loaded:
                    self._state = ProviderState.FAILED_OPTIONAL
                else:
                    self._state = previous_state
            else:
                self._publish(data, stored.etag)
                logger.info(f"Loaded configuration {self.name} ({len(data)} keys, etag {stored.etag})")

        self._start_trigger()

    def reload(self) -> bool:
        """Fetch the object again if its etag changed.

        Never raises; errors are logged and kept in ``last_error``.

        Returns:
            True if new data was published, False otherwise
        """
        with self._lock, self._busy():
            previous_state = self._state
            self._state = ProviderState.RELOADING
            try:
                return self._revalidate()
            except Exception as e:
                self.last_error = e
                logger.exception(f"Reload of {self.name} failed, keeping previous configuration")
                return False
            finally:
                self._state = ProviderState.LOADED if self._loaded else previous_state

    def wait_for_reload_to_complete(self, timeout: Optional[Interval] = None) -> bool:
        """Block while a reload of this provider is in progress.

        Intended for serverless handlers, where the process may be frozen as
        soon as the handler returns. A reload running on the calling thread,
        e.g. from a change callback, is not waited for.

        Returns:
            True if no reload is running, False if the timeout elapsed first
        """
        if timeout is None:
            deadline = None
        else:
            deadline = time.monotonic() + to_seconds(timeout)

        def remaining() -> Optional[float]:
            if deadline is None:
                return None
            return max(0.0, deadline - time.monotonic())

        if self._trigger is not None and not self._trigger.block_until_idle(remaining()):
            return False
        own = getattr(self._local, "depth", 0)
        with self._idle:
            return self._idle.wait_for(lambda: self._busy_count <= own, remaining())

    def close(self) -> None:
        """Stop periodic reloads and release the store client."""
        if self._trigger is not None:
            self._trigger.stop()
            self._trigger.remove_handler(self._on_triggered)
        self._store.close()

    def _revalidate(self) -> bool:
        etag = self._snapshot.etag
        if self._loaded:
            metadata = self._store.head(self.container, self.key)
            if metadata is not None and metadata.etag == etag:
                logger.debug(f"Configuration {self.name} unchanged (etag {etag})")
                return False

        try:
            stored = self._store.get(
                self.container, self.key, etag_to_not_match=etag if self._loaded else None
            )
        except NotModifiedError:
            logger.debug(f"Configuration {self.name} not modified (etag {etag})")
            return False

        if stored is None or (self._loaded and stored.etag == etag):
            logger.debug(f"Configuration {self.name} unchanged (etag {etag})")
            return False

        data = self._parse(stored.content)
        self._publish(data, stored.etag)
        logger.info(f"Reloaded configuration {self.name} ({len(data)} keys, etag {stored.etag})")
        return True

    def _parse(self, content: bytes) -> Dict[str, str]:
        try:
            return dict(self._parser.parse(content))
        except ParseError:
            raise
        except Exception as e:
            raise ParseError(f"{self._parser!r} failed to parse {self.name}: {e}", e) from e

    def _publish(self, data: Dict[str, str], etag: str) -> None:
        self._snapshot = Snapshot.create(data, etag)
        self._loaded = True
        self._state = ProviderState.LOADED
        self.last_error = None
        self.last_reload_at = datetime.now(timezone.utc)

        previous, self._reload_token = self._reload_token, ChangeToken()
        previous.fire()

    def _start_trigger(self) -> None:
        trigger = self._trigger
        if trigger is None or trigger.is_running:
            return
        if trigger.interval is None:
            reload_after = getattr(self.source, "reload_after", None)
            if reload_after is None:
                return
            trigger.start(reload_after)
        else:
            trigger.start()

    def _on_triggered(self) -> None:
        self.reload()

    @contextmanager
    def _busy(self) -> Iterator[None]:
        with self._busy_lock:
            self._busy_count += 1
            self._local.depth = getattr(self._local, "depth", 0) + 1
        try:
            yield
        finally:
            with self._busy_lock:
                self._busy_count -= 1
                self._local.depth -= 1
                self._idle.notify_all()

    def __enter__(self) -> "ConfigurationProvider":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"ConfigurationProvider({self.name!r}, state={self._state.value})"
