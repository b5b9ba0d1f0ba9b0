"""Exception hierarchy for remote configuration loading.

Exception Hierarchy:
    RemoteConfigError: Base exception for all remote configuration errors
    ├── ConfigurationError: Invalid or incomplete source descriptor
    ├── ParseError: Payload could not be turned into a flat mapping
    └── RemoteStoreError: Remote store request failures
        ├── NotFoundError: Container or object does not exist
        ├── AuthError: Credentials missing or access denied
        ├── TransientTransportError: Network failure or timeout
        └── NotModifiedError: Conditional fetch matched the given etag

Every store error carries the ``container`` and ``key`` it was raised for,
and the underlying transport exception as ``cause`` when there is one.
"""

from typing import Optional


class RemoteConfigError(Exception):
    """Base exception for all remote configuration errors."""

    pass


class ConfigurationError(RemoteConfigError):
    """Raised when a configuration source descriptor is invalid."""

    pass


class ParseError(RemoteConfigError):
    """Raised when an object's content cannot be parsed."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)


class RemoteStoreError(RemoteConfigError):
    """Raised when a request to the remote store fails."""

    def __init__(
        self,
        container: str,
        key: str,
        message: str = "",
        cause: Optional[BaseException] = None,
    ):
        self.container = container
        self.key = key
        self.cause = cause
        text = f"{container}/{key}"
        if message:
            text = f"{text}: {message}"
        super().__init__(text)


class NotFoundError(RemoteStoreError):
    """Raised when the requested object does not exist."""

    pass


class AuthError(RemoteStoreError):
    """Raised when the store rejects the caller's credentials."""

    pass


class TransientTransportError(RemoteStoreError):
    """Raised on network failures and timeouts."""

    pass


class NotModifiedError(RemoteStoreError):
    """Raised by a conditional fetch when the object still matches the etag."""

    def __init__(self, container: str, key: str, etag: str):
        self.etag = etag
        super().__init__(container, key, f"not modified since {etag}")
