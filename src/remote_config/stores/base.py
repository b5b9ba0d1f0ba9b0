"""Remote store client contract."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class ObjectMetadata:
    """Metadata returned by a cheap existence check."""

    etag: str
    content_length: Optional[int] = None
    last_modified: Optional[datetime] = None


@dataclass(frozen=True)
class StoredObject:
    """An object body together with its cache validator."""

    content: bytes = field(repr=False)
    etag: str
    last_modified: Optional[datetime] = None


class RemoteStore(ABC):
    """Client for a container/key addressed object store."""

    @abstractmethod
    def get(
        self,
        container: str,
        key: str,
        etag_to_not_match: Optional[str] = None,
    ) -> Optional[StoredObject]:
        """Fetch an object.

        Args:
            container: Container (bucket) name
            key: Object key
            etag_to_not_match: Return nothing if the object still has this etag

        Returns:
            The object, or None if the store signals "unchanged" by an
            empty response

        Raises:
            NotModifiedError: If the store signals "unchanged" by an error
            NotFoundError: If the object does not exist
            AuthError: If access is denied
            TransientTransportError: On network failures
        """
        pass

    def head(self, container: str, key: str) -> Optional[ObjectMetadata]:
        """Fetch object metadata without the body.

        Returns None when the transport has no cheap metadata check, in which
        case callers fall back to a conditional ``get``.
        """
        return None

    def close(self) -> None:
        """Release transport resources."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
