"""In-process remote store."""

import hashlib
import threading
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple, Union

from ..errors import NotFoundError, NotModifiedError
from .base import ObjectMetadata, RemoteStore, StoredObject


class InMemoryStore(RemoteStore):
    """Thread-safe dictionary-backed store.

    Etags are quoted MD5 digests of the content, the way S3 reports them
    for single-part uploads. Useful for local development and tests.
    """

    def __init__(self, supports_head: bool = True):
        self.supports_head = supports_head
        self._objects: Dict[Tuple[str, str], StoredObject] = {}
        self._lock = threading.Lock()

    def put(
        self,
        container: str,
        key: str,
        content: Union[bytes, str],
        etag: Optional[str] = None,
    ) -> str:
        """Store an object and return its etag.

        The etag defaults to the quoted MD5 of the content.
        """
        if isinstance(content, str):
            content = content.encode("utf-8")
        if etag is None:
            etag = f'"{hashlib.md5(content).hexdigest()}"'
        stored = StoredObject(
            content=content,
            etag=etag,
            last_modified=datetime.now(timezone.utc),
        )
        with self._lock:
            self._objects[(container, key)] = stored
        return etag

    def delete(self, container: str, key: str) -> bool:
        with self._lock:
            return self._objects.pop((container, key), None) is not None

    def _lookup(self, container: str, key: str) -> StoredObject:
        with self._lock:
            stored = self._objects.get((container, key))
        if stored is None:
            raise NotFoundError(container, key, "no such key")
        return stored

    def get(
        self,
        container: str,
        key: str,
        etag_to_not_match: Optional[str] = None,
    ) -> Optional[StoredObject]:
        stored = self._lookup(container, key)
        if etag_to_not_match and stored.etag == etag_to_not_match:
            raise NotModifiedError(container, key, stored.etag)
        return stored

    def head(self, container: str, key: str) -> Optional[ObjectMetadata]:
        if not self.supports_head:
            return None
        stored = self._lookup(container, key)
        return ObjectMetadata(
            etag=stored.etag,
            content_length=len(stored.content),
            last_modified=stored.last_modified,
        )

    def __repr__(self) -> str:
        return f"InMemoryStore(objects={len(self._objects)})"
