"""Remote store implementations."""

from .base import ObjectMetadata, RemoteStore, StoredObject
from .memory import InMemoryStore
from .s3 import S3Store

__all__ = ["InMemoryStore", "ObjectMetadata", "RemoteStore", "S3Store", "StoredObject"]
