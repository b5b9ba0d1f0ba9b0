"""Amazon S3 remote store."""

from typing import Any, Optional, Union

import boto3
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionClosedError,
    ConnectTimeoutError,
    EndpointConnectionError,
    NoCredentialsError,
    ReadTimeoutError,
)
from loguru import logger

from ..errors import (
    AuthError,
    NotFoundError,
    NotModifiedError,
    RemoteStoreError,
    TransientTransportError,
)
from .base import ObjectMetadata, RemoteStore, StoredObject

NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NoSuchBucket", "NotFound"})
NOT_MODIFIED_CODES = frozenset({"304", "NotModified"})
AUTH_CODES = frozenset(
    {
        "403",
        "AccessDenied",
        "Forbidden",
        "InvalidAccessKeyId",
        "SignatureDoesNotMatch",
        "ExpiredToken",
        "InvalidToken",
    }
)
TRANSIENT_CODES = frozenset(
    {"500", "503", "InternalError", "ServiceUnavailable", "SlowDown", "RequestTimeout"}
)
TRANSPORT_ERRORS = (
    EndpointConnectionError,
    ConnectTimeoutError,
    ReadTimeoutError,
    ConnectionClosedError,
)


class S3Store(RemoteStore):
    """Remote store backed by an S3 client.

    ``head`` issues HeadObject so revalidation never downloads the body;
    ``get`` issues GetObject with ``IfNoneMatch`` when an etag is supplied.
    """

    def __init__(self, client: Any = None, **client_kwargs: Any):
        """Initialize the store.

        Args:
            client: Pre-built boto3 S3 client. Created with
                ``boto3.client("s3", **client_kwargs)`` if omitted.
            **client_kwargs: Passed to ``boto3.client`` (region_name,
                endpoint_url, ...)
        """
        self._client = client if client is not None else boto3.client("s3", **client_kwargs)

    @property
    def client(self) -> Any:
        return self._client

    def head(self, container: str, key: str) -> Optional[ObjectMetadata]:
        try:
            response = self._client.head_object(Bucket=container, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise self._translate(e, container, key) from e

        return ObjectMetadata(
            etag=response.get("ETag", ""),
            content_length=response.get("ContentLength"),
            last_modified=response.get("LastModified"),
        )

    def get(
        self,
        container: str,
        key: str,
        etag_to_not_match: Optional[str] = None,
    ) -> Optional[StoredObject]:
        params = {"Bucket": container, "Key": key}
        if etag_to_not_match:
            params["IfNoneMatch"] = etag_to_not_match

        try:
            response = self._client.get_object(**params)
            body = response["Body"]
            try:
                content = body.read()
            finally:
                body.close()
        except (ClientError, BotoCoreError) as e:
            raise self._translate(e, container, key, etag_to_not_match) from e

        logger.debug(f"Downloaded s3://{container}/{key} ({len(content)} bytes)")
        return StoredObject(
            content=content,
            etag=response.get("ETag", ""),
            last_modified=response.get("LastModified"),
        )

    def _translate(
        self,
        error: Union[ClientError, BotoCoreError],
        container: str,
        key: str,
        etag: Optional[str] = None,
    ) -> RemoteStoreError:
        """Map a boto3/botocore exception onto the store error taxonomy."""
        if isinstance(error, ClientError):
            code = str(error.response.get("Error", {}).get("Code", ""))
            status = str(error.response.get("ResponseMetadata", {}).get("HTTPStatusCode", ""))
            message = error.response.get("Error", {}).get("Message", "") or code

            if code in NOT_MODIFIED_CODES or status == "304":
                return NotModifiedError(container, key, etag or "")
            if code in NOT_FOUND_CODES or status == "404":
                return NotFoundError(container, key, message, error)
            if code in AUTH_CODES or status == "403":
                return AuthError(container, key, message, error)
            if code in TRANSIENT_CODES or status.startswith("5"):
                return TransientTransportError(container, key, message, error)
            return RemoteStoreError(container, key, message, error)

        if isinstance(error, NoCredentialsError):
            return AuthError(container, key, str(error), error)
        if isinstance(error, TRANSPORT_ERRORS):
            return TransientTransportError(container, key, str(error), error)
        return RemoteStoreError(container, key, str(error), error)

    def close(self) -> None:
        close = getattr(self._client, "close", None)
        if close is not None:
            close()

    def __repr__(self) -> str:
        return f"S3Store(region={self._client.meta.region_name!r})"
