"""Tests for remote store implementations."""

import io
from unittest.mock import MagicMock

import boto3
import pytest
from botocore.exceptions import EndpointConnectionError, NoCredentialsError
from botocore.response import StreamingBody
from botocore.stub import Stubber

from remote_config.errors import (
    AuthError,
    NotFoundError,
    NotModifiedError,
    RemoteStoreError,
    TransientTransportError,
)
from remote_config.stores import InMemoryStore, S3Store

BUCKET = "cfg"
KEY = "app.json"


def streaming_body(data: bytes) -> StreamingBody:
    return StreamingBody(io.BytesIO(data), len(data))


@pytest.fixture
def s3_client():
    return boto3.client(
        "s3",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


class TestInMemoryStore:
    """Test the in-memory store."""

    def test_put_and_get(self, store):
        etag = store.put(BUCKET, KEY, '{"a": 1}')
        stored = store.get(BUCKET, KEY)

        assert stored.content == b'{"a": 1}'
        assert stored.etag == etag
        assert etag.startswith('"') and etag.endswith('"')

    def test_etag_follows_content(self, store):
        first = store.put(BUCKET, KEY, "one")
        same = store.put(BUCKET, KEY, "one")
        second = store.put(BUCKET, KEY, "two")

        assert first == same
        assert first != second

    def test_explicit_etag(self, store):
        assert store.put(BUCKET, KEY, "x", etag="1") == "1"
        assert store.head(BUCKET, KEY).etag == "1"

    def test_missing_object(self, store):
        with pytest.raises(NotFoundError) as exc_info:
            store.get(BUCKET, "missing.json")

        assert exc_info.value.container == BUCKET
        assert exc_info.value.key == "missing.json"

    def test_conditional_get(self, store):
        etag = store.put(BUCKET, KEY, "x")

        with pytest.raises(NotModifiedError):
            store.get(BUCKET, KEY, etag_to_not_match=etag)

        assert store.get(BUCKET, KEY, etag_to_not_match='"other"').content == b"x"

    def test_head(self, store):
        store.put(BUCKET, KEY, "abc")
        metadata = store.head(BUCKET, KEY)

        assert metadata.content_length == 3
        assert metadata.last_modified is not None

    def test_head_unsupported(self):
        store = InMemoryStore(supports_head=False)
        store.put(BUCKET, KEY, "abc")

        assert store.head(BUCKET, KEY) is None

    def test_delete(self, store):
        store.put(BUCKET, KEY, "abc")

        assert store.delete(BUCKET, KEY) is True
        assert store.delete(BUCKET, KEY) is False


class TestS3Store:
    """Test the S3 store against a stubbed client."""

    def test_get(self, s3_client):
        stubber = Stubber(s3_client)
        stubber.add_response(
            "get_object",
            {"Body": streaming_body(b'{"k1": "v1"}'), "ETag": '"1"'},
            {"Bucket": BUCKET, "Key": KEY},
        )

        with stubber:
            stored = S3Store(s3_client).get(BUCKET, KEY)

        assert stored.content == b'{"k1": "v1"}'
        assert stored.etag == '"1"'
        stubber.assert_no_pending_responses()

    def test_get_sends_if_none_match(self, s3_client):
        stubber = Stubber(s3_client)
        stubber.add_client_error(
            "get_object",
            service_error_code="304",
            http_status_code=304,
            expected_params={"Bucket": BUCKET, "Key": KEY, "IfNoneMatch": '"1"'},
        )

        with stubber:
            with pytest.raises(NotModifiedError) as exc_info:
                S3Store(s3_client).get(BUCKET, KEY, etag_to_not_match='"1"')

        assert exc_info.value.etag == '"1"'

    def test_head(self, s3_client):
        stubber = Stubber(s3_client)
        stubber.add_response(
            "head_object",
            {"ETag": '"2"', "ContentLength": 12},
            {"Bucket": BUCKET, "Key": KEY},
        )

        with stubber:
            metadata = S3Store(s3_client).head(BUCKET, KEY)

        assert metadata.etag == '"2"'
        assert metadata.content_length == 12

    @pytest.mark.parametrize(
        "code, status, error_type",
        [
            ("NoSuchKey", 404, NotFoundError),
            ("NoSuchBucket", 404, NotFoundError),
            ("AccessDenied", 403, AuthError),
            ("InvalidAccessKeyId", 403, AuthError),
            ("SlowDown", 503, TransientTransportError),
            ("InvalidObjectState", 400, RemoteStoreError),
        ],
    )
    def test_client_errors_are_translated(self, s3_client, code, status, error_type):
        stubber = Stubber(s3_client)
        stubber.add_client_error(
            "get_object",
            service_error_code=code,
            http_status_code=status,
            expected_params={"Bucket": BUCKET, "Key": KEY},
        )

        with stubber:
            with pytest.raises(error_type) as exc_info:
                S3Store(s3_client).get(BUCKET, KEY)

        assert exc_info.value.cause is not None
        assert exc_info.value.key == KEY

    def test_head_not_found(self, s3_client):
        stubber = Stubber(s3_client)
        stubber.add_client_error(
            "head_object",
            service_error_code="404",
            http_status_code=404,
            expected_params={"Bucket": BUCKET, "Key": KEY},
        )

        with stubber:
            with pytest.raises(NotFoundError):
                S3Store(s3_client).head(BUCKET, KEY)

    def test_connection_error(self):
        client = MagicMock()
        client.get_object.side_effect = EndpointConnectionError(endpoint_url="https://s3.local")

        with pytest.raises(TransientTransportError):
            S3Store(client).get(BUCKET, KEY)

    def test_missing_credentials(self):
        client = MagicMock()
        client.head_object.side_effect = NoCredentialsError()

        with pytest.raises(AuthError):
            S3Store(client).head(BUCKET, KEY)

    def test_body_is_closed(self):
        body = MagicMock()
        body.read.return_value = b"{}"
        client = MagicMock()
        client.get_object.return_value = {"Body": body, "ETag": '"1"'}

        S3Store(client).get(BUCKET, KEY)

        body.close.assert_called_once()

    def test_close(self):
        client = MagicMock()
        S3Store(client).close()

        client.close.assert_called_once()
