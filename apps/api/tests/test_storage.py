"""Tests for the MinIO-backed attachment storage."""

from unittest.mock import MagicMock, patch

import pytest
from minio.error import S3Error

from sightings_api.errors import NotFoundError, StorageError
from sightings_api.storage.service import ATTACHMENT_PREFIX, StorageService


def _s3_error(code: str) -> S3Error:
    return S3Error(
        code=code,
        message=code,
        resource="/sighting-images/key",
        request_id="req",
        host_id="host",
        response=MagicMock(),
    )


@pytest.fixture
def minio_client():
    return MagicMock()


@pytest.fixture
def service(minio_client) -> StorageService:
    return StorageService(client=minio_client, bucket="sighting-images")


def test_build_object_key():
    assert StorageService.build_object_key("abc", 0) == "img:abc:0"
    assert StorageService.build_object_key("abc", 0).startswith(ATTACHMENT_PREFIX)


def test_put_object(service, minio_client):
    assert service.put_object("img:abc:0", b"png", "image/png") == "img:abc:0"
    args, kwargs = minio_client.put_object.call_args
    assert args[0] == "sighting-images"
    assert args[1] == "img:abc:0"
    assert args[2].read() == b"png"
    assert kwargs == {"length": 3, "content_type": "image/png"}


def test_put_object_failure(service, minio_client):
    minio_client.put_object.side_effect = _s3_error("InternalError")
    with pytest.raises(StorageError):
        service.put_object("img:abc:0", b"png", "image/png")


def test_get_object_returns_bytes_and_type(service, minio_client):
    response = MagicMock()
    response.read.return_value = b"png"
    response.headers = {"Content-Type": "image/png"}
    minio_client.get_object.return_value = response

    stored = service.get_object("img:abc:0")

    assert stored.data == b"png"
    assert stored.content_type == "image/png"
    response.close.assert_called_once()
    response.release_conn.assert_called_once()


def test_get_object_defaults_content_type(service, minio_client):
    response = MagicMock()
    response.read.return_value = b"raw"
    response.headers = {}
    minio_client.get_object.return_value = response

    assert service.get_object("img:abc:0").content_type == "application/octet-stream"


def test_get_missing_object(service, minio_client):
    minio_client.get_object.side_effect = _s3_error("NoSuchKey")
    with pytest.raises(NotFoundError):
        service.get_object("img:abc:0")


def test_get_object_failure(service, minio_client):
    minio_client.get_object.side_effect = _s3_error("AccessDenied")
    with pytest.raises(StorageError):
        service.get_object("img:abc:0")


def test_delete_object(service, minio_client):
    service.delete_object("img:abc:0")
    minio_client.remove_object.assert_called_once_with("sighting-images", "img:abc:0")


def test_delete_missing_object_is_noop(service, minio_client):
    minio_client.remove_object.side_effect = _s3_error("NoSuchKey")
    service.delete_object("img:abc:0")


def test_delete_object_failure(service, minio_client):
    minio_client.remove_object.side_effect = _s3_error("AccessDenied")
    with pytest.raises(StorageError):
        service.delete_object("img:abc:0")


def test_bucket_available(service, minio_client):
    minio_client.bucket_exists.return_value = True
    assert service.bucket_available() is True
    minio_client.bucket_exists.assert_called_with("sighting-images")

    minio_client.bucket_exists.return_value = False
    assert service.bucket_available() is False


def test_lifecycle_rule_failure_keeps_client():
    """A bucket we may use but not configure still serves attachments."""
    with patch("sightings_api.storage.service.Minio") as minio_cls:
        client = minio_cls.return_value
        client.bucket_exists.return_value = True
        client.set_bucket_lifecycle.side_effect = _s3_error("AccessDenied")

        service = StorageService()

    assert service.client is client
    client.set_bucket_lifecycle.assert_called_once()
    assert service.put_object("img:x:0", b"png", "image/png") == "img:x:0"
    client.put_object.assert_called_once()


def test_client_construction_failure_disables_storage():
    with patch("sightings_api.storage.service.Minio", side_effect=ValueError("bad endpoint")):
        service = StorageService()

    assert service.client is None
    with pytest.raises(StorageError):
        service.put_object("img:x:0", b"png", "image/png")


def test_ensure_bucket_creates_bucket_and_expiry_rule(service, minio_client):
    minio_client.bucket_exists.return_value = False

    service._ensure_bucket(ttl_days=365)

    minio_client.make_bucket.assert_called_once_with("sighting-images")
    bucket, config = minio_client.set_bucket_lifecycle.call_args[0]
    assert bucket == "sighting-images"
    rule = config.rules[0]
    assert rule.expiration.days == 365
    assert rule.rule_filter.prefix == ATTACHMENT_PREFIX


def test_unavailable_client_raises_storage_error():
    service = StorageService(client=MagicMock(), bucket="b")
    service.client = None
    with pytest.raises(StorageError):
        service.put_object("k", b"x", "image/png")
    with pytest.raises(StorageError):
        service.bucket_available()
