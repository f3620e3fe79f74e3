import io
from unittest.mock import Mock

import inject
import pytest
from botocore.exceptions import ClientError
from botocore.exceptions import EndpointConnectionError
from botocore.exceptions import NoCredentialsError
from botocore.exceptions import ParamValidationError

from bucket_bootstrap import BadRequest
from bucket_bootstrap import CredentialError
from bucket_bootstrap import ctx
from bucket_bootstrap import DoesNotExist
from bucket_bootstrap import ObjectSummary
from bucket_bootstrap import ProviderError
from bucket_bootstrap import Timeout
from bucket_bootstrap.s3 import SyncS3BucketProvider
from bucket_bootstrap.s3 import SyncS3Gateway


def client_error(code: str, operation: str = "Operation") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": "Some message"}}, operation)


class ChunkedBody(io.BytesIO):
    """A stream that never returns more than chunk_size bytes per read."""

    def __init__(self, data: bytes, chunk_size: int):
        super().__init__(data)
        self.chunk_size = chunk_size

    def read(self, size=-1):
        if size is None or size < 0:
            size = self.chunk_size
        return super().read(min(size, self.chunk_size))


@pytest.fixture
def provider() -> SyncS3BucketProvider:
    return Mock(SyncS3BucketProvider, bucket="test-bucket", region=None)


@pytest.fixture
def gateway(provider: Mock) -> SyncS3Gateway:
    return SyncS3Gateway(provider)


def test_provider_from_inject(provider: Mock):
    inject.clear_and_configure(
        lambda binder: binder.bind(SyncS3BucketProvider, provider)
    )
    try:
        assert SyncS3Gateway().provider is provider
    finally:
        inject.clear()


def test_list_objects(gateway: SyncS3Gateway, provider: Mock):
    provider.client.list_objects_v2.return_value = {
        "Contents": [{"Key": "a", "Size": 10}, {"Key": "b", "Size": 20}]
    }

    actual = gateway.list_objects()

    assert actual == [ObjectSummary(key="a", size=10), ObjectSummary(key="b", size=20)]
    provider.client.list_objects_v2.assert_called_once_with(Bucket="test-bucket")


def test_list_objects_empty(gateway: SyncS3Gateway, provider: Mock):
    provider.client.list_objects_v2.return_value = {"KeyCount": 0}

    assert gateway.list_objects() == []


def test_list_objects_no_such_bucket(gateway: SyncS3Gateway, provider: Mock):
    provider.client.list_objects_v2.side_effect = client_error("NoSuchBucket")

    with pytest.raises(DoesNotExist) as e:
        gateway.list_objects()

    assert e.value.name == "bucket"
    assert e.value.id == "test-bucket"


def test_list_objects_access_denied(gateway: SyncS3Gateway, provider: Mock):
    provider.client.list_objects_v2.side_effect = client_error("AccessDenied")

    with pytest.raises(ProviderError) as e:
        gateway.list_objects()

    assert e.value.code == "AccessDenied"


def test_list_objects_no_credentials(gateway: SyncS3Gateway, provider: Mock):
    provider.client.list_objects_v2.side_effect = NoCredentialsError()

    with pytest.raises(CredentialError):
        gateway.list_objects()


def test_list_objects_connection_error(gateway: SyncS3Gateway, provider: Mock):
    provider.client.list_objects_v2.side_effect = EndpointConnectionError(
        endpoint_url="http://localhost:1"
    )

    with pytest.raises(ProviderError):
        gateway.list_objects()


def test_deadline_exceeded_no_call(gateway: SyncS3Gateway, provider: Mock):
    ctx.set_timeout(0.0)
    try:
        with pytest.raises(Timeout):
            gateway.list_objects()
    finally:
        ctx.set_timeout(None)

    assert not provider.client.list_objects_v2.called


def test_create_bucket(gateway: SyncS3Gateway, provider: Mock):
    gateway.create_bucket()

    provider.client.create_bucket.assert_called_once_with(Bucket="test-bucket")


@pytest.mark.parametrize("region", [None, "us-east-1"])
def test_create_bucket_no_location_constraint(
    gateway: SyncS3Gateway, provider: Mock, region
):
    provider.region = region

    gateway.create_bucket()

    provider.client.create_bucket.assert_called_once_with(Bucket="test-bucket")


def test_create_bucket_location_constraint(gateway: SyncS3Gateway, provider: Mock):
    provider.region = "eu-west-1"

    gateway.create_bucket()

    provider.client.create_bucket.assert_called_once_with(
        Bucket="test-bucket",
        CreateBucketConfiguration={"LocationConstraint": "eu-west-1"},
    )


def test_create_bucket_err(gateway: SyncS3Gateway, provider: Mock):
    provider.client.create_bucket.side_effect = client_error("BucketAlreadyExists")

    with pytest.raises(ProviderError) as e:
        gateway.create_bucket()

    assert e.value.operation == "create_bucket"


def test_bucket_exists(gateway: SyncS3Gateway, provider: Mock):
    assert gateway.bucket_exists() is True

    provider.client.head_bucket.assert_called_once_with(Bucket="test-bucket")


@pytest.mark.parametrize("code", ["404", "NoSuchBucket", "NotFound"])
def test_bucket_exists_not_found(gateway: SyncS3Gateway, provider: Mock, code):
    provider.client.head_bucket.side_effect = client_error(code)

    assert gateway.bucket_exists() is False


def test_bucket_exists_forbidden(gateway: SyncS3Gateway, provider: Mock):
    provider.client.head_bucket.side_effect = client_error("403")

    with pytest.raises(ProviderError):
        gateway.bucket_exists()


def test_read_object(gateway: SyncS3Gateway, provider: Mock):
    provider.client.get_object.return_value = {"Body": io.BytesIO(b"foo")}

    assert gateway.read_object("object-in-s3") == b"foo"

    provider.client.get_object.assert_called_once_with(
        Bucket="test-bucket", Key="object-in-s3"
    )


def test_read_object_bounded(gateway: SyncS3Gateway, provider: Mock):
    provider.client.get_object.return_value = {"Body": io.BytesIO(b"x" * 2000)}

    assert gateway.read_object("big", max_bytes=1024) == b"x" * 1024


def test_read_object_short_reads(gateway: SyncS3Gateway, provider: Mock):
    body = ChunkedBody(b"0123456789" * 30, chunk_size=7)
    provider.client.get_object.return_value = {"Body": body}

    assert gateway.read_object("obj", max_bytes=100) == (b"0123456789" * 10)
    assert body.closed


def test_read_object_drain(gateway: SyncS3Gateway, provider: Mock):
    body = ChunkedBody(b"a" * 5000, chunk_size=1000)
    provider.client.get_object.return_value = {"Body": body}

    assert gateway.read_object("obj", max_bytes=None) == b"a" * 5000


@pytest.mark.parametrize("code", ["NoSuchKey", "404"])
def test_read_object_does_not_exist(gateway: SyncS3Gateway, provider: Mock, code):
    provider.client.get_object.side_effect = client_error(code, "GetObject")

    with pytest.raises(DoesNotExist) as e:
        gateway.read_object("")

    assert e.value.name == "object"
    provider.client.get_object.assert_called_once()


def test_read_object_invalid_key(gateway: SyncS3Gateway, provider: Mock):
    provider.client.get_object.side_effect = ParamValidationError(
        report="Invalid length for parameter Key, value: 0, valid min length: 1"
    )

    with pytest.raises(BadRequest):
        gateway.read_object("")


def test_delete_bucket(gateway: SyncS3Gateway, provider: Mock):
    gateway.delete_bucket()

    provider.client.delete_bucket.assert_called_once_with(Bucket="test-bucket")


def test_delete_bucket_does_not_exist(gateway: SyncS3Gateway, provider: Mock):
    provider.client.delete_bucket.side_effect = client_error("NoSuchBucket")

    with pytest.raises(DoesNotExist):
        gateway.delete_bucket()


def test_delete_bucket_not_empty(gateway: SyncS3Gateway, provider: Mock):
    provider.client.delete_bucket.side_effect = client_error("BucketNotEmpty")

    with pytest.raises(ProviderError):
        gateway.delete_bucket()
