# (c) Nelen & Schuurmans

import io
import os

import boto3
import pytest
from botocore.exceptions import ClientError


@pytest.fixture(scope="session")
def s3_url():
    return os.environ.get("S3_URL", "http://localhost:9000")


@pytest.fixture(scope="session")
def s3_settings(s3_url):
    minio_settings = {
        "url": s3_url,
        "access_key": "bucketbootstrap",
        "secret_key": "bucketbootstrap",
        "bucket": "bucketbootstrap-test",
        "region": None,
        "addressing_style": "path",
    }
    if not minio_settings["bucket"].endswith("-test"):  # type: ignore
        pytest.exit("Not running against a test minio bucket?! 😱")
    return minio_settings.copy()


@pytest.fixture(scope="session")
def s3_resource(s3_settings):
    return boto3.resource(
        "s3",
        endpoint_url=s3_settings["url"],
        aws_access_key_id=s3_settings["access_key"],
        aws_secret_access_key=s3_settings["secret_key"],
    )


def _remove_bucket(bucket):
    try:
        bucket.objects.all().delete()
        bucket.delete()
    except ClientError as e:
        if e.response["Error"]["Code"] != "NoSuchBucket":
            raise


@pytest.fixture
def no_bucket(s3_resource, s3_settings):
    bucket = s3_resource.Bucket(s3_settings["bucket"])
    _remove_bucket(bucket)
    yield bucket
    _remove_bucket(bucket)


@pytest.fixture
def s3_bucket(no_bucket):
    no_bucket.create()
    return no_bucket


@pytest.fixture
def object_in_s3(s3_bucket):
    s3_bucket.upload_fileobj(io.BytesIO(b"foo"), "object-in-s3")
    return "object-in-s3"
