# (c) Nelen & Schuurmans

import logging
from typing import TYPE_CHECKING

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError

from bucket_bootstrap.base.domain import CredentialError
from bucket_bootstrap.base.domain import ctx
from bucket_bootstrap.base.domain import SyncProvider

from .s3_bucket_options import S3BucketOptions

if TYPE_CHECKING:
    from mypy_boto3_s3.client import S3Client

__all__ = ["S3BucketOptions", "SyncS3BucketProvider"]

logger = logging.getLogger(__name__)


class SyncS3BucketProvider(SyncProvider):
    """Resolves credentials and holds the boto3 client for one bucket.

    Credentials come from the options when given, otherwise from the standard
    boto3 chain (environment variables, shared config/credentials files,
    container or instance metadata).

    The socket timeouts of the client are capped by the deadline in ctx, so
    connect() should be called after the deadline is set.
    """

    def __init__(self, options: S3BucketOptions):
        self.options = options
        self._client = None
        self._region: str | None = None

    @property
    def bucket(self) -> str:
        return self.options.bucket

    @property
    def region(self) -> str | None:
        return self._region

    @property
    def client(self) -> "S3Client":
        assert (
            self._client is not None
        ), "S3BucketProvider not connected, call connect() first"
        return self._client

    def connect(self) -> None:
        ctx.check()
        try:
            session = boto3.Session(
                aws_access_key_id=self.options.access_key,
                aws_secret_access_key=self.options.secret_key,
                region_name=self.options.region,
                profile_name=self.options.profile,
            )
            credentials = session.get_credentials()
        except BotoCoreError as e:
            # e.g. ProfileNotFound
            raise CredentialError(str(e))
        if credentials is None:
            raise CredentialError()
        self._region = session.region_name or self.options.default_region
        logger.debug(
            "Resolved credentials (method=%s, region=%s)",
            credentials.method,
            self._region,
        )
        self._client = session.client(
            "s3",
            endpoint_url=self.options.url,
            region_name=self._region,
            config=Config(
                s3={"addressing_style": self.options.addressing_style},
                signature_version="s3v4",  # for minio
                # socket timeouts never outlast the run deadline
                connect_timeout=ctx.cap(self.options.connect_timeout),
                read_timeout=ctx.cap(self.options.read_timeout),
                retries={"total_max_attempts": 1},  # no retries
            ),
        )

    def disconnect(self) -> None:
        if self._client:
            self._client.close()
            self._client = None
