# (c) Nelen & Schuurmans

import logging

import inject
from botocore.exceptions import BotoCoreError
from botocore.exceptions import ClientError
from botocore.exceptions import NoCredentialsError
from botocore.exceptions import ParamValidationError

from bucket_bootstrap.base.domain import BadRequest
from bucket_bootstrap.base.domain import CredentialError
from bucket_bootstrap.base.domain import ctx
from bucket_bootstrap.base.domain import DoesNotExist
from bucket_bootstrap.base.domain import ObjectSummary
from bucket_bootstrap.base.domain import ProviderError

from .sync_s3_provider import SyncS3BucketProvider

READ_CHUNK_SIZE = 64 * 1024
NOT_FOUND_CODES = frozenset({"404", "NotFound", "NoSuchBucket", "NoSuchKey"})
DEFAULT_REGION = "us-east-1"  # the region that takes no LocationConstraint


__all__ = ["SyncS3Gateway"]

logger = logging.getLogger(__name__)


def _error_code(e: ClientError) -> str:
    return str(e.response.get("Error", {}).get("Code", ""))


def _translate(e: Exception, operation: str) -> Exception:
    if isinstance(e, ClientError):
        error = e.response.get("Error", {})
        return ProviderError(operation, _error_code(e), error.get("Message", str(e)))
    if isinstance(e, NoCredentialsError):
        return CredentialError(str(e))
    if isinstance(e, ParamValidationError):
        return BadRequest(str(e))
    return ProviderError(operation, None, str(e))


class SyncS3Gateway:
    """The interface to a single S3 bucket.

    Only the calls that manage the bucket itself are provided, plus reading
    one object. botocore errors are translated here so that callers only see
    exceptions from ``bucket_bootstrap.base.domain``:

    - 'NoSuchBucket', 'NoSuchKey' and '404' become DoesNotExist
    - missing credentials become CredentialError
    - everything else becomes ProviderError

    There is no pagination: list_objects() returns the first page only.
    """

    def __init__(self, provider_override: SyncS3BucketProvider | None = None):
        self.provider_override = provider_override

    @property
    def provider(self) -> SyncS3BucketProvider:
        return self.provider_override or inject.instance(SyncS3BucketProvider)

    @property
    def bucket(self) -> str:
        return self.provider.bucket

    def list_objects(self) -> list[ObjectSummary]:
        ctx.check()
        try:
            result = self.provider.client.list_objects_v2(Bucket=self.bucket)
        except ClientError as e:
            if _error_code(e) == "NoSuchBucket":
                raise DoesNotExist("bucket", self.bucket)
            raise _translate(e, "list_objects_v2")
        except BotoCoreError as e:
            raise _translate(e, "list_objects_v2")
        # Example item:
        #     {
        #         'Key': 'object-in-s3',
        #         'LastModified': datetime.datetime(..., tzinfo=utc),
        #         'ETag': '"acbd18db4cc2f85cedef654fccc4a4d8"',
        #         'Size': 3,
        #         'StorageClass': 'STANDARD',
        #     }
        return [
            ObjectSummary(key=x["Key"], size=x["Size"])
            for x in result.get("Contents", [])
        ]

    def create_bucket(self) -> None:
        ctx.check()
        kwargs = {"Bucket": self.bucket}
        region = self.provider.region
        if region and region != DEFAULT_REGION:
            kwargs["CreateBucketConfiguration"] = {"LocationConstraint": region}
        try:
            self.provider.client.create_bucket(**kwargs)
        except (ClientError, BotoCoreError) as e:
            raise _translate(e, "create_bucket")

    def bucket_exists(self) -> bool:
        ctx.check()
        try:
            self.provider.client.head_bucket(Bucket=self.bucket)
        except ClientError as e:
            if _error_code(e) in NOT_FOUND_CODES:
                return False
            raise _translate(e, "head_bucket")
        except BotoCoreError as e:
            raise _translate(e, "head_bucket")
        return True

    def read_object(self, key: str, max_bytes: int | None = None) -> bytes:
        """Read an object, or its first max_bytes bytes.

        The body is read in chunks until either max_bytes have been collected
        or the stream is exhausted. With max_bytes=None the whole object is
        read.
        """
        ctx.check()
        try:
            result = self.provider.client.get_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if _error_code(e) in NOT_FOUND_CODES:
                raise DoesNotExist("object", key)
            raise _translate(e, "get_object")
        except BotoCoreError as e:
            raise _translate(e, "get_object")
        body = result["Body"]
        chunks: list[bytes] = []
        n_read = 0
        try:
            while max_bytes is None or n_read < max_bytes:
                size = READ_CHUNK_SIZE
                if max_bytes is not None:
                    size = min(size, max_bytes - n_read)
                chunk = body.read(size)
                if not chunk:
                    break
                chunks.append(chunk)
                n_read += len(chunk)
        except BotoCoreError as e:
            raise _translate(e, "get_object")
        finally:
            body.close()
        return b"".join(chunks)

    def delete_bucket(self) -> None:
        ctx.check()
        try:
            self.provider.client.delete_bucket(Bucket=self.bucket)
        except ClientError as e:
            if _error_code(e) == "NoSuchBucket":
                raise DoesNotExist("bucket", self.bucket)
            raise _translate(e, "delete_bucket")
        except BotoCoreError as e:
            raise _translate(e, "delete_bucket")
