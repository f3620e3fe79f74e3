from typing import Literal

from bucket_bootstrap.base.domain import ValueObject

__all__ = ["S3BucketOptions"]


class S3BucketOptions(ValueObject):
    bucket: str
    url: str | None = None  # None means: AWS or AWS_ENDPOINT_URL(_S3)
    region: str | None = None
    default_region: str | None = None  # used if the ambient chain has none
    access_key: str | None = None  # None means: ambient credential chain
    secret_key: str | None = None
    profile: str | None = None
    addressing_style: Literal[
        "auto", "virtual", "path"
    ] = "auto"  # minio needs "path" when no DNS is set up
    connect_timeout: float = 10.0
    read_timeout: float = 60.0
