# (c) Nelen & Schuurmans

import logging
import time

import backoff

from bucket_bootstrap.base.domain import ctx
from bucket_bootstrap.base.domain import DoesNotExist
from bucket_bootstrap.base.domain import ObjectSummary
from bucket_bootstrap.base.domain import Timeout
from bucket_bootstrap.s3 import SyncS3Gateway

DEFAULT_WAIT_TIMEOUT = 60.0  # in seconds
DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_SETTLE_DELAY = 10.0
DEFAULT_MAX_BYTES = 1024

__all__ = ["ManageBucket"]

logger = logging.getLogger(__name__)


class ManageBucket:
    """Make sure a bucket exists and read from it.

    The waiting behaviour after creating a bucket is configurable: the bucket
    is polled every ``poll_interval`` seconds for at most ``wait_timeout``
    seconds. When it exists, there is an additional (fixed) ``settle_delay``
    for providers that report a new bucket before it is usable everywhere.
    """

    def __init__(
        self,
        gateway: SyncS3Gateway | None = None,
        wait_timeout: float = DEFAULT_WAIT_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        settle_delay: float = DEFAULT_SETTLE_DELAY,
    ):
        self.gateway = gateway or SyncS3Gateway()
        self.wait_timeout = wait_timeout
        self.poll_interval = poll_interval
        self.settle_delay = settle_delay

    @property
    def bucket(self) -> str:
        return self.gateway.bucket

    def ensure(self) -> list[ObjectSummary]:
        """List the (first page of) objects, creating the bucket if needed."""
        try:
            objects = self.gateway.list_objects()
        except DoesNotExist:
            logger.info("Bucket '%s' does not exist, creating it...", self.bucket)
            self.create()
            return []
        logger.info("Bucket '%s' already exists", self.bucket)
        for obj in objects:
            print(f"key={obj.key} size={obj.size}")
        return objects

    def create(self) -> None:
        self.gateway.create_bucket()
        logger.info("Waiting for bucket '%s' to be created...", self.bucket)
        self.wait_until_exists()
        if self.settle_delay > 0:
            logger.debug("Sleeping %s seconds after creation", self.settle_delay)
            time.sleep(ctx.cap(self.settle_delay))
            ctx.check()
        logger.info("Bucket '%s' created", self.bucket)

    def wait_until_exists(self) -> None:
        max_time = ctx.cap(self.wait_timeout)

        @backoff.on_predicate(
            backoff.constant,
            interval=self.poll_interval,
            jitter=None,
            max_time=max_time,
            logger=logger,
            giveup_log_level=logging.DEBUG,  # main() reports the Timeout
        )
        def bucket_exists() -> bool:
            return self.gateway.bucket_exists()

        if not bucket_exists():
            ctx.check()
            raise Timeout(f"bucket '{self.bucket}' did not appear", max_time)

    def fetch_object(
        self, key: str = "", max_bytes: int | None = DEFAULT_MAX_BYTES
    ) -> bytes:
        data = self.gateway.read_object(key, max_bytes=max_bytes)
        logger.debug("Read %d bytes from '%s'", len(data), key)
        return data

    def delete(self) -> None:
        self.gateway.delete_bucket()
        logger.info("Bucket '%s' deleted", self.bucket)
        print(f"Bucket deleted: {self.bucket}")
