"""Make sure an S3 bucket exists and read an object from it.

The bucket name (and optionally the region) is read from an HCL file such as
a Terraform 'backend.hcl'. Credentials are resolved the usual AWS way.
"""
import argparse
import logging
import os
from pathlib import Path

import inject

from bucket_bootstrap.base.application.manage_bucket import DEFAULT_MAX_BYTES
from bucket_bootstrap.base.application.manage_bucket import DEFAULT_POLL_INTERVAL
from bucket_bootstrap.base.application.manage_bucket import DEFAULT_SETTLE_DELAY
from bucket_bootstrap.base.application.manage_bucket import DEFAULT_WAIT_TIMEOUT
from bucket_bootstrap.base.application.manage_bucket import ManageBucket
from bucket_bootstrap.base.domain import BadRequest
from bucket_bootstrap.base.domain import BucketConfig
from bucket_bootstrap.base.domain import ConfigError
from bucket_bootstrap.base.domain import CredentialError
from bucket_bootstrap.base.domain import ctx
from bucket_bootstrap.base.domain import DoesNotExist
from bucket_bootstrap.base.domain import ProviderError
from bucket_bootstrap.hcl import DEFAULT_CONFIG_PATH
from bucket_bootstrap.hcl import load_bucket_config
from bucket_bootstrap.s3 import S3BucketOptions
from bucket_bootstrap.s3 import SyncS3BucketProvider

logger = logging.getLogger(__name__)

EXPECTED_ERRORS = (
    BadRequest,
    ConfigError,
    CredentialError,
    DoesNotExist,
    ProviderError,
    TimeoutError,
)


def non_negative(type_):
    def convert(value: str):
        result = type_(value)
        if result < 0:
            raise argparse.ArgumentTypeError(f"must not be negative: {value}")
        return result

    convert.__name__ = type_.__name__
    return convert


def get_parser():
    """Return argument parser."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        dest="verbose",
        default=False,
        help="Verbose output",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help="HCL file with 'bucket' and 'region' (default: %(default)s)",
    )
    parser.add_argument(
        "-k",
        "--key",
        default="",
        help="Key of the object to fetch (default: the empty key)",
    )
    parser.add_argument(
        "--max-bytes",
        type=non_negative(int),
        default=DEFAULT_MAX_BYTES,
        help="Read at most this many bytes of the object, 0 for all "
        "(default: %(default)s)",
    )
    parser.add_argument("--region", help="Override the region")
    parser.add_argument(
        "--endpoint-url",
        default=os.environ.get("S3_ENDPOINT_URL"),
        help="Endpoint of an S3-compatible service (default: $S3_ENDPOINT_URL)",
    )
    parser.add_argument("--profile", help="Named AWS profile")
    parser.add_argument(
        "--addressing-style",
        choices=["auto", "virtual", "path"],
        default="auto",
    )
    parser.add_argument(
        "--wait-timeout",
        type=non_negative(float),
        default=DEFAULT_WAIT_TIMEOUT,
        help="Seconds to wait for a new bucket to exist (default: %(default)s)",
    )
    parser.add_argument(
        "--poll-interval",
        type=non_negative(float),
        default=DEFAULT_POLL_INTERVAL,
        help="Seconds between existence checks (default: %(default)s)",
    )
    parser.add_argument(
        "--settle-delay",
        type=non_negative(float),
        default=DEFAULT_SETTLE_DELAY,
        help="Seconds to sleep after a new bucket exists (default: %(default)s)",
    )
    parser.add_argument(
        "--timeout",
        type=non_negative(float),
        default=None,
        help="Abort the whole run after this many seconds",
    )
    parser.add_argument(
        "--delete",
        action="store_true",
        default=False,
        help="Delete the bucket instead of ensuring it and fetching",
    )
    return parser


def get_provider(
    options: argparse.Namespace, config: BucketConfig
) -> SyncS3BucketProvider:
    provider = SyncS3BucketProvider(
        S3BucketOptions(
            bucket=config.bucket,
            url=options.endpoint_url,
            region=options.region,
            default_region=config.region,
            profile=options.profile,
            addressing_style=options.addressing_style,
        )
    )
    provider.connect()
    return provider


def run(options: argparse.Namespace) -> None:
    config = load_bucket_config(options.config)
    provider = get_provider(options, config)
    inject.clear_and_configure(
        lambda binder: binder.bind(SyncS3BucketProvider, provider)
    )
    try:
        manage = ManageBucket(
            wait_timeout=options.wait_timeout,
            poll_interval=options.poll_interval,
            settle_delay=options.settle_delay,
        )
        if options.delete:
            manage.delete()
            return
        manage.ensure()
        data = manage.fetch_object(options.key, max_bytes=options.max_bytes or None)
        print(data.decode("utf-8", errors="replace"))
    finally:
        provider.disconnect()
        inject.clear()


def main(argv=None):
    """Call main command with args from parser.

    This method is called when you run 'bucket-bootstrap', this is configured
    in 'pyproject.toml'. Every error ends up here: the exit code is 1 for all
    of them.
    """
    options = get_parser().parse_args(argv)
    if options.verbose:
        log_level = logging.DEBUG
    else:
        log_level = logging.INFO
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")

    ctx.set_timeout(options.timeout)
    try:
        run(options)
    except EXPECTED_ERRORS as e:
        logger.error("%s", e)
        return 1
    except KeyboardInterrupt:
        logger.error("Interrupted")
        return 1
    except Exception:
        logger.exception("An exception has occurred.")
        return 1
    finally:
        ctx.set_timeout(None)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
