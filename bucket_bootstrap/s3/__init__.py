from .s3_bucket_options import *  # NOQA
from .sync_s3_gateway import *  # NOQA
from .sync_s3_provider import *  # NOQA
