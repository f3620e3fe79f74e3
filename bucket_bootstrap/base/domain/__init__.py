from .bucket_config import *  # NOQA
from .context import *  # NOQA
from .exceptions import *  # NOQA
from .provider import *  # NOQA
from .types import *  # NOQA
from .value_object import *  # NOQA
