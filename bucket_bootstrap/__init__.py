# -*- coding: utf-8 -*-
# (c) Nelen & Schuurmans

from .base.application.manage_bucket import *  # NOQA
from .base.domain.bucket_config import *  # NOQA
from .base.domain.context import *  # NOQA
from .base.domain.exceptions import *  # NOQA
from .base.domain.provider import *  # NOQA
from .base.domain.types import *  # NOQA
from .base.domain.value_object import *  # NOQA
from .hcl.hcl_config_loader import *  # NOQA

# fmt: off
__version__ = '0.1.0.dev0'
# fmt: on
