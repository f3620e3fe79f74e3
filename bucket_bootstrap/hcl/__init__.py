from .hcl_config_loader import *  # NOQA
