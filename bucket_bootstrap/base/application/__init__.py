from .manage_bucket import *  # NOQA
