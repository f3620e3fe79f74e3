# (c) Nelen & Schuurmans

from pydantic import Field
from pydantic import NonNegativeInt

from .value_object import ValueObject

__all__ = ["BucketConfig", "ObjectSummary"]


class BucketConfig(ValueObject):
    """The contents of the backend config file.

    Other attributes that may live in the same file (for instance the rest of
    a Terraform S3 backend block) are ignored.
    """

    bucket: str = Field(min_length=1)
    region: str | None = None


class ObjectSummary(ValueObject):
    key: str
    size: NonNegativeInt
