# (c) Nelen & Schuurmans

import time
from contextvars import ContextVar

from .exceptions import Timeout

__all__ = ["ctx"]


class Context:
    """Provide global access to some contextual properties.

    The implementation makes use of python's contextvars. The deadline is an
    absolute value of ``time.monotonic()``; every remote call checks it before
    it is issued.
    """

    def __init__(self):
        self._deadline_value: ContextVar[float | None] = ContextVar(
            "deadline", default=None
        )

    @property
    def deadline(self) -> float | None:
        return self._deadline_value.get()

    @deadline.setter
    def deadline(self, value: float | None) -> None:
        self._deadline_value.set(value)

    def set_timeout(self, seconds: float | None) -> None:
        self.deadline = None if seconds is None else time.monotonic() + seconds

    def remaining(self) -> float | None:
        """Seconds left until the deadline, None if there is no deadline."""
        if self.deadline is None:
            return None
        return max(self.deadline - time.monotonic(), 0.0)

    def check(self) -> None:
        if self.remaining() == 0.0:
            raise Timeout("deadline exceeded")

    def cap(self, seconds: float) -> float:
        """Limit a duration to the remaining time."""
        remaining = self.remaining()
        return seconds if remaining is None else min(seconds, remaining)


ctx = Context()
