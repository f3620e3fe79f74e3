# (c) Nelen & Schuurmans

from pydantic import ValidationError

__all__ = [
    "BadRequest",
    "ConfigError",
    "CredentialError",
    "DoesNotExist",
    "ProviderError",
    "Timeout",
]


class DoesNotExist(Exception):
    def __init__(self, name: str, id: str | None = None):
        super().__init__()
        self.name = name
        self.id = id

    def __str__(self):
        if self.id:
            return f"does not exist: {self.name} with id={self.id}"
        else:
            return f"does not exist: {self.name}"


class BadRequest(Exception):
    def __init__(self, err_or_msg: ValidationError | str):
        self._internal_error = err_or_msg
        super().__init__(err_or_msg)

    def __str__(self) -> str:
        error = self._internal_error
        if isinstance(error, ValidationError):
            details = error.errors()[0]
            loc = "'" + ",".join([str(x) for x in details["loc"]]) + "' "
            if loc == "'*' ":
                loc = ""
            return f"validation error: {loc}{details['msg']}"
        return f"validation error: {super().__str__()}"


class ConfigError(Exception):
    def __init__(self, path: str, reason: str):
        super().__init__(f"invalid config file '{path}': {reason}")
        self.path = path
        self.reason = reason


class CredentialError(Exception):
    def __init__(self, msg: str = "no AWS credentials could be resolved"):
        super().__init__(msg)


class ProviderError(Exception):
    """Any storage API failure that is not a 'does not exist'."""

    def __init__(self, operation: str, code: str | None = None, msg: str = ""):
        super().__init__(f"{operation} failed ({code or 'unknown'}): {msg}")
        self.operation = operation
        self.code = code


class Timeout(TimeoutError):
    def __init__(self, msg: str = "timeout", seconds: float | None = None):
        if seconds is not None:
            msg = f"{msg} after {seconds:g} seconds"
        super().__init__(msg)
        self.seconds = seconds
