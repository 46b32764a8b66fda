"""Error taxonomy shared by the validator, the bridge and the HTTP surfaces."""

from __future__ import annotations

from typing import Any, Optional, Sequence


class ValidationError(ValueError):
    """Client-caused failure while checking tool arguments."""

    status_code = 400


class NotFound(Exception):
    status_code = 404


class UnknownOperation(ValidationError, NotFound):
    status_code = 404

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class MissingRequiredField(ValidationError):
    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Missing required parameter: {field}")


class TypeMismatch(ValidationError):
    def __init__(self, field: str, expected: str):
        self.field = field
        self.expected = expected
        article = "an" if expected[:1] in "aeiou" else "a"
        super().__init__(f"Parameter {field} must be {article} {expected}")


class InvalidEnumValue(ValidationError):
    def __init__(self, field: str, allowed: Sequence[str]):
        self.field = field
        self.allowed = list(allowed)
        super().__init__(f"Parameter {field} must be one of: {', '.join(self.allowed)}")


class ValueOutOfRange(ValidationError):
    def __init__(self, field: str, minimum: Optional[float], maximum: Optional[float]):
        self.field = field
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(f"Parameter {field} must be between {minimum} and {maximum}")


class Unauthorized(Exception):
    status_code = 401


class RemoteError(RuntimeError):
    """Replit answered with an error payload or an HTTP failure status."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, payload: Any = None):
        self.status_code = status_code
        self.payload = payload
        super().__init__(message)


class BridgeError(RuntimeError):
    def __init__(self, *, operation: str, cause: BaseException):
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation}: {cause}")


class OAuthError(RuntimeError):
    pass
