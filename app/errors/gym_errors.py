# app/errors/gym_errors.py
from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    NOT_FOUND = "NotFound"
    FORBIDDEN = "Forbidden"
    INVALID = "Invalid"
    CONFLICT = "Conflict"
    CAPACITY_EXCEEDED = "CapacityExceeded"
    EXPIRED = "Expired"
    LIMIT_REACHED = "LimitReached"
    STORE_ERROR = "StoreError"


class GymError(Exception):
    """
    Base exception for every refused scheduling, booking or check-in operation.

    `data` is optional structured payload returned to the caller alongside the
    error (e.g. identity and visit usage on a refused QR verification).
    """
    kind = ErrorKind.STORE_ERROR
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, data: Any = None):
        self.message = message or self.default_message
        self.data = data
        super().__init__(self.message)


class NotFound(GymError):
    """Raised when a referenced class, slot, user or booking does not exist."""
    kind = ErrorKind.NOT_FOUND
    default_message = "Not found"


class Forbidden(GymError):
    """Raised when the account is inactive or the actor lacks rights over the resource."""
    kind = ErrorKind.FORBIDDEN
    default_message = "Forbidden"


class Invalid(GymError):
    """Raised when a request violates a precondition."""
    kind = ErrorKind.INVALID
    default_message = "Invalid request"


class Conflict(GymError):
    """Raised on uniqueness violations and schedule overlaps."""
    kind = ErrorKind.CONFLICT
    default_message = "Conflict"


class CapacityExceeded(GymError):
    kind = ErrorKind.CAPACITY_EXCEEDED
    default_message = "This class is full"


class Expired(GymError):
    kind = ErrorKind.EXPIRED
    default_message = "Expired"


class LimitReached(GymError):
    kind = ErrorKind.LIMIT_REACHED
    default_message = "Limit reached"


class StoreError(GymError):
    """Persistence failure. The message shown to callers never carries driver details."""
    kind = ErrorKind.STORE_ERROR
