from __future__ import annotations

from datetime import datetime
from typing import Optional


class AttendanceError(Exception):
    """Base exception for business rule violations."""


class AuthenticationError(AttendanceError):
    """Raised when a token is missing, invalid or expired."""


class EmailDomainError(AuthenticationError):
    """Raised when an email address is outside the allowed domain."""


class AuthorizationError(AttendanceError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(AttendanceError):
    """Raised when a referenced meeting, user or badge does not exist."""


class StateError(AttendanceError):
    """Raised when an entity is not in a state that allows the action."""


class ValidationError(AttendanceError):
    """Raised when input data is invalid or violates domain rules."""


class CheckInNotOpenError(ValidationError):
    def __init__(self, opens_at: datetime):
        self.opens_at = opens_at
        super().__init__(f"Check-in not yet open. Opens at {opens_at.isoformat()}")


class MeetingEndedError(ValidationError):
    def __init__(self) -> None:
        super().__init__("Meeting has ended.")


class OutOfRangeError(ValidationError):
    def __init__(self, distance_m: float, radius_m: float):
        self.distance_m = round(distance_m)
        self.radius_m = radius_m
        super().__init__(
            f"Location validation failed. You are {self.distance_m}m away (Max: {radius_m:g}m)."
        )


class DuplicateKeyError(AttendanceError):
    """Raised by repositories when a primary or unique key already exists."""


class ExternalServiceError(AttendanceError):
    """Raised when a collaborator outside the process fails or is misconfigured."""


class GenerationError(ExternalServiceError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class StorageError(ExternalServiceError):
    """Raised when an artifact cannot be written or shared."""


class CacheError(ExternalServiceError):
    """Raised when the cache backend rejects an operation."""


class CacheValueTooLargeError(CacheError):
    def __init__(self, key: str, size: int, limit: int):
        self.key = key
        self.size = size
        self.limit = limit
        super().__init__(f"Cache value for {key!r} is {size} bytes (limit {limit})")
