from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles, ordered admin > elevated > standard."""

    ADMIN = "admin"
    ELEVATED = "elevated"
    STANDARD = "standard"


class MeetingStatus(str, Enum):
    SCHEDULED = "scheduled"
    CANCELLED = "cancelled"
    ARCHIVED = "archived"


class CheckInStatus(str, Enum):
    """How a check-in was accepted."""

    VALID = "valid"
    MANUAL_OVERRIDE = "manual_override"


class BadgeStatus(str, Enum):
    """Badge job lifecycle.

    pending -> processing -> ready | error. ``processing`` falls back to
    ``pending`` when a request could not be delivered. Callers only ever see
    pending, ready or error.
    """

    PENDING = "pending"
    PROCESSING = "processing"
    READY = "ready"
    ERROR = "error"

    @property
    def public(self) -> "BadgeStatus":
        return BadgeStatus.PENDING if self is BadgeStatus.PROCESSING else self

    @property
    def is_terminal(self) -> bool:
        return self in (BadgeStatus.READY, BadgeStatus.ERROR)
