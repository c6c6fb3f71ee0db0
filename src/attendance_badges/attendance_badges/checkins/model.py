from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import CheckInStatus


@dataclass(frozen=True)
class CheckInRecord:
    """Domain entity: one accepted check-in. At most one per (meeting, user)."""

    checkin_id: str
    meeting_id: str
    user_email: str
    timestamp: datetime
    status: CheckInStatus
    was_on_time: bool
    override: bool = False
    excused: bool = False
    lat: Optional[float] = None
    lng: Optional[float] = None


@dataclass(frozen=True)
class CheckInResult:
    """Returned to the caller of a check-in.

    ``created`` is False when an earlier record for the same meeting and user
    was returned instead.
    """

    record: CheckInRecord
    created: bool
    job_id: Optional[str] = None

    @property
    def accepted(self) -> bool:
        return True

    @property
    def was_on_time(self) -> bool:
        return self.record.was_on_time
