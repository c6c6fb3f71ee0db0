from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ..core.enums import MeetingStatus


@dataclass(frozen=True)
class Meeting:
    """Domain entity: a meeting with a geofence and a check-in window."""

    meeting_id: str
    title: str
    start_time: datetime
    end_time: datetime
    lat: float
    lng: float
    radius_m: float
    status: MeetingStatus
    created_at: datetime
    description: Optional[str] = None
    check_in_window_before: Optional[int] = None
    check_in_window_after: Optional[int] = None
    last_edited: Optional[datetime] = None


@dataclass(frozen=True)
class CheckInWindow:
    """Resolved check-in bounds for one meeting.

    Valid interval is [opens_at, closes_at]; check-ins after ``on_time_until``
    are accepted but flagged late.
    """

    opens_at: datetime
    on_time_until: datetime
    closes_at: datetime

    @classmethod
    def for_meeting(cls, meeting: Meeting, *, default_before: int, default_after: int) -> "CheckInWindow":
        before = meeting.check_in_window_before
        after = meeting.check_in_window_after
        before = default_before if before is None else before
        after = default_after if after is None else after
        return cls(
            opens_at=meeting.start_time - timedelta(minutes=before),
            on_time_until=meeting.start_time + timedelta(minutes=after),
            closes_at=meeting.end_time,
        )

    def is_on_time(self, now: datetime) -> bool:
        return self.opens_at <= now <= self.on_time_until
