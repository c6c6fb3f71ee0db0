from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Sequence

from ..common.datetime_utils import now_utc, parse_iso_datetime
from ..common.ids import new_meeting_id
from ..common.validators import require_non_empty, require_non_negative_int, require_number
from ..core.enums import MeetingStatus, Role
from ..core.exceptions import NotFoundError, StateError, ValidationError
from ..logging_config import get_logger
from ..users.service import PermissionGate
from .model import Meeting
from .repository import MeetingRepository

logger = get_logger(__name__)


def _parse_when(value: Any, field_name: str) -> datetime:
    if isinstance(value, datetime):
        return parse_iso_datetime(value.isoformat())
    text = require_non_empty(value, field_name)
    try:
        return parse_iso_datetime(text)
    except ValueError:
        raise ValidationError(f"{field_name} must be an ISO-8601 datetime")


def _optional_minutes(value: Any, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    return require_non_negative_int(value, field_name)


class MeetingService:
    """Use case: create, edit, cancel and list meetings."""

    EDITABLE_FIELDS = (
        "title",
        "description",
        "start_time",
        "end_time",
        "lat",
        "lng",
        "radius_m",
        "check_in_window_before",
        "check_in_window_after",
    )

    def __init__(
        self,
        meetings: MeetingRepository,
        gate: PermissionGate,
        *,
        default_window_before: int,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._meetings = meetings
        self._gate = gate
        self._default_window_before = int(default_window_before)
        self._clock = clock

    def get(self, meeting_id: str) -> Meeting:
        meeting = self._meetings.get_by_id(meeting_id)
        if not meeting:
            raise NotFoundError("Meeting not found.")
        return meeting

    def create_meeting(
        self,
        *,
        requestor_email: str,
        title: str,
        start_time: Any,
        end_time: Any,
        lat: Any,
        lng: Any,
        radius_m: Any,
        description: Optional[str] = None,
        check_in_window_before: Any = None,
        check_in_window_after: Any = None,
    ) -> Meeting:
        self._gate.require(
            requestor_email, Role.ELEVATED, "Permission denied: Only elevated users can create meetings."
        )

        now = self._clock()
        before = _optional_minutes(check_in_window_before, "checkInWindowBefore")
        meeting = Meeting(
            meeting_id=new_meeting_id(now),
            title=require_non_empty(title, "title"),
            description=(description or "").strip() or None,
            start_time=_parse_when(start_time, "startTime"),
            end_time=_parse_when(end_time, "endTime"),
            lat=require_number(lat, "lat"),
            lng=require_number(lng, "lng"),
            radius_m=require_number(radius_m, "radius"),
            check_in_window_before=self._default_window_before if before is None else before,
            check_in_window_after=_optional_minutes(check_in_window_after, "checkInWindowAfter"),
            status=MeetingStatus.SCHEDULED,
            created_at=now,
        )
        self._validate(meeting)

        self._meetings.create(meeting)
        logger.info("meeting_created", meeting_id=meeting.meeting_id, by=requestor_email)
        return meeting

    def edit_meeting(self, *, requestor_email: str, meeting_id: str, updates: Mapping[str, Any]) -> Meeting:
        self._gate.require(
            requestor_email, Role.ELEVATED, "Permission denied: Only elevated users can edit meetings."
        )
        meeting = self.get(meeting_id)

        unknown = set(updates) - set(self.EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

        changes: dict[str, Any] = {}
        for field_name, value in updates.items():
            if field_name == "title":
                changes[field_name] = require_non_empty(value, "title")
            elif field_name == "description":
                changes[field_name] = (value or "").strip() or None
            elif field_name in ("start_time", "end_time"):
                changes[field_name] = _parse_when(value, field_name)
            elif field_name in ("lat", "lng", "radius_m"):
                changes[field_name] = require_number(value, field_name)
            else:
                changes[field_name] = _optional_minutes(value, field_name)

        edited = replace(meeting, last_edited=self._clock(), **changes)
        self._validate(edited)

        self._meetings.update(edited)
        logger.info("meeting_edited", meeting_id=meeting_id, fields=sorted(changes), by=requestor_email)
        return edited

    def cancel_meeting(self, *, requestor_email: str, meeting_id: str) -> Meeting:
        self._gate.require(
            requestor_email, Role.ELEVATED, "Permission denied: Only elevated users can cancel meetings."
        )
        meeting = self.get(meeting_id)
        if meeting.status != MeetingStatus.SCHEDULED:
            raise StateError(f"Meeting is not active (Status: {meeting.status.value})")

        cancelled = replace(meeting, status=MeetingStatus.CANCELLED, last_edited=self._clock())
        self._meetings.update(cancelled)
        logger.info("meeting_cancelled", meeting_id=meeting_id, by=requestor_email)
        return cancelled

    def list_upcoming(self, *, requestor_email: str) -> Sequence[Meeting]:
        self._gate.require(requestor_email, Role.STANDARD)
        return list(self._meetings.list_scheduled_ending_after(self._clock()))

    @staticmethod
    def _validate(meeting: Meeting) -> None:
        if meeting.end_time <= meeting.start_time:
            raise ValidationError("endTime must be after startTime")
        if meeting.radius_m <= 0:
            raise ValidationError("radius must be positive")
        if not -90 <= meeting.lat <= 90 or not -180 <= meeting.lng <= 180:
            raise ValidationError("lat/lng out of range")
