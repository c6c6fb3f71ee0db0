from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Optional

from ..badges.service import BadgeQueue
from ..common.datetime_utils import now_utc
from ..common.geo import haversine_distance_m
from ..common.ids import new_checkin_id
from ..common.validators import optional_number
from ..core.constants import DEFAULT_CHECKIN_WINDOW_AFTER_MINUTES, DEFAULT_CHECKIN_WINDOW_BEFORE_MINUTES
from ..core.enums import MeetingStatus, Role
from ..core.exceptions import (
    AuthorizationError,
    NotFoundError,
    OutOfRangeError,
    StateError,
    ValidationError,
)
from ..logging_config import get_logger
from ..meetings.model import CheckInWindow, Meeting
from ..meetings.repository import MeetingRepository
from ..users.service import PermissionGate, UserService
from .factory import CheckInStrategyFactory
from .model import CheckInRecord, CheckInResult
from .repository import CheckInRepository

logger = get_logger(__name__)


class CheckInService:
    """Use case: validate a check-in and hand the accepted one to the badge queue.

    Order of checks: permission, meeting exists and is scheduled, existing
    record (returned as-is), time window, geofence. Override skips the last two.
    """

    def __init__(
        self,
        checkins: CheckInRepository,
        meetings: MeetingRepository,
        gate: PermissionGate,
        users: UserService,
        badges: BadgeQueue,
        *,
        strategy_factory: CheckInStrategyFactory | None = None,
        window_before_minutes: int = DEFAULT_CHECKIN_WINDOW_BEFORE_MINUTES,
        window_after_minutes: int = DEFAULT_CHECKIN_WINDOW_AFTER_MINUTES,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._checkins = checkins
        self._meetings = meetings
        self._gate = gate
        self._users = users
        self._badges = badges
        self._factory = strategy_factory or CheckInStrategyFactory()
        self._window_before = int(window_before_minutes)
        self._window_after = int(window_after_minutes)
        self._clock = clock

    def check_in(
        self,
        *,
        target_email: str,
        meeting_id: str,
        lat: Any = None,
        lng: Any = None,
        is_override: bool = False,
        acting_email: Optional[str] = None,
        now: datetime | None = None,
    ) -> CheckInResult:
        now = now or self._clock()

        self._authorize(target_email=target_email, acting_email=acting_email, is_override=is_override)

        meeting = self._meetings.get_by_id(meeting_id)
        if not meeting:
            raise NotFoundError("Meeting not found.")
        if meeting.status != MeetingStatus.SCHEDULED:
            raise StateError(f"Meeting is not active (Status: {meeting.status.value})")

        existing = self._checkins.get_for_meeting_and_user(meeting_id, target_email)
        if existing:
            return self._existing_result(existing)

        window = CheckInWindow.for_meeting(
            meeting, default_before=self._window_before, default_after=self._window_after
        )
        strategy = self._factory.for_checkin(now=now, window=window, is_override=is_override)

        lat_v = optional_number(lat, "lat")
        lng_v = optional_number(lng, "lng")
        if strategy.enforces_geofence:
            self._check_geofence(meeting, lat_v, lng_v)

        decision = strategy.decide(now=now, window=window)
        record = CheckInRecord(
            checkin_id=new_checkin_id(now),
            meeting_id=meeting_id,
            user_email=target_email,
            timestamp=now,
            lat=lat_v,
            lng=lng_v,
            status=decision.status,
            was_on_time=decision.was_on_time,
            override=is_override,
        )

        stored, created = self._checkins.insert_if_absent(record)
        if not created:
            # A concurrent request for the same meeting and user committed first.
            return self._existing_result(stored)

        self._users.record_attendance(target_email)
        try:
            job_id = self._badges.create_badge_request(target_email, meeting_id)
        except Exception:
            # The record is stored; a retry of this check-in enqueues the badge.
            logger.exception("checkin_badge_enqueue_failed", meeting_id=meeting_id, email=target_email)
            raise

        logger.info(
            "checkin_accepted",
            meeting_id=meeting_id,
            email=target_email,
            on_time=stored.was_on_time,
            override=is_override,
            badge_id=job_id,
        )
        return CheckInResult(record=stored, created=True, job_id=job_id)

    def _authorize(self, *, target_email: str, acting_email: Optional[str], is_override: bool) -> None:
        if is_override:
            if not acting_email or not self._gate.check_permission(acting_email, Role.ELEVATED):
                raise AuthorizationError("Permission denied: Only elevated users can perform manual overrides.")
            # Subject must still resolve to an in-domain account.
            self._gate.get_or_provision(target_email)
            return

        if target_email != acting_email:
            raise AuthorizationError("Permission denied: You can only check yourself in.")
        if not self._gate.check_permission(target_email, Role.STANDARD):
            raise AuthorizationError("Permission denied: User not authorized.")

    def _existing_result(self, record: CheckInRecord) -> CheckInResult:
        job = self._badges.find_for_checkin(record.user_email, record.meeting_id)
        if job:
            return CheckInResult(record=record, created=False, job_id=job.badge_id)

        logger.warning("checkin_badge_missing", meeting_id=record.meeting_id, email=record.user_email)
        job_id = self._badges.create_badge_request(record.user_email, record.meeting_id)
        return CheckInResult(record=record, created=False, job_id=job_id)

    @staticmethod
    def _check_geofence(meeting: Meeting, lat: Optional[float], lng: Optional[float]) -> None:
        if lat is None or lng is None:
            raise ValidationError("Location (lat/lng) is required to check in.")

        distance = haversine_distance_m(lat, lng, meeting.lat, meeting.lng)
        if distance > meeting.radius_m:
            raise OutOfRangeError(distance, meeting.radius_m)
