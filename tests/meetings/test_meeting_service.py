from __future__ import annotations

from datetime import timedelta

import pytest

from src.attendance_badges.attendance_badges.core.enums import MeetingStatus
from src.attendance_badges.attendance_badges.core.exceptions import (
    AuthorizationError,
    NotFoundError,
    StateError,
    ValidationError,
)
from src.attendance_badges.attendance_badges.meetings.service import MeetingService
from src.attendance_badges.attendance_badges.users.service import PermissionGate
from tests.fakes import DOMAIN, LEAD, STUDENT, FixedClock, InMemoryMeetings, default_users, make_meeting


def _service(fixed_now, *meetings):
    clock = FixedClock(fixed_now)
    gate = PermissionGate(default_users(fixed_now), allowed_domain=DOMAIN, clock=clock)
    repo = InMemoryMeetings(*meetings)
    return repo, MeetingService(repo, gate, default_window_before=15, clock=clock)


def _new_meeting_fields(fixed_now):
    return {
        "title": "Kickoff",
        "start_time": "2025-03-11T17:00:00Z",
        "end_time": "2025-03-11T19:00:00Z",
        "lat": "37.4220",
        "lng": -122.0841,
        "radius_m": 75,
    }


def test_create_meeting_applies_defaults(fixed_now):
    repo, service = _service(fixed_now)

    meeting = service.create_meeting(requestor_email=LEAD, **_new_meeting_fields(fixed_now))

    assert meeting.meeting_id.startswith("m_")
    assert meeting.status == MeetingStatus.SCHEDULED
    assert meeting.check_in_window_before == 15
    assert meeting.check_in_window_after is None
    assert meeting.lat == pytest.approx(37.4220)
    assert meeting.start_time.utcoffset() == timedelta(0)
    assert repo.get_by_id(meeting.meeting_id) == meeting


def test_create_meeting_requires_elevated(fixed_now):
    _, service = _service(fixed_now)

    with pytest.raises(AuthorizationError):
        service.create_meeting(requestor_email=STUDENT, **_new_meeting_fields(fixed_now))


@pytest.mark.parametrize(
    "override",
    [
        {"title": "  "},
        {"end_time": "2025-03-11T16:00:00Z"},
        {"radius_m": 0},
        {"lat": 95},
        {"start_time": "next tuesday"},
    ],
)
def test_create_meeting_rejects_invalid_input(fixed_now, override):
    _, service = _service(fixed_now)
    fields = {**_new_meeting_fields(fixed_now), **override}

    with pytest.raises(ValidationError):
        service.create_meeting(requestor_email=LEAD, **fields)


def test_edit_meeting_only_whitelisted_fields(fixed_now):
    existing = make_meeting(fixed_now + timedelta(days=1))
    repo, service = _service(fixed_now, existing)

    edited = service.edit_meeting(requestor_email=LEAD, meeting_id="m_1", updates={"title": "Renamed", "radius_m": 250})

    assert edited.title == "Renamed"
    assert edited.radius_m == 250
    assert edited.last_edited == fixed_now
    assert repo.get_by_id("m_1").title == "Renamed"

    with pytest.raises(ValidationError):
        service.edit_meeting(requestor_email=LEAD, meeting_id="m_1", updates={"status": "archived"})


def test_edit_meeting_revalidates_times(fixed_now):
    existing = make_meeting(fixed_now + timedelta(days=1))
    _, service = _service(fixed_now, existing)

    with pytest.raises(ValidationError):
        service.edit_meeting(
            requestor_email=LEAD,
            meeting_id="m_1",
            updates={"end_time": (existing.start_time - timedelta(minutes=1)).isoformat()},
        )


def test_cancel_meeting_then_cancel_again_is_state_error(fixed_now):
    existing = make_meeting(fixed_now + timedelta(days=1))
    repo, service = _service(fixed_now, existing)

    cancelled = service.cancel_meeting(requestor_email=LEAD, meeting_id="m_1")

    assert cancelled.status == MeetingStatus.CANCELLED
    assert repo.get_by_id("m_1").status == MeetingStatus.CANCELLED
    with pytest.raises(StateError):
        service.cancel_meeting(requestor_email=LEAD, meeting_id="m_1")


def test_cancel_unknown_meeting(fixed_now):
    _, service = _service(fixed_now)

    with pytest.raises(NotFoundError):
        service.cancel_meeting(requestor_email=LEAD, meeting_id="m_missing")


def test_list_upcoming_skips_finished_and_cancelled(fixed_now):
    later = make_meeting(fixed_now + timedelta(days=2), meeting_id="m_later")
    sooner = make_meeting(fixed_now + timedelta(hours=1), meeting_id="m_sooner")
    running = make_meeting(fixed_now - timedelta(minutes=30), meeting_id="m_running")
    finished = make_meeting(fixed_now - timedelta(days=1), meeting_id="m_finished")
    cancelled = make_meeting(
        fixed_now + timedelta(days=1), meeting_id="m_cancelled", status=MeetingStatus.CANCELLED
    )
    _, service = _service(fixed_now, later, sooner, running, finished, cancelled)

    upcoming = service.list_upcoming(requestor_email=STUDENT)

    assert [m.meeting_id for m in upcoming] == ["m_running", "m_sooner", "m_later"]
