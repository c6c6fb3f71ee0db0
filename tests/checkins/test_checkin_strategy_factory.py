from datetime import datetime, timedelta, timezone

import pytest

from src.attendance_badges.attendance_badges.checkins.factory import CheckInStrategyFactory
from src.attendance_badges.attendance_badges.checkins.strategies.late_strategy import LateStrategy
from src.attendance_badges.attendance_badges.checkins.strategies.on_time_strategy import OnTimeStrategy
from src.attendance_badges.attendance_badges.checkins.strategies.override_strategy import OverrideStrategy
from src.attendance_badges.attendance_badges.core.enums import CheckInStatus
from src.attendance_badges.attendance_badges.core.exceptions import CheckInNotOpenError, MeetingEndedError
from src.attendance_badges.attendance_badges.meetings.model import CheckInWindow

START = datetime(2025, 1, 1, 18, 0, tzinfo=timezone.utc)
WINDOW = CheckInWindow(
    opens_at=START - timedelta(minutes=15),
    on_time_until=START + timedelta(minutes=5),
    closes_at=START + timedelta(hours=1),
)


def test_factory_on_time_up_to_end_of_sub_window():
    factory = CheckInStrategyFactory()

    assert isinstance(factory.for_checkin(now=WINDOW.opens_at, window=WINDOW, is_override=False), OnTimeStrategy)
    assert isinstance(factory.for_checkin(now=WINDOW.on_time_until, window=WINDOW, is_override=False), OnTimeStrategy)


def test_factory_late_after_sub_window():
    strategy = CheckInStrategyFactory().for_checkin(
        now=WINDOW.on_time_until + timedelta(seconds=1), window=WINDOW, is_override=False
    )

    assert isinstance(strategy, LateStrategy)
    assert strategy.enforces_geofence


def test_factory_rejects_outside_valid_window():
    factory = CheckInStrategyFactory()

    with pytest.raises(CheckInNotOpenError):
        factory.for_checkin(now=WINDOW.opens_at - timedelta(seconds=1), window=WINDOW, is_override=False)
    with pytest.raises(MeetingEndedError):
        factory.for_checkin(now=WINDOW.closes_at + timedelta(seconds=1), window=WINDOW, is_override=False)


def test_override_ignores_window_but_reports_punctuality():
    factory = CheckInStrategyFactory()
    late_night = WINDOW.closes_at + timedelta(hours=5)

    strategy = factory.for_checkin(now=late_night, window=WINDOW, is_override=True)
    decision = strategy.decide(now=late_night, window=WINDOW)

    assert isinstance(strategy, OverrideStrategy)
    assert not strategy.enforces_geofence
    assert decision.status == CheckInStatus.MANUAL_OVERRIDE
    assert decision.was_on_time is False
    assert strategy.decide(now=START, window=WINDOW).was_on_time is True
