from __future__ import annotations

from datetime import timedelta

from src.attendance_badges.attendance_badges.scheduling.guard import SchedulerGuard
from tests.fakes import RecordingScheduler


def test_guard_schedules_once_while_an_invocation_is_pending(fixed_now):
    scheduler = RecordingScheduler(fixed_now)
    guard = SchedulerGuard(scheduler)

    assert guard.ensure_trigger() is True
    assert guard.ensure_trigger() is False
    assert guard.ensure_trigger() is False

    [invocation] = scheduler.invocations
    assert invocation.handler_name == "process_pending_badges"
    assert invocation.run_at == fixed_now + timedelta(milliseconds=100)


def test_guard_ignores_other_handlers(fixed_now):
    scheduler = RecordingScheduler(fixed_now)
    scheduler.schedule("nightly_report", 1000)

    assert SchedulerGuard(scheduler).ensure_trigger() is True
    assert len(scheduler.invocations) == 2

