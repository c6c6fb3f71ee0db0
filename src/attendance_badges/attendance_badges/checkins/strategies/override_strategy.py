from __future__ import annotations

from datetime import datetime

from ...core.enums import CheckInStatus
from ...meetings.model import CheckInWindow
from .base import CheckInStrategy, StatusDecision


class OverrideStrategy(CheckInStrategy):
    """Manual override by an elevated user: no time or location gating."""

    enforces_geofence = False

    def decide(self, *, now: datetime, window: CheckInWindow) -> StatusDecision:
        return StatusDecision(status=CheckInStatus.MANUAL_OVERRIDE, was_on_time=window.is_on_time(now))
