from __future__ import annotations

from datetime import datetime

from ...core.enums import CheckInStatus
from ...meetings.model import CheckInWindow
from .base import CheckInStrategy, StatusDecision


class OnTimeStrategy(CheckInStrategy):
    """Check-in inside the on-time sub-window."""

    def decide(self, *, now: datetime, window: CheckInWindow) -> StatusDecision:
        return StatusDecision(status=CheckInStatus.VALID, was_on_time=True)
