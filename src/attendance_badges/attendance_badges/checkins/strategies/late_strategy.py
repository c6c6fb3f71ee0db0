from __future__ import annotations

from datetime import datetime

from ...core.enums import CheckInStatus
from ...meetings.model import CheckInWindow
from .base import CheckInStrategy, StatusDecision


class LateStrategy(CheckInStrategy):
    """Late check-in: after the on-time sub-window, before the meeting ends."""

    def decide(self, *, now: datetime, window: CheckInWindow) -> StatusDecision:
        return StatusDecision(status=CheckInStatus.VALID, was_on_time=False)
