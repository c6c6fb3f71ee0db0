from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..core.exceptions import CheckInNotOpenError, MeetingEndedError
from ..meetings.model import CheckInWindow
from .strategies.base import CheckInStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.on_time_strategy import OnTimeStrategy
from .strategies.override_strategy import OverrideStrategy


@dataclass
class CheckInStrategyFactory:
    """Factory Pattern: choose the strategy for a check-in, or reject it.

    Window bounds are inclusive on both ends.
    """

    def for_checkin(self, *, now: datetime, window: CheckInWindow, is_override: bool) -> CheckInStrategy:
        if is_override:
            return OverrideStrategy()

        if now < window.opens_at:
            raise CheckInNotOpenError(window.opens_at)
        if now > window.closes_at:
            raise MeetingEndedError()

        if now <= window.on_time_until:
            return OnTimeStrategy()
        return LateStrategy()
