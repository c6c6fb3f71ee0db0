from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from ...core.enums import CheckInStatus
from ...meetings.model import CheckInWindow


@dataclass(frozen=True)
class StatusDecision:
    status: CheckInStatus
    was_on_time: bool


class CheckInStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide a check-in status."""

    enforces_geofence: bool = True

    @abstractmethod
    def decide(self, *, now: datetime, window: CheckInWindow) -> StatusDecision:
        raise NotImplementedError
