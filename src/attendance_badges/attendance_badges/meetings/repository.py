from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Meeting


class MeetingRepository(Protocol):
    def get_by_id(self, meeting_id: str) -> Optional[Meeting]:
        raise NotImplementedError

    def create(self, meeting: Meeting) -> None:
        raise NotImplementedError

    def update(self, meeting: Meeting) -> bool:
        """Replace every mutable column of ``meeting``."""

        raise NotImplementedError

    def list_scheduled_ending_after(self, now: datetime) -> Sequence[Meeting]:
        raise NotImplementedError
