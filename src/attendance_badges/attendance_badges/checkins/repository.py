from __future__ import annotations

from typing import Optional, Protocol, Sequence, Tuple

from .model import CheckInRecord


class CheckInRepository(Protocol):
    def get_for_meeting_and_user(self, meeting_id: str, user_email: str) -> Optional[CheckInRecord]:
        raise NotImplementedError

    def insert_if_absent(self, record: CheckInRecord) -> Tuple[CheckInRecord, bool]:
        """Atomically insert unless (meeting_id, user_email) exists.

        Returns the stored record and whether this call created it.
        """

        raise NotImplementedError

    def list_for_meeting(self, meeting_id: str) -> Sequence[CheckInRecord]:
        raise NotImplementedError
