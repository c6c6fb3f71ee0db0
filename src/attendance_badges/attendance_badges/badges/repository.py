from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import BadgeStatus
from .model import BadgeJob


class BadgeRepository(Protocol):
    def create_pending(self, job: BadgeJob) -> None:
        """Insert a pending job. Raises DuplicateKeyError if badge_id is taken."""

        raise NotImplementedError

    def get_by_id(self, badge_id: str) -> Optional[BadgeJob]:
        raise NotImplementedError

    def find_for_owner_and_meeting(self, owner_email: str, meeting_id: str) -> Optional[BadgeJob]:
        """The badge created for this check-in (matched on the original owner)."""
        raise NotImplementedError

    def list_by_owner(self, owner_email: str, *, status: Optional[BadgeStatus] = None) -> Sequence[BadgeJob]:
        raise NotImplementedError

    def list_all(self) -> Sequence[BadgeJob]:
        raise NotImplementedError

    def list_claimable(self, *, stale_before: datetime) -> Sequence[BadgeJob]:
        """Pending jobs plus processing jobs claimed before ``stale_before``."""

        raise NotImplementedError

    def claim(self, *, claim_token: str, claimed_at: datetime, stale_before: datetime) -> Sequence[BadgeJob]:
        """Compare-and-set every claimable job to processing under ``claim_token``."""

        raise NotImplementedError

    def release_claim(self, claim_token: str) -> int:
        """Return still-processing jobs of a claim to pending."""

        raise NotImplementedError

    def mark_ready(self, badge_id: str, *, claim_token: str, prompt: str, artifact_url: str) -> bool:
        raise NotImplementedError

    def mark_error(self, badge_id: str, *, claim_token: str, prompt: str) -> bool:
        raise NotImplementedError
