from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import BadgeStatus


@dataclass(frozen=True)
class BadgeJob:
    """Domain entity: one badge to generate for an accepted check-in."""

    badge_id: str
    owner_email: str
    original_owner_email: str
    meeting_id: str
    created_at: datetime
    status: BadgeStatus = BadgeStatus.PENDING
    prompt: str = ""
    artifact_url: str = ""
    claim_token: Optional[str] = None
    claimed_at: Optional[datetime] = None


@dataclass(frozen=True)
class BatchSummary:
    """Outcome of one worker pass."""

    claimed: int = 0
    ready: int = 0
    failed: int = 0
    released: int = 0
