from __future__ import annotations

import random
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_utc
from ..common.ids import new_badge_id
from ..core.constants import BADGE_ID_MAX_ATTEMPTS
from ..core.enums import BadgeStatus
from ..core.exceptions import DuplicateKeyError, NotFoundError
from ..logging_config import get_logger
from ..scheduling.guard import SchedulerGuard
from .model import BadgeJob
from .repository import BadgeRepository

logger = get_logger(__name__)


class BadgeQueue:
    """Enqueues badge jobs and serves badge reads."""

    def __init__(
        self,
        badges: BadgeRepository,
        guard: SchedulerGuard,
        *,
        clock: Callable[[], datetime] = now_utc,
        rng: Optional[random.Random] = None,
        max_attempts: int = BADGE_ID_MAX_ATTEMPTS,
    ):
        self._badges = badges
        self._guard = guard
        self._clock = clock
        self._rng = rng
        self._max_attempts = max_attempts

    def create_badge_request(self, owner_email: str, meeting_id: str) -> str:
        """Insert a pending job for ``owner_email`` and make sure a worker run is scheduled.

        A check-in has at most one badge: if one already exists for the owner
        and meeting its id is returned instead.
        """

        now = self._clock()
        last_error: Optional[DuplicateKeyError] = None
        for attempt in range(1, self._max_attempts + 1):
            job = BadgeJob(
                badge_id=new_badge_id(now, self._rng),
                owner_email=owner_email,
                original_owner_email=owner_email,
                meeting_id=meeting_id,
                created_at=now,
                status=BadgeStatus.PENDING,
            )
            try:
                self._badges.create_pending(job)
            except DuplicateKeyError as e:
                existing = self._badges.find_for_owner_and_meeting(owner_email, meeting_id)
                if existing:
                    logger.info("badge_already_enqueued", badge_id=existing.badge_id, meeting_id=meeting_id)
                    return existing.badge_id
                last_error = e
                logger.warning("badge_id_collision", badge_id=job.badge_id, attempt=attempt)
                continue

            self._trigger()
            logger.info("badge_enqueued", badge_id=job.badge_id, owner=owner_email, meeting_id=meeting_id)
            return job.badge_id

        raise DuplicateKeyError(
            f"Could not allocate a unique badge id after {self._max_attempts} attempts"
        ) from last_error

    def get_badge(self, badge_id: str) -> BadgeJob:
        job = self._badges.get_by_id(badge_id)
        if not job:
            raise NotFoundError("Badge not found")
        return job

    def get_user_badges(self, email: str) -> Sequence[BadgeJob]:
        return list(self._badges.list_by_owner(email, status=BadgeStatus.READY))

    def get_all_badges(self) -> Sequence[BadgeJob]:
        # No role check here; callers gate access.
        return list(self._badges.list_all())

    def find_for_checkin(self, owner_email: str, meeting_id: str) -> Optional[BadgeJob]:
        return self._badges.find_for_owner_and_meeting(owner_email, meeting_id)

    def resume_pending(self) -> bool:
        """Schedule a worker run for jobs left pending by an earlier process."""
        return self._trigger()

    def _trigger(self) -> bool:
        try:
            return self._guard.ensure_trigger()
        except Exception:
            # Jobs stay pending; the next trigger or resume_pending picks them up.
            logger.exception("badge_trigger_failed")
            return False
