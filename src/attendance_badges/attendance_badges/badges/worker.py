"""
Batch fulfillment of pending badge jobs.

One pass claims every pending job, builds a prompt for each, fires all image
requests concurrently and commits each result as its response arrives. A
response that reports failure marks only that item as error. A request that
never got a response (connection or timeout failure) is not an answer, so its
job goes back to pending along with anything else the batch could not
dispatch.
"""
from __future__ import annotations

import asyncio
import random
import uuid
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional, Sequence, Tuple, Union

import httpx

from ..common.datetime_utils import now_utc
from ..core.constants import BADGE_CLAIM_TIMEOUT_SECONDS, BADGE_FILE_EXTENSION
from ..logging_config import LogContext, get_logger
from ..storage.base import ObjectStorage
from .generation import BadgeImageGenerator, build_prompt
from .model import BadgeJob, BatchSummary
from .repository import BadgeRepository
from .words import WordListProvider

logger = get_logger(__name__)

_Outcome = Union[bytes, Exception]


class BadgeFulfillmentWorker:
    def __init__(
        self,
        badges: BadgeRepository,
        words: WordListProvider,
        generator: BadgeImageGenerator,
        storage: ObjectStorage,
        *,
        rng: Optional[random.Random] = None,
        claim_timeout_seconds: int = BADGE_CLAIM_TIMEOUT_SECONDS,
        clock: Callable[[], datetime] = now_utc,
        client_factory: Optional[Callable[[], httpx.AsyncClient]] = None,
    ):
        self._badges = badges
        self._words = words
        self._generator = generator
        self._storage = storage
        self._rng = rng
        self._claim_timeout = timedelta(seconds=claim_timeout_seconds)
        self._clock = clock
        self._client_factory = client_factory or (
            lambda: httpx.AsyncClient(timeout=generator.timeout, follow_redirects=True)
        )

    def process_pending_badges(self) -> BatchSummary:
        now = self._clock()
        stale_before = now - self._claim_timeout

        if not self._badges.list_claimable(stale_before=stale_before):
            return BatchSummary()

        if not self._generator.api_key:
            logger.error("badge_generation_key_missing")
            return BatchSummary()

        claim_token = uuid.uuid4().hex
        jobs = self._badges.claim(claim_token=claim_token, claimed_at=now, stale_before=stale_before)
        if not jobs:
            # Another run claimed them first.
            return BatchSummary()

        with LogContext(claim_token=claim_token):
            logger.info("badge_batch_claimed", count=len(jobs))

            try:
                words = self._words.get_word_list()
                prompts = {job.badge_id: build_prompt(words, self._rng) for job in jobs}
                ready, failed, undelivered = asyncio.run(self._dispatch(jobs, prompts, claim_token))
            except Exception as e:
                logger.exception("badge_batch_dispatch_failed", error=str(e))
                released = self._badges.release_claim(claim_token)
                return BatchSummary(claimed=len(jobs), released=released)

            released = 0
            if undelivered:
                # Only jobs still processing under this claim are handed back.
                released = self._badges.release_claim(claim_token)

            logger.info(
                "badge_batch_finished", claimed=len(jobs), ready=ready, failed=failed, released=released
            )
            return BatchSummary(claimed=len(jobs), ready=ready, failed=failed, released=released)

    async def _dispatch(
        self, jobs: Sequence[BadgeJob], prompts: Dict[str, str], claim_token: str
    ) -> Tuple[int, int, int]:
        ready = failed = undelivered = 0
        async with self._client_factory() as client:
            # All requests are in flight before the first result is handled.
            tasks = [asyncio.ensure_future(self._fetch(client, job, prompts[job.badge_id])) for job in jobs]
            for next_done in asyncio.as_completed(tasks):
                job, outcome = await next_done
                if isinstance(outcome, httpx.TransportError):
                    logger.warning("badge_request_undelivered", badge_id=job.badge_id, error=repr(outcome))
                    undelivered += 1
                elif self._commit(job, prompts[job.badge_id], outcome, claim_token):
                    ready += 1
                else:
                    failed += 1
        return ready, failed, undelivered

    async def _fetch(self, client: httpx.AsyncClient, job: BadgeJob, prompt: str) -> Tuple[BadgeJob, _Outcome]:
        try:
            return job, await self._generator.generate(client, prompt)
        except Exception as e:
            return job, e

    def _commit(self, job: BadgeJob, prompt: str, outcome: _Outcome, claim_token: str) -> bool:
        try:
            if isinstance(outcome, Exception):
                raise outcome

            stored = self._storage.store(outcome, f"{job.badge_id}{BADGE_FILE_EXTENSION}", "image/jpeg")
            self._storage.set_public_readable(stored)
            if not self._badges.mark_ready(
                job.badge_id, claim_token=claim_token, prompt=prompt, artifact_url=stored.url
            ):
                logger.warning("badge_claim_lost", badge_id=job.badge_id)
                return False

            logger.info("badge_ready", badge_id=job.badge_id, url=stored.url)
            return True
        except Exception as e:
            logger.error("badge_failed", badge_id=job.badge_id, error=str(e))
            try:
                self._badges.mark_error(job.badge_id, claim_token=claim_token, prompt=prompt)
            except Exception:
                logger.exception("badge_mark_error_failed", badge_id=job.badge_id)
            return False
