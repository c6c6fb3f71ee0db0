from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Protocol, Sequence

from ..cache.base import Cache
from ..common.datetime_utils import now_utc, parse_iso_datetime
from ..core.constants import SCHEDULE_MARKER_GRACE_SECONDS, SCHEDULE_MARKER_PREFIX
from ..logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ScheduledInvocation:
    handler_name: str
    run_at: datetime


class Scheduler(Protocol):
    def list_scheduled(self) -> Sequence[ScheduledInvocation]:
        raise NotImplementedError

    def schedule(self, handler_name: str, delay_ms: int) -> ScheduledInvocation:
        raise NotImplementedError


class CeleryScheduler(Scheduler):
    """One-shot deferred invocations sent to a Celery worker.

    Each handler maps to a Celery task. A marker kept in the shared cache
    records that a run has been sent and not yet started; the task clears it
    through ``mark_started`` as soon as it begins, so a caller may queue the
    next run while the current one is still in flight.
    """

    def __init__(
        self,
        markers: Cache,
        *,
        clock: Callable[[], datetime] = now_utc,
        marker_grace_seconds: int = SCHEDULE_MARKER_GRACE_SECONDS,
    ):
        self._markers = markers
        self._clock = clock
        self._marker_grace_seconds = marker_grace_seconds
        self._tasks: Dict[str, Any] = {}

    def register(self, handler_name: str, task: Any) -> None:
        self._tasks[handler_name] = task

    def list_scheduled(self) -> Sequence[ScheduledInvocation]:
        scheduled: List[ScheduledInvocation] = []
        for handler_name in self._tasks:
            raw = self._markers.get(self._marker_key(handler_name))
            if not raw:
                continue
            try:
                run_at = parse_iso_datetime(raw)
            except ValueError:
                logger.warning("schedule_marker_corrupt", handler=handler_name)
                continue
            scheduled.append(ScheduledInvocation(handler_name=handler_name, run_at=run_at))
        return scheduled

    def schedule(self, handler_name: str, delay_ms: int) -> ScheduledInvocation:
        task = self._tasks.get(handler_name)
        if task is None:
            raise KeyError(f"Unknown handler: {handler_name}")

        invocation = ScheduledInvocation(
            handler_name=handler_name,
            run_at=self._clock() + timedelta(milliseconds=delay_ms),
        )
        key = self._marker_key(handler_name)
        ttl_seconds = math.ceil(delay_ms / 1000) + self._marker_grace_seconds
        # Written before sending: an eager task clears it on start.
        self._markers.put(key, invocation.run_at.isoformat(), ttl_seconds)
        try:
            task.apply_async(countdown=delay_ms / 1000)
        except Exception:
            self._markers.delete(key)
            raise

        logger.debug("task_scheduled", handler=handler_name, run_at=invocation.run_at.isoformat())
        return invocation

    def mark_started(self, handler_name: str) -> None:
        self._markers.delete(self._marker_key(handler_name))

    @staticmethod
    def _marker_key(handler_name: str) -> str:
        return f"{SCHEDULE_MARKER_PREFIX}{handler_name}"
