from __future__ import annotations

import threading

from ..core.constants import BADGE_HANDLER_NAME, BADGE_TRIGGER_DELAY_MS
from ..logging_config import get_logger
from .scheduler import Scheduler

logger = get_logger(__name__)


class SchedulerGuard:
    """Keeps at most one pending invocation of the badge handler scheduled."""

    def __init__(
        self,
        scheduler: Scheduler,
        *,
        handler_name: str = BADGE_HANDLER_NAME,
        delay_ms: int = BADGE_TRIGGER_DELAY_MS,
    ):
        self._scheduler = scheduler
        self._handler_name = handler_name
        self._delay_ms = delay_ms
        self._lock = threading.Lock()

    def ensure_trigger(self) -> bool:
        """Schedule the handler unless one is already pending. Returns True if it scheduled."""

        with self._lock:
            if any(i.handler_name == self._handler_name for i in self._scheduler.list_scheduled()):
                return False
            self._scheduler.schedule(self._handler_name, self._delay_ms)
        logger.debug("badge_trigger_scheduled", handler=self._handler_name, delay_ms=self._delay_ms)
        return True
