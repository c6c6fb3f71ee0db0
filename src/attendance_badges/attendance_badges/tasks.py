"""
Celery tasks for badge fulfillment.

The web process imports this module to enqueue; the worker runs it:

    celery -A attendance_badges.tasks:celery_app worker -Q badges --concurrency=1
"""
from __future__ import annotations

import dataclasses
import importlib
from typing import Any, Dict, Optional

from celery import Celery
from dotenv import load_dotenv

from config import get_settings_module

from .core.constants import BADGE_HANDLER_NAME, BADGE_TASK_NAME, BADGE_TASK_QUEUE
from .logging_config import get_logger, setup_logging

logger = get_logger(__name__)

load_dotenv(override=False)
settings = importlib.import_module(get_settings_module())


def make_celery(settings: Any) -> Celery:
    app = Celery(
        "attendance_badges",
        broker=getattr(settings, "CELERY_BROKER_URL"),
        backend=getattr(settings, "CELERY_RESULT_BACKEND", None),
    )
    app.conf.update(
        task_serializer="json",
        accept_content=["json"],
        result_serializer="json",
        timezone="UTC",
        enable_utc=True,
        task_ignore_result=True,
        task_routes={BADGE_TASK_NAME: {"queue": BADGE_TASK_QUEUE}},
        task_always_eager=bool(getattr(settings, "CELERY_TASK_ALWAYS_EAGER", False)),
        task_time_limit=30 * 60,
        task_soft_time_limit=25 * 60,
        worker_hijack_root_logger=False,
    )
    return app


celery_app = make_celery(settings)

_container: Optional[Any] = None


def bind_container(container: Any) -> None:
    """Share an already-built container (the web process) with the tasks."""
    global _container
    _container = container


def _get_container() -> Any:
    global _container
    if _container is None:
        from .container import build_container

        setup_logging(debug=bool(getattr(settings, "DEBUG", False)))
        _container = build_container(settings)
    return _container


@celery_app.task(name=BADGE_TASK_NAME)
def process_pending_badges_task() -> Dict[str, int]:
    container = _get_container()
    container.scheduler.mark_started(BADGE_HANDLER_NAME)
    summary = container.badge_worker.process_pending_badges()
    return dataclasses.asdict(summary)
