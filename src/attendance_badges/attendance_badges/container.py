from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .auth.identity import ChainedTokenVerifier, GoogleTokenVerifier, StaticTokenVerifier, TokenVerifier
from .badges.generation import BadgeImageGenerator
from .badges.mysql_badge_repository import MySQLBadgeRepository
from .badges.service import BadgeQueue
from .badges.words import WordListProvider
from .badges.worker import BadgeFulfillmentWorker
from .cache.base import Cache
from .cache.memory import InMemoryTTLCache
from .cache.redis_cache import RedisCache
from .checkins.factory import CheckInStrategyFactory
from .checkins.mysql_checkin_repository import MySQLCheckInRepository
from .checkins.service import CheckInService
from .core.constants import BADGE_HANDLER_NAME
from .database.connection import DBConfig, DatabaseConnection
from .meetings.mysql_meeting_repository import MySQLMeetingRepository
from .meetings.service import MeetingService
from .scheduling.guard import SchedulerGuard
from .scheduling.scheduler import CeleryScheduler
from .storage.base import ObjectStorage
from .storage.local_storage import LocalObjectStorage
from .storage.s3_storage import S3ObjectStorage
from .tasks import process_pending_badges_task
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import PermissionGate, UserService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    users_repo: MySQLUserRepository
    meetings_repo: MySQLMeetingRepository
    checkins_repo: MySQLCheckInRepository
    badges_repo: MySQLBadgeRepository

    cache: Cache
    storage: ObjectStorage
    scheduler: CeleryScheduler
    token_verifier: TokenVerifier

    permission_gate: PermissionGate
    user_service: UserService
    meeting_service: MeetingService
    badge_queue: BadgeQueue
    checkin_service: CheckInService
    badge_worker: BadgeFulfillmentWorker


def _build_cache(settings: Any) -> Cache:
    redis_url = getattr(settings, "REDIS_URL", "")
    if redis_url:
        return RedisCache(redis_url)
    return InMemoryTTLCache()


def _build_storage(settings: Any) -> ObjectStorage:
    backend = str(getattr(settings, "STORAGE_BACKEND", "local")).lower()
    if backend == "s3":
        return S3ObjectStorage(
            getattr(settings, "S3_BUCKET", ""),
            prefix=getattr(settings, "S3_PREFIX", "badges/"),
            public_base_url=getattr(settings, "S3_PUBLIC_BASE_URL", None),
        )
    return LocalObjectStorage(
        getattr(settings, "LOCAL_STORAGE_DIR", "static/badges"),
        base_url=getattr(settings, "LOCAL_STORAGE_BASE_URL", "/static/badges"),
    )


def _build_token_verifier(settings: Any, allowed_domain: str) -> TokenVerifier:
    google = GoogleTokenVerifier(
        allowed_domain=allowed_domain,
        tokeninfo_url=getattr(settings, "TOKENINFO_URL", "https://oauth2.googleapis.com/tokeninfo"),
    )
    test_tokens = getattr(settings, "TEST_TOKENS", None) or {}
    if not test_tokens:
        return google
    return ChainedTokenVerifier(StaticTokenVerifier(test_tokens, allowed_domain=allowed_domain), google)


def build_container(settings: Any) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(getattr(settings, "DB_CONFIG")))
    allowed_domain = getattr(settings, "ALLOWED_DOMAIN")
    window_before = int(getattr(settings, "CHECKIN_WINDOW_BEFORE_MINUTES", 15))
    window_after = int(getattr(settings, "CHECKIN_WINDOW_AFTER_MINUTES", 5))

    users_repo = MySQLUserRepository(conn)
    meetings_repo = MySQLMeetingRepository(conn)
    checkins_repo = MySQLCheckInRepository(conn)
    badges_repo = MySQLBadgeRepository(conn)

    cache = _build_cache(settings)
    storage = _build_storage(settings)
    scheduler = CeleryScheduler(cache)

    permission_gate = PermissionGate(users_repo, allowed_domain=allowed_domain)
    user_service = UserService(users_repo, permission_gate)
    meeting_service = MeetingService(meetings_repo, permission_gate, default_window_before=window_before)
    badge_queue = BadgeQueue(badges_repo, SchedulerGuard(scheduler))
    checkin_service = CheckInService(
        checkins_repo,
        meetings_repo,
        permission_gate,
        user_service,
        badge_queue,
        strategy_factory=CheckInStrategyFactory(),
        window_before_minutes=window_before,
        window_after_minutes=window_after,
    )

    generator = BadgeImageGenerator(
        endpoint=getattr(settings, "GENERATION_ENDPOINT"),
        model=getattr(settings, "GENERATION_MODEL", "nanobanana"),
        width=getattr(settings, "GENERATION_WIDTH", 1024),
        height=getattr(settings, "GENERATION_HEIGHT", 1024),
        api_key=getattr(settings, "GENERATION_API_KEY", None),
        timeout=float(getattr(settings, "GENERATION_TIMEOUT", 120.0)),
    )
    badge_worker = BadgeFulfillmentWorker(
        badges_repo,
        WordListProvider(cache, url=getattr(settings, "WORD_LIST_URL")),
        generator,
        storage,
        claim_timeout_seconds=int(getattr(settings, "BADGE_CLAIM_TIMEOUT_SECONDS", 600)),
    )
    scheduler.register(BADGE_HANDLER_NAME, process_pending_badges_task)

    return Container(
        conn=conn,
        users_repo=users_repo,
        meetings_repo=meetings_repo,
        checkins_repo=checkins_repo,
        badges_repo=badges_repo,
        cache=cache,
        storage=storage,
        scheduler=scheduler,
        token_verifier=_build_token_verifier(settings, allowed_domain),
        permission_gate=permission_gate,
        user_service=user_service,
        meeting_service=meeting_service,
        badge_queue=badge_queue,
        checkin_service=checkin_service,
        badge_worker=badge_worker,
    )
