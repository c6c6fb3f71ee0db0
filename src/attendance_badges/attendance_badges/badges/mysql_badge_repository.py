from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..common.datetime_utils import as_utc, to_naive_utc
from ..core.enums import BadgeStatus
from ..core.exceptions import DuplicateKeyError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import BadgeJob
from .repository import BadgeRepository

_COLUMNS = """
    badge_id, owner_email, original_owner_email, meeting_id, created_at,
    prompt, artifact_url, status, claim_token, claimed_at
"""


def _to_job(r: dict) -> BadgeJob:
    return BadgeJob(
        badge_id=r["badge_id"],
        owner_email=r["owner_email"],
        original_owner_email=r["original_owner_email"],
        meeting_id=r["meeting_id"],
        created_at=as_utc(r["created_at"]),
        prompt=r.get("prompt") or "",
        artifact_url=r.get("artifact_url") or "",
        status=BadgeStatus(r["status"]),
        claim_token=r.get("claim_token"),
        claimed_at=as_utc(r.get("claimed_at")),
    )


class MySQLBadgeRepository(BadgeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_pending(self, job: BadgeJob) -> None:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO badges(
                        badge_id, owner_email, original_owner_email, meeting_id, created_at,
                        prompt, artifact_url, status
                    )
                    VALUES(%s,%s,%s,%s,%s,'','',%s)
                    """,
                    (
                        job.badge_id,
                        job.owner_email,
                        job.original_owner_email,
                        job.meeting_id,
                        to_naive_utc(job.created_at),
                        BadgeStatus.PENDING.value,
                    ),
                )
        except IntegrityError as e:
            if is_duplicate_key(e):
                raise DuplicateKeyError(f"Badge already exists: {job.badge_id}") from e
            raise

    def get_by_id(self, badge_id: str) -> Optional[BadgeJob]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM badges WHERE badge_id=%s", (badge_id,))
            r = fetchone(cur)
            return _to_job(r) if r else None

    def find_for_owner_and_meeting(self, owner_email: str, meeting_id: str) -> Optional[BadgeJob]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM badges
                WHERE original_owner_email=%s AND meeting_id=%s
                ORDER BY created_at ASC
                LIMIT 1
                """,
                (owner_email, meeting_id),
            )
            r = fetchone(cur)
            return _to_job(r) if r else None

    def list_by_owner(self, owner_email: str, *, status: Optional[BadgeStatus] = None) -> Sequence[BadgeJob]:
        clauses = ["owner_email=%s"]
        params: list[object] = [owner_email]
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        where = " AND ".join(clauses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM badges WHERE {where} ORDER BY created_at ASC", tuple(params))
            return [_to_job(r) for r in fetchall(cur)]

    def list_all(self) -> Sequence[BadgeJob]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM badges ORDER BY created_at ASC")
            return [_to_job(r) for r in fetchall(cur)]

    def list_claimable(self, *, stale_before: datetime) -> Sequence[BadgeJob]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM badges
                WHERE status=%s OR (status=%s AND claimed_at < %s)
                ORDER BY created_at ASC
                """,
                (BadgeStatus.PENDING.value, BadgeStatus.PROCESSING.value, to_naive_utc(stale_before)),
            )
            return [_to_job(r) for r in fetchall(cur)]

    def claim(self, *, claim_token: str, claimed_at: datetime, stale_before: datetime) -> Sequence[BadgeJob]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE badges
                SET status=%s, claim_token=%s, claimed_at=%s
                WHERE status=%s OR (status=%s AND claimed_at < %s)
                """,
                (
                    BadgeStatus.PROCESSING.value,
                    claim_token,
                    to_naive_utc(claimed_at),
                    BadgeStatus.PENDING.value,
                    BadgeStatus.PROCESSING.value,
                    to_naive_utc(stale_before),
                ),
            )
            cur.execute(
                f"SELECT {_COLUMNS} FROM badges WHERE claim_token=%s AND status=%s ORDER BY created_at ASC",
                (claim_token, BadgeStatus.PROCESSING.value),
            )
            return [_to_job(r) for r in fetchall(cur)]

    def release_claim(self, claim_token: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE badges
                SET status=%s, claim_token=NULL, claimed_at=NULL
                WHERE claim_token=%s AND status=%s
                """,
                (BadgeStatus.PENDING.value, claim_token, BadgeStatus.PROCESSING.value),
            )
            return int(cur.rowcount)

    def mark_ready(self, badge_id: str, *, claim_token: str, prompt: str, artifact_url: str) -> bool:
        return self._finish(badge_id, claim_token, BadgeStatus.READY, prompt, artifact_url)

    def mark_error(self, badge_id: str, *, claim_token: str, prompt: str) -> bool:
        return self._finish(badge_id, claim_token, BadgeStatus.ERROR, prompt, "")

    def _finish(self, badge_id: str, claim_token: str, status: BadgeStatus, prompt: str, artifact_url: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE badges
                SET status=%s, prompt=%s, artifact_url=%s
                WHERE badge_id=%s AND claim_token=%s AND status=%s
                """,
                (status.value, prompt, artifact_url, badge_id, claim_token, BadgeStatus.PROCESSING.value),
            )
            return cur.rowcount > 0
