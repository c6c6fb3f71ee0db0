from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import as_utc, to_naive_utc
from ..core.enums import MeetingStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Meeting
from .repository import MeetingRepository

_COLUMNS = """
    meeting_id, title, description, start_time, end_time, lat, lng, radius_m,
    check_in_window_before, check_in_window_after, status, created_at, last_edited
"""


def _optional_int(value) -> Optional[int]:
    return None if value is None else int(value)


def _to_meeting(r: dict) -> Meeting:
    return Meeting(
        meeting_id=r["meeting_id"],
        title=r["title"],
        description=r.get("description"),
        start_time=as_utc(r["start_time"]),
        end_time=as_utc(r["end_time"]),
        lat=float(r["lat"]),
        lng=float(r["lng"]),
        radius_m=float(r["radius_m"]),
        check_in_window_before=_optional_int(r.get("check_in_window_before")),
        check_in_window_after=_optional_int(r.get("check_in_window_after")),
        status=MeetingStatus(r["status"]),
        created_at=as_utc(r["created_at"]),
        last_edited=as_utc(r.get("last_edited")),
    )


class MySQLMeetingRepository(MeetingRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, meeting_id: str) -> Optional[Meeting]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM meetings WHERE meeting_id=%s", (meeting_id,))
            r = fetchone(cur)
            return _to_meeting(r) if r else None

    def create(self, meeting: Meeting) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO meetings(
                    meeting_id, title, description, start_time, end_time, lat, lng, radius_m,
                    check_in_window_before, check_in_window_after, status, created_at, last_edited
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    meeting.meeting_id,
                    meeting.title,
                    meeting.description,
                    to_naive_utc(meeting.start_time),
                    to_naive_utc(meeting.end_time),
                    meeting.lat,
                    meeting.lng,
                    meeting.radius_m,
                    meeting.check_in_window_before,
                    meeting.check_in_window_after,
                    meeting.status.value,
                    to_naive_utc(meeting.created_at),
                    to_naive_utc(meeting.last_edited) if meeting.last_edited else None,
                ),
            )

    def update(self, meeting: Meeting) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE meetings
                SET title=%s, description=%s, start_time=%s, end_time=%s, lat=%s, lng=%s, radius_m=%s,
                    check_in_window_before=%s, check_in_window_after=%s, status=%s, last_edited=%s
                WHERE meeting_id=%s
                """,
                (
                    meeting.title,
                    meeting.description,
                    to_naive_utc(meeting.start_time),
                    to_naive_utc(meeting.end_time),
                    meeting.lat,
                    meeting.lng,
                    meeting.radius_m,
                    meeting.check_in_window_before,
                    meeting.check_in_window_after,
                    meeting.status.value,
                    to_naive_utc(meeting.last_edited) if meeting.last_edited else None,
                    meeting.meeting_id,
                ),
            )
            return cur.rowcount > 0

    def list_scheduled_ending_after(self, now: datetime) -> Sequence[Meeting]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM meetings
                WHERE status=%s AND end_time > %s
                ORDER BY start_time ASC
                """,
                (MeetingStatus.SCHEDULED.value, to_naive_utc(now)),
            )
            return [_to_meeting(r) for r in fetchall(cur)]
