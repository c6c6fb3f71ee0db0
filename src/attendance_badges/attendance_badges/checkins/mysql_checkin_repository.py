from __future__ import annotations

from typing import Optional, Sequence, Tuple

from ..common.datetime_utils import as_utc, to_naive_utc
from ..core.enums import CheckInStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import CheckInRecord
from .repository import CheckInRepository

_COLUMNS = "checkin_id, meeting_id, user_email, timestamp, lat, lng, status, was_on_time, override, excused"


def _to_record(r: dict) -> CheckInRecord:
    return CheckInRecord(
        checkin_id=r["checkin_id"],
        meeting_id=r["meeting_id"],
        user_email=r["user_email"],
        timestamp=as_utc(r["timestamp"]),
        lat=None if r.get("lat") is None else float(r["lat"]),
        lng=None if r.get("lng") is None else float(r["lng"]),
        status=CheckInStatus(r["status"]),
        was_on_time=bool(r["was_on_time"]),
        override=bool(r["override"]),
        excused=bool(r["excused"]),
    )


class MySQLCheckInRepository(CheckInRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_meeting_and_user(self, meeting_id: str, user_email: str) -> Optional[CheckInRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM checkins WHERE meeting_id=%s AND user_email=%s",
                (meeting_id, user_email),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def insert_if_absent(self, record: CheckInRecord) -> Tuple[CheckInRecord, bool]:
        with db_cursor(self._conn_factory) as (_, cur):
            # UNIQUE(meeting_id, user_email) turns a concurrent duplicate into a no-op.
            cur.execute(
                """
                INSERT IGNORE INTO checkins(
                    checkin_id, meeting_id, user_email, timestamp, lat, lng,
                    status, was_on_time, override, excused
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    record.checkin_id,
                    record.meeting_id,
                    record.user_email,
                    to_naive_utc(record.timestamp),
                    record.lat,
                    record.lng,
                    record.status.value,
                    int(record.was_on_time),
                    int(record.override),
                    int(record.excused),
                ),
            )
            if cur.rowcount == 1:
                return record, True

            cur.execute(
                f"SELECT {_COLUMNS} FROM checkins WHERE meeting_id=%s AND user_email=%s",
                (record.meeting_id, record.user_email),
            )
            r = fetchone(cur)
            return (_to_record(r) if r else record), False

    def list_for_meeting(self, meeting_id: str) -> Sequence[CheckInRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM checkins WHERE meeting_id=%s ORDER BY timestamp ASC",
                (meeting_id,),
            )
            return [_to_record(r) for r in fetchall(cur)]
