from __future__ import annotations

from typing import Optional

from ..common.datetime_utils import as_utc, to_naive_utc
from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import User
from .repository import UserRepository

_COLUMNS = "email, role, name, created_at, current_streak, longest_streak"


def _to_user(row: dict) -> User:
    return User(
        email=row["email"],
        role=Role(row["role"]),
        name=row["name"],
        created_at=as_utc(row["created_at"]),
        current_streak=int(row.get("current_streak") or 0),
        longest_streak=int(row.get("longest_streak") or 0),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def create_user(self, user: User) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT IGNORE INTO users(email, role, name, created_at, current_streak, longest_streak)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    user.email,
                    user.role.value,
                    user.name,
                    to_naive_utc(user.created_at),
                    user.current_streak,
                    user.longest_streak,
                ),
            )
            return cur.rowcount > 0

    def update_role(self, email: str, role: Role) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE users SET role=%s WHERE email=%s", (role.value, email))
            return cur.rowcount > 0

    def increment_streak(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            # MySQL applies SET assignments left to right, so longest_streak sees the new value.
            cur.execute(
                """
                UPDATE users
                SET current_streak = current_streak + 1,
                    longest_streak = GREATEST(longest_streak, current_streak)
                WHERE email=%s
                """,
                (email,),
            )
            if cur.rowcount == 0:
                return None
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def set_streaks(self, email: str, *, current_streak: int, longest_streak: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET current_streak=%s, longest_streak=%s WHERE email=%s",
                (int(current_streak), int(longest_streak), email),
            )
            return cur.rowcount > 0
