from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: a member identified by email.

    Plain data object (no DB access code).
    """

    email: str
    role: Role
    name: str
    created_at: datetime
    current_streak: int = 0
    longest_streak: int = 0
