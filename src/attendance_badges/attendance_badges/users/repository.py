from __future__ import annotations

from typing import Optional, Protocol

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Services depend on this interface, not on a concrete database.
    """

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(self, user: User) -> bool:
        """Insert ``user``; returns False if the email already exists."""

        raise NotImplementedError

    def update_role(self, email: str, role: Role) -> bool:
        raise NotImplementedError

    def increment_streak(self, email: str) -> Optional[User]:
        """current_streak += 1 and longest_streak = max(longest, current), in one write."""

        raise NotImplementedError

    def set_streaks(self, email: str, *, current_streak: int, longest_streak: int) -> bool:
        raise NotImplementedError
