from __future__ import annotations

from datetime import datetime
from typing import Callable

from ..common.datetime_utils import now_utc
from ..common.validators import is_allowed_domain, require_non_negative_int
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, EmailDomainError, NotFoundError, ValidationError
from ..logging_config import get_logger
from .model import User
from .repository import UserRepository

logger = get_logger(__name__)

# Higher rank satisfies every lower requirement.
ROLE_RANK = {
    Role.STANDARD: 0,
    Role.ELEVATED: 1,
    Role.ADMIN: 2,
}


def role_satisfies(actual: Role, required: Role) -> bool:
    return ROLE_RANK[actual] >= ROLE_RANK[required]


class PermissionGate:
    """Use case: resolve identities and check role sufficiency.

    Unknown addresses in the allowed domain are provisioned as ``standard``
    the first time they are referenced.
    """

    def __init__(
        self,
        users: UserRepository,
        *,
        allowed_domain: str,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._users = users
        self._allowed_domain = allowed_domain
        self._clock = clock

    @property
    def allowed_domain(self) -> str:
        return self._allowed_domain

    def get_or_provision(self, email: str) -> User:
        if not is_allowed_domain(email, self._allowed_domain):
            raise EmailDomainError(f"Invalid domain: {email}")

        user = self._users.get_by_email(email)
        if user:
            return user

        user = User(
            email=email,
            role=Role.STANDARD,
            name=email.split("@")[0],
            created_at=self._clock(),
        )
        if self._users.create_user(user):
            logger.info("user_auto_provisioned", email=email)
            return user

        # Another request provisioned the same address first.
        return self._users.get_by_email(email) or user

    def check_permission(self, email: str, required_role: Role) -> bool:
        user = self.get_or_provision(email)
        return role_satisfies(user.role, required_role)

    def require(self, email: str, required_role: Role, message: str = "Permission denied.") -> User:
        user = self.get_or_provision(email)
        if not role_satisfies(user.role, required_role):
            raise AuthorizationError(message)
        return user


class UserService:
    """Use case: manage roles and streak counters."""

    ASSIGNABLE_ROLES = (Role.ELEVATED, Role.STANDARD)

    def __init__(self, users: UserRepository, gate: PermissionGate):
        self._users = users
        self._gate = gate

    def update_role(self, *, requestor_email: str, target_email: str, new_role: str | Role) -> User:
        self._gate.require(
            requestor_email, Role.ELEVATED, "Permission denied: Only elevated users can update roles."
        )

        try:
            role = Role(new_role)
        except ValueError:
            raise ValidationError(f"Invalid role: {new_role}")
        if role not in self.ASSIGNABLE_ROLES:
            raise ValidationError(f"Invalid role: {role.value}")

        user = self._gate.get_or_provision(target_email)
        self._users.update_role(user.email, role)
        logger.info("user_role_updated", email=user.email, role=role.value, by=requestor_email)
        return self._users.get_by_email(user.email) or user

    def record_attendance(self, email: str) -> User:
        """Bump the streak counters after an accepted check-in."""
        user = self._users.increment_streak(email)
        if not user:
            raise NotFoundError(f"User not found: {email}")
        return user

    def set_streaks(self, *, requestor_email: str, target_email: str, current_streak, longest_streak) -> User:
        self._gate.require(requestor_email, Role.ADMIN, "Permission denied")

        current = require_non_negative_int(current_streak, "currentStreak")
        longest = require_non_negative_int(longest_streak, "longestStreak")
        if longest < current:
            raise ValidationError("longestStreak must be at least currentStreak")

        user = self._gate.get_or_provision(target_email)
        self._users.set_streaks(user.email, current_streak=current, longest_streak=longest)
        return self._users.get_by_email(user.email) or user
