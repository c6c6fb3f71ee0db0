from __future__ import annotations

from typing import Any, Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_number(value: Any, field_name: str) -> float:
    if value is None or value == "" or isinstance(value, bool):
        raise ValidationError(f"{field_name} is required")
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")


def optional_number(value: Any, field_name: str) -> Optional[float]:
    if value is None or value == "":
        return None
    return require_number(value, field_name)


def require_non_negative_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer")
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")
    if number < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return number


def email_domain(email: str) -> str:
    _, _, domain = email.rpartition("@")
    return domain.lower()


def is_allowed_domain(email: Optional[str], allowed_domain: str) -> bool:
    if not email or "@" not in email:
        return False
    return email_domain(email) == allowed_domain.lower()
