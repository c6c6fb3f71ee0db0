from __future__ import annotations

import random
import secrets
import string
from datetime import datetime
from typing import Optional

from ..core.constants import BADGE_ID_PREFIX, BADGE_ID_SUFFIX_LENGTH

BASE36_ALPHABET = string.digits + string.ascii_uppercase


def base36_token(length: int, rng: Optional[random.Random] = None) -> str:
    rng = rng or random.SystemRandom()
    return "".join(rng.choice(BASE36_ALPHABET) for _ in range(length))


def new_badge_id(now: datetime, rng: Optional[random.Random] = None) -> str:
    """``B-<unixSeconds>-<3 base36 chars>``.

    Second granularity plus three random characters; callers retry on collision.
    """
    return f"{BADGE_ID_PREFIX}-{int(now.timestamp())}-{base36_token(BADGE_ID_SUFFIX_LENGTH, rng)}"


def new_checkin_id(now: datetime) -> str:
    return f"c_{int(now.timestamp() * 1000)}_{secrets.token_hex(3)}"


def new_meeting_id(now: datetime) -> str:
    return f"m_{int(now.timestamp() * 1000)}_{secrets.token_hex(3)}"
