"""Identity and ordering helpers.

INVARIANT: IDs are permanent. Once generated, an ID never changes.
"""

from __future__ import annotations

import re
import threading
import time
import uuid
from datetime import UTC, datetime

# Roles become part of derived method names, so they must be identifiers.
ROLE_PATTERN = re.compile(r"^[a-z][a-z0-9_]*$")
FIELD_PATTERN = re.compile(r"^[a-z][a-zA-Z0-9_]*$")

_sort_lock = threading.Lock()
_last_sort_value = 0


def generate_gid() -> str:
    """Return a new globally unique identifier (32 hex chars)."""
    return uuid.uuid4().hex


def next_sort_value() -> int:
    """Strictly increasing insertion-order key (nanosecond based)."""
    global _last_sort_value
    with _sort_lock:
        value = max(time.time_ns(), _last_sort_value + 1)
        _last_sort_value = value
        return value


def utc_now() -> datetime:
    """Current time in UTC."""
    return datetime.now(UTC)


def validate_role(role: str) -> bool:
    """Check whether *role* can be used as a relationship name."""
    return ROLE_PATTERN.match(role) is not None
