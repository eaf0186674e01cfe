"""Canonical ID and timestamp factories.

All modules import from here instead of defining local _uuid()/_now() copies.

ID Categories
-------------
1. Meeting IDs: UUID v4 strings, generated once by ``Meeting.create``.
2. Member / group IDs: opaque strings owned by the membership directory.
3. Event IDs: UUID v4 strings, one per emitted domain event.

Timestamp Rule
--------------
All timestamps are ``datetime`` with ``tzinfo=timezone.utc``, never naive.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone


def new_id() -> str:
    """Generate a new UUID v4 string.  Use for all internal entity IDs."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)
