from __future__ import annotations

import html
import math
import os
from datetime import datetime, timezone
from typing import Any

from dateutil.parser import isoparse

_HTML_ESCAPE_QUOTE = True  # keep quotes escaped for attributes

_SECONDS_PER_DAY = 60 * 60 * 24


def esc(s: str | None) -> str:
    """
    Escape text for HTML contexts (titles, names, links). Do NOT wrap or add tags.
    """
    if s is None:
        return ""
    return html.escape(str(s), quote=_HTML_ESCAPE_QUOTE)


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def now_iso() -> str:
    """
    UTC ISO-8601 timestamp with 'Z' suffix.
    """
    return now_utc().isoformat().replace("+00:00", "Z")


def getenv_str(name: str, default: str | None = None) -> str | None:
    """
    Typed wrapper for environment access.
    """
    val = os.getenv(name)
    return val if val is not None else default


def as_utc(dt: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse an ISO-8601 timestamp as returned by the remote store.

    Accepts datetimes (returned as-is, assumed UTC when naive), 'Z' suffixes,
    fractional seconds of any precision (the store trims trailing zeros) and
    bare dates. Empty values give None; garbage raises ValueError.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    return as_utc(isoparse(str(value).strip()))


def days_until(deadline: datetime | None, now: datetime | None = None) -> int | None:
    """
    Whole days left before `deadline`, rounded up (so "due in 3 hours" is 1).
    Negative once the deadline has passed; None when there is no deadline.
    """
    if deadline is None:
        return None
    ref = as_utc(now) if now is not None else now_utc()
    delta = (as_utc(deadline) - ref).total_seconds()
    return math.ceil(delta / _SECONDS_PER_DAY)


def format_deadline(deadline: datetime | None) -> str | None:
    """Short US-style date, e.g. 'Mar 5, 2026'."""
    if deadline is None:
        return None
    return f"{deadline.strftime('%b')} {deadline.day}, {deadline.year}"
