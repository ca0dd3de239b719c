"""Utility helpers shared by cogs and services.

Functions here are pure helpers (parsing/formatting) so they are easy to
test without a Discord connection.
"""
from __future__ import annotations

import json
import logging
import os
import tempfile
import time
from collections import deque
from datetime import datetime, timedelta
from pathlib import Path
from typing import Iterable, Optional

from belfast.constants import DEFAULT_SHORTEN_LIMIT, RATE_LIMIT_WINDOW_SECONDS

logger = logging.getLogger("belfast_bot")

_RELATIVE_UNITS = {
    "minute": "minutes",
    "minutes": "minutes",
    "hour": "hours",
    "hours": "hours",
    "day": "days",
    "days": "days",
}


def parse_relative_time(text: str, now: Optional[datetime] = None) -> Optional[datetime]:
    """Parse a relative time such as '2 days' or '30 minutes'.

    Returns the resulting point in time, or None if the value is not a
    number or the unit is not one of minute(s), hour(s) or day(s).
    """
    now = now or datetime.now()
    parts = (text or "").strip().lower().split()
    if len(parts) != 2:
        return None

    value, scale = parts
    try:
        amount = int(value)
    except ValueError:
        return None

    unit = _RELATIVE_UNITS.get(scale)
    if unit is None:
        return None
    return now + timedelta(**{unit: amount})


def shorten_text(text: Optional[str], limit: int = DEFAULT_SHORTEN_LIMIT) -> str:
    """Cut text down to `limit` characters, ending with an ellipsis when cut."""
    if not text:
        return ""
    if len(text) <= limit:
        return text
    return text[:limit - 3].rstrip() + "..."


def or_default(value, default: str) -> str:
    """Return str(value), or `default` when value is None or empty."""
    if value is None:
        return default
    text = str(value)
    return text if text else default


def comma_separated(items: Iterable[str]) -> str:
    return ", ".join(items)


def format_length(seconds: int) -> str:
    """Format a length in seconds as M:SS or H:MM:SS."""
    seconds = max(int(seconds), 0)
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def humanize_timedelta(delta: timedelta) -> str:
    """Return a human-friendly duration like '1d 3h 20m'."""
    secs = max(int(delta.total_seconds()), 0)
    days, secs = divmod(secs, 86400)
    hours, secs = divmod(secs, 3600)
    minutes, secs = divmod(secs, 60)
    parts = []
    if days:
        parts.append(f"{days}d")
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if secs or not parts:
        parts.append(f"{secs}s")
    return ' '.join(parts)


def is_intentional_command(content: str, prefix: str) -> bool:
    """Check whether the text after the prefix looks like a command.

    Messages such as '!!!' or '!1' share the prefix but carry no letters, so
    they are treated as ordinary chat.
    """
    if not content.lower().startswith(prefix.lower()):
        return False
    return any(c.isalpha() for c in content[len(prefix):])


def write_json_atomic(path: Path | str, data, *, indent: int = 2, ensure_ascii: bool = False) -> None:
    """Write JSON to `path` atomically.

    - Writes to a temporary file in the same directory, fsyncs, then atomically
      replaces the target file. This avoids corrupting the file if the process
      is killed mid-write.
    - Uses json.dump with the given indent and ensure_ascii options.
    """
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=p.name, dir=str(p.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=ensure_ascii, indent=indent)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, str(p))
    except Exception:
        try:
            os.remove(tmp)
        except OSError:
            pass
        raise


class RateLimiter:
    """Sliding-window rate limiter keyed by an arbitrary hashable.

    Allows at most `limit` calls per key within `window` seconds.
    """

    def __init__(self, limit: int, window: float = RATE_LIMIT_WINDOW_SECONDS, clock=time.monotonic):
        self.limit = limit
        self.window = window
        self._clock = clock
        self._calls: dict[object, deque[float]] = {}

    def hit(self, key) -> bool:
        """Record a call for `key`. Returns False if the limit is exceeded."""
        now = self._clock()
        calls = self._calls.setdefault(key, deque())
        while calls and now - calls[0] >= self.window:
            calls.popleft()
        if len(calls) >= self.limit:
            return False
        calls.append(now)
        return True
