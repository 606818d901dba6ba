"""Clock access, timestamp formatting and parsing, and a simple timing helper."""

from __future__ import annotations

import logging
import random
import re
import time
from datetime import datetime, timedelta, timezone, tzinfo
from typing import NamedTuple, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

__all__ = [
    "DEFAULT_FORMAT",
    "TimeSpec",
    "Timer",
    "current_time_millis",
    "current_time_nanos",
    "random_int",
    "sleep_ms",
    "str_to_timestamp",
    "str_to_timestamp_local",
    "str_to_timestamp_utc",
    "to_time_str",
    "to_time_str_local",
    "to_time_str_utc",
    "to_timespec",
]

_log = logging.getLogger(__name__)

DEFAULT_FORMAT = "%Y-%m-%d%ET%H:%M:%E3S%Ez"
"""ISO-8601 style format with milliseconds and a ``+hh:mm`` offset."""

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)

# Extended directives on top of strftime: %ET (literal T), %Ez (+hh:mm offset),
# %E<n>S (seconds with n fractional digits), %E*S (seconds with full fraction).
_DIRECTIVE = re.compile(r"%(%|E(?:T|z|\*S|\d+S))")


class TimeSpec(NamedTuple):
    """A timestamp split into whole seconds and nanoseconds."""

    seconds: int
    nanoseconds: int


def current_time_millis() -> int:
    """Milliseconds since the Unix epoch."""
    return time.time_ns() // 1_000_000


def current_time_nanos() -> int:
    """Nanoseconds since the Unix epoch."""
    return time.time_ns()


def _load_zone(name: str) -> Optional[tzinfo]:
    """Resolve a zone name; ``None`` stands for the local zone."""
    if name == "localtime":
        return None
    if name == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        _log.error("Load time zone error: %s", name)
        return timezone.utc


def _offset(dt: datetime) -> str:
    total = int(dt.utcoffset().total_seconds())
    sign = "+" if total >= 0 else "-"
    hours, rest = divmod(abs(total), 3600)
    return f"{sign}{hours:02d}:{rest // 60:02d}"


def _render(fmt: str, dt: datetime) -> str:
    def expand(match: re.Match) -> str:
        token = match.group(1)
        if token == "%":
            return "%%"
        if token == "ET":
            return "T"
        if token == "Ez":
            return _offset(dt)
        micro = f"{dt.microsecond:06d}"
        if token == "E*S":
            fraction = micro.rstrip("0")
        else:
            digits = int(token[1:-1])
            fraction = (micro + "0" * digits)[:digits]
        seconds = f"{dt.second:02d}"
        return f"{seconds}.{fraction}" if fraction else seconds

    return dt.strftime(_DIRECTIVE.sub(expand, fmt))


def _parse_format(fmt: str) -> str:
    def expand(match: re.Match) -> str:
        token = match.group(1)
        if token == "%":
            return "%%"
        if token == "ET":
            return "T"
        if token == "Ez":
            return "%z"
        if token == "E0S":
            return "%S"
        return "%S.%f"

    return _DIRECTIVE.sub(expand, fmt)


def str_to_timestamp(text: str, fmt: str = DEFAULT_FORMAT, tz: str = "UTC") -> int:
    """Parse ``text`` with ``fmt`` into Unix milliseconds.

    Times without an explicit offset are taken to be in zone ``tz``
    (``"localtime"`` for the local zone). Raises ``ValueError`` when the text
    does not match the format.
    """
    zone = _load_zone(tz)
    try:
        parsed = datetime.strptime(text, _parse_format(fmt))
    except ValueError as exc:
        raise ValueError(f"cannot parse {text!r} with format {fmt!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.astimezone() if zone is None else parsed.replace(tzinfo=zone)
    return (parsed - _EPOCH) // _ONE_MS


def str_to_timestamp_utc(text: str, fmt: str = DEFAULT_FORMAT) -> int:
    """Parse ``text`` into Unix milliseconds, defaulting to UTC."""
    return str_to_timestamp(text, fmt, "UTC")


def str_to_timestamp_local(text: str, fmt: str = DEFAULT_FORMAT) -> int:
    """Parse ``text`` into Unix milliseconds, defaulting to the local zone."""
    return str_to_timestamp(text, fmt, "localtime")


def to_time_str(ts: int, fmt: str = DEFAULT_FORMAT, tz: str = "UTC") -> str:
    """Format Unix milliseconds ``ts`` with ``fmt`` in zone ``tz``."""
    zone = _load_zone(tz)
    instant = _EPOCH + timedelta(milliseconds=ts)
    dt = instant.astimezone() if zone is None else instant.astimezone(zone)
    return _render(fmt, dt)


def to_time_str_utc(ts: Optional[int] = None, fmt: str = DEFAULT_FORMAT) -> str:
    """Format ``ts`` (default: now) in UTC."""
    return to_time_str(current_time_millis() if ts is None else ts, fmt, "UTC")


def to_time_str_local(ts: Optional[int] = None, fmt: str = DEFAULT_FORMAT) -> str:
    """Format ``ts`` (default: now) in the local zone."""
    return to_time_str(current_time_millis() if ts is None else ts, fmt, "localtime")


def to_timespec(ts: int) -> TimeSpec:
    """Split milliseconds into seconds and nanoseconds, truncating toward zero."""
    seconds = abs(ts) // 1000 * (1 if ts >= 0 else -1)
    return TimeSpec(seconds, (ts - seconds * 1000) * 1_000_000)


def random_int(start: int, end: int) -> int:
    """A random integer in ``[start, end)``; raises ``ValueError`` if empty."""
    return random.randrange(start, end)


def sleep_ms(ms: int) -> None:
    """Sleep for ``ms`` milliseconds; non-positive values return at once."""
    if ms > 0:
        time.sleep(ms / 1000)


class Timer:
    """Measures wall time in milliseconds and logs it when the block ends."""

    def __init__(self) -> None:
        self._start = current_time_millis()
        self.cost_ms: Optional[int] = None

    def __enter__(self) -> "Timer":
        self._start = current_time_millis()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cost_ms = self.elapsed_ms()
        _log.info("cost %d", self.cost_ms)

    def elapsed_ms(self) -> int:
        """Milliseconds since the timer started."""
        return current_time_millis() - self._start