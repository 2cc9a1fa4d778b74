"""Timestamp parsing and display-zone conversion.

The tracker shows times like ``2 Oct 2025 01:43 UTC``; raw records fed in
by hand may carry ISO-8601 or one of a handful of numeric layouts. Every
input resolves to an aware UTC :class:`datetime`; text that cannot be read
falls back to "now".
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import NamedTuple
from zoneinfo import ZoneInfo

from flotilla_report.common.config import DEFAULT_TIMEZONE

log = logging.getLogger(__name__)

# Tried in order after ISO-8601; the first match wins, so an ambiguous
# "03/04/2025" reads as 3 April. Each pattern pins the digit widths that
# strptime alone would let through ("2025-10-02 2:20" is rejected); the
# tracker's literal "UTC" suffix is the only zone text accepted.
FORMATS: tuple[tuple[re.Pattern[str], str], ...] = tuple(
    (re.compile(pattern), fmt)
    for pattern, fmt in (
        (r"\d{1,2} [A-Za-z]{3} \d{4} \d{2}:\d{2} UTC", "%d %b %Y %H:%M UTC"),
        (r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}", "%Y-%m-%d %H:%M:%S"),
        (r"\d{2}/\d{2}/\d{4} \d{2}:\d{2}:\d{2}", "%d/%m/%Y %H:%M:%S"),
        (r"\d{2}/\d{2}/\d{4} \d{2}:\d{2}:\d{2}", "%m/%d/%Y %H:%M:%S"),
        (r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}", "%Y-%m-%d %H:%M"),
        (r"\d{2}/\d{2}/\d{4} \d{2}:\d{2}", "%d/%m/%Y %H:%M"),
    )
)

# Instants within a day of the datetime range edges cannot be shifted into
# every display zone; they are treated as unreadable.
EARLIEST = datetime.min.replace(tzinfo=timezone.utc) + timedelta(days=1)
LATEST = datetime.max.replace(tzinfo=timezone.utc) - timedelta(days=1)


class DisplayTime(NamedTuple):
    iso: str
    display: str


@lru_cache(maxsize=8)
def get_zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _parse_iso(text: str) -> datetime | None:
    try:
        return as_utc(datetime.fromisoformat(text))
    except (ValueError, OverflowError):
        return None


def _parse_formats(text: str) -> datetime | None:
    for pattern, fmt in FORMATS:
        if not pattern.fullmatch(text):
            continue
        try:
            return datetime.strptime(text, fmt).replace(tzinfo=timezone.utc)
        except (ValueError, OverflowError):
            continue
    return None


def parse_timestamp(text: str | None, now: datetime | None = None) -> datetime:
    """Return *text* as an aware UTC datetime, or *now* if it cannot be read."""
    fallback = as_utc(now) if now is not None else utcnow()
    if not isinstance(text, str) or not text.strip():
        log.debug("empty timestamp, using %s", fallback.isoformat())
        return fallback

    cleaned = text.strip()
    parsed = _parse_iso(cleaned) or _parse_formats(cleaned)
    if parsed is None:
        log.warning("invalid timestamp format: %r, using current time", text)
        return fallback
    if not EARLIEST <= parsed <= LATEST:
        log.warning("timestamp out of range: %r, using current time", text)
        return fallback
    return parsed


def format_utc(instant: datetime) -> str:
    return as_utc(instant).strftime("%Y-%m-%dT%H:%M:%SZ")


def to_display_zone(instant: datetime, tz: str = DEFAULT_TIMEZONE) -> DisplayTime:
    """Re-express *instant* in zone *tz* as (ISO with offset, human string)."""
    local = as_utc(instant).astimezone(get_zone(tz))
    return DisplayTime(
        iso=local.isoformat(timespec="seconds"),
        display=local.strftime("%Y-%m-%d %H:%M:%S"),
    )
