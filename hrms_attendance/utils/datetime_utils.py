"""
Timezone-aware datetime helpers.
- Timestamps (createdAt/updatedAt) are stored as ISO-8601 UTC with Z.
- Attendance and WFH dates are calendar dates in a named IANA zone.
"""
from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

UTC = timezone.utc

_TIME_FORMATS = ("%H:%M:%S", "%H:%M")


def now_utc() -> datetime:
    """Current time in UTC (timezone-aware)."""
    return datetime.now(UTC)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """If dt is naive, treat as UTC and return timezone-aware UTC. If already aware, convert to UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def get_zone(tz_name: str) -> ZoneInfo:
    """Resolve an IANA zone name; raises ValueError for unknown names."""
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown timezone: {tz_name}")


def local_date(tz_name: str, utc_now: Optional[datetime] = None) -> date:
    """Calendar date in tz_name for the given UTC instant (default now)."""
    now = ensure_utc(utc_now) if utc_now is not None else now_utc()
    return now.astimezone(get_zone(tz_name)).date()


def iso_8601_utc(dt: Optional[datetime]) -> Optional[str]:
    """ISO-8601 with Z for UTC."""
    if dt is None:
        return None
    s = ensure_utc(dt).isoformat()
    if s.endswith("+00:00"):
        s = s[:-6] + "Z"
    return s


def parse_event_time(value: Optional[str], on_date: date) -> Optional[datetime]:
    """
    Parse a client-supplied event time.

    Accepts full ISO datetimes ("2024-05-01T09:00:00Z") or a time of day
    ("09:00", "09:00:30") which is anchored to on_date. Returns None when the
    value cannot be parsed.
    """
    if not value:
        return None
    text = value.strip()
    for fmt in _TIME_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        return datetime.combine(on_date, parsed.time())
    try:
        dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is not None:
        dt = ensure_utc(dt).replace(tzinfo=None)
    return dt
