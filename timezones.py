from datetime import datetime, timezone
from functools import lru_cache
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from errors import InvalidDateTime, InvalidTimezone

DISPLAY_FORMAT = "%b %d, %Y at %I:%M %p"


@lru_cache(maxsize=None)
def _zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


def get_zone(name: Optional[str]) -> ZoneInfo:
    """
    Resolve an IANA zone name. Lookups are cached for the life of the process;
    ZoneInfo objects are immutable so the cache is safe to share.
    """
    if not name or not isinstance(name, str):
        raise InvalidTimezone(f"Invalid timezone '{name}'")
    try:
        return _zone(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        raise InvalidTimezone(f"Invalid timezone '{name}'")


def validate_timezone(name: Optional[str]) -> str:
    get_zone(name)
    return name


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(instant: datetime) -> str:
    return instant.astimezone(timezone.utc).isoformat()


def parse_instant(value: str) -> datetime:
    """Parse a stored ISO instant. Naive values are taken as UTC."""
    try:
        dt = datetime.fromisoformat(value)
    except (TypeError, ValueError):
        raise InvalidDateTime(f"Invalid date/time '{value}'")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def civil_to_instant(civil: str, zone_name: str) -> datetime:
    """
    Interpret a wall-clock string as civil time in zone_name and return the UTC instant.
    Strings that already carry an offset (e.g. "...Z" or "...+02:00") keep it.
    """
    zone = get_zone(zone_name)
    if not isinstance(civil, str) or not civil.strip():
        raise InvalidDateTime(f"Invalid date/time '{civil}'")
    text = civil.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        raise InvalidDateTime(f"Invalid date/time '{civil}', use ISO format YYYY-MM-DDTHH:MM")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=zone)
    return dt.astimezone(timezone.utc)


def normalize_to_minute(instant: datetime) -> datetime:
    return instant.replace(second=0, microsecond=0)


def to_zoned_display(instant: datetime, zone_name: str, pattern: str = DISPLAY_FORMAT) -> str:
    return instant.astimezone(get_zone(zone_name)).strftime(pattern)
