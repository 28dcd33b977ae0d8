import re
from datetime import datetime, timezone
from typing import Optional

# Accepted GPX <time> encodings, tried in order; first match wins.
# Formats ending in a literal "Z" are UTC.
TIMESTAMP_FORMATS = (
    "%Y-%m-%dT%H:%M:%S.%fZ",   # fractional seconds, UTC
    "%Y-%m-%dT%H:%M:%SZ",      # plain UTC
    "%Y-%m-%dT%H:%M:%S.%f%z",  # fractional seconds + offset
    "%Y-%m-%dT%H:%M:%S%z",     # offset, with or without colon
    "%Y-%m-%d %H:%M:%S.%f%z",  # space separated, fractional seconds
    "%Y-%m-%d %H:%M:%S%z",     # space separated + offset
)

# strptime's %f stops at microseconds; devices may write nanoseconds
_LONG_FRACTION = re.compile(r"(\.\d{6})\d+")


def parse_timestamp(text) -> Optional[datetime]:
    """Parse a GPX timestamp into an aware UTC datetime.

    Returns None when `text` is missing or matches none of
    TIMESTAMP_FORMATS. Never raises.
    """
    if not isinstance(text, str):
        return None
    s = text.strip()
    if s == "":
        return None
    s = _LONG_FRACTION.sub(r"\1", s)

    for fmt in TIMESTAMP_FORMATS:
        try:
            parsed = datetime.strptime(s, fmt)
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            # offsets at either end of the calendar can leave datetime's range
            return parsed.astimezone(timezone.utc)
        except (ValueError, OverflowError):
            continue
    return None


def format_instant(dt: datetime) -> str:
    """Format an instant as RFC 3339 in UTC, e.g. '2020-01-02T15:04:05.5Z'.

    Fractional seconds are written only when present, without trailing
    zeros. Naive datetimes are taken to be UTC.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt = dt.astimezone(timezone.utc)
    text = dt.strftime("%Y-%m-%dT%H:%M:%S")
    if dt.microsecond:
        text += f".{dt.microsecond:06d}".rstrip("0")
    return text + "Z"


def elapsed_seconds(start: datetime, end: datetime) -> float:
    """Seconds from `start` to `end` (negative when `end` is earlier)."""
    return (end - start).total_seconds()
