import re
from datetime import datetime, timezone

# Extended calendar form only: YYYY-MM-DD, optionally followed by a time.
_CALENDAR_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}(?:[T ].+)?$")


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def iso_now() -> str:
    return now_utc().isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 calendar date or date-time into an aware UTC datetime.

    Date-only and naive values are taken to be UTC. Week dates, ordinal dates
    and the basic (no separator) form are rejected with ``ValueError``, as is
    anything ``datetime.fromisoformat`` rejects.
    """
    if not isinstance(value, str) or not _CALENDAR_DATE_RE.match(value.strip()):
        raise ValueError("expected an ISO-8601 date")
    dt = datetime.fromisoformat(value.strip())
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
