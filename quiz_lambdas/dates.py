from datetime import datetime, timezone


def now_iso():
    return datetime.now(timezone.utc).isoformat()


def parse_timestamp(value):
    """Parse an ISO-8601 date or datetime; naive values are taken as UTC.

    Returns None when ``value`` is not a parseable string.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value.strip():
        try:
            dt = datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt
