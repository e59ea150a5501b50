"""Clock helpers shared by both tiers.

All instants are taken in UTC and only converted to a local zone when
rendered.
"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_instant(moment: datetime) -> str:
    """Render an aware datetime as ISO-8601 with millisecond precision.

    UTC renders with a ``Z`` suffix, every other zone with its offset.
    """
    if moment.tzinfo is None:
        raise ValueError("format_instant requires an aware datetime")
    rendered = moment.isoformat(timespec="milliseconds")
    if moment.tzname() == "UTC" and rendered.endswith("+00:00"):
        return rendered[: -len("+00:00")] + "Z"
    return rendered
