"""UTC timestamp helpers shared by the log formats."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_ts(moment: datetime) -> str:
    """Render an aware datetime as ISO-8601 with milliseconds and a Z suffix."""
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def iso_from_epoch(seconds: float) -> str:
    return format_ts(datetime.fromtimestamp(seconds, tz=timezone.utc))


def parse_ts(value: object) -> float:
    """Parse an ISO-8601 timestamp to epoch seconds; unparseable values sort as 0."""
    if not value or not isinstance(value, str):
        return 0.0
    try:
        moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return 0.0
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.timestamp()


def today_utc(now: datetime | None = None) -> str:
    return (now or utc_now()).date().isoformat()


def yesterday_utc(now: datetime | None = None) -> str:
    return ((now or utc_now()) - timedelta(days=1)).date().isoformat()


def is_date_key(value: str) -> bool:
    """True for a calendar date in YYYY-MM-DD form."""
    if len(value) != 10:
        return False
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return False
    return True
