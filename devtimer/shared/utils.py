from datetime import date, datetime, timezone, tzinfo

MS_PER_SECOND = 1000


def to_epoch_ms(moment: datetime) -> int:
    """
    Converts an aware datetime to epoch milliseconds.
    Naive datetimes are treated as UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * MS_PER_SECOND)


def from_epoch_ms(value: int, tz: tzinfo) -> datetime:
    """Converts epoch milliseconds to an aware datetime in the given timezone."""
    return datetime.fromtimestamp(value / MS_PER_SECOND, tz=tz)


def local_date(value: int, tz: tzinfo) -> date:
    """Returns the calendar date an epoch-millisecond instant falls on in `tz`."""
    return from_epoch_ms(value, tz).date()


def duration_seconds(start_time: int, end_time: int) -> float:
    """Raw (unclamped) duration in seconds between two epoch-millisecond instants."""
    return (end_time - start_time) / MS_PER_SECOND
