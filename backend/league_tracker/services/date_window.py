from __future__ import annotations

from datetime import datetime, time, timedelta

from .validation import InvalidInput, validate_day_count


def window_start(anchor: datetime, days: int) -> datetime:
    """Return the inclusive lower bound of a trailing window of ``days`` days.

    ``anchor`` is truncated to midnight of its own wall clock (naive values
    are treated as local time, aware values keep their ``tzinfo``) and then
    moved back ``days - 1`` calendar days. A one-day window therefore starts
    at the anchor's own midnight; a window of N days covers the anchor's day
    plus the N - 1 days before it.

    The subtraction is done on the calendar date and midnight is rebuilt
    afterwards, so month ends, leap days and DST changes do not shift the
    result.

    Raises:
        InvalidInput: If ``anchor`` is not a datetime or ``days`` is not a
            positive integer.
    """

    if not isinstance(anchor, datetime):
        raise InvalidInput("anchor must be a datetime.")
    validate_day_count(days)

    # Keep the "- 1": the anchor's own day counts as the first day.
    try:
        first_day = anchor.date() - timedelta(days=days - 1)
    except OverflowError as exc:
        raise InvalidInput("days reaches before the earliest representable date.") from exc
    return datetime.combine(first_day, time.min, tzinfo=anchor.tzinfo)
