from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from league_tracker.services import InvalidInput, window_start


@pytest.mark.parametrize(
    "anchor, days, expected",
    [
        (datetime(2017, 1, 3, 17, 9, 24), 1, datetime(2017, 1, 3)),
        (datetime(2017, 1, 1, 0, 0, 0), 1, datetime(2017, 1, 1)),
        (datetime(2017, 1, 3, 17, 9, 24), 7, datetime(2016, 12, 28)),
        (datetime(2017, 1, 3, 0, 0, 0), 7, datetime(2016, 12, 28)),
        (datetime(2016, 3, 1, 21, 26, 22), 2, datetime(2016, 2, 29)),
        (datetime(2016, 3, 31, 0, 26, 22), 31, datetime(2016, 3, 1)),
    ],
)
def test_window_start_truncates_to_midnight(anchor, days, expected):
    assert window_start(anchor, days) == expected


def test_window_start_crosses_leap_day():
    assert window_start(datetime(2024, 3, 1, 12, 30), 2) == datetime(2024, 2, 29)


def test_window_start_keeps_timezone():
    anchor = datetime(2023, 6, 10, 23, 59, tzinfo=timezone(timedelta(hours=-4)))
    start = window_start(anchor, 1)
    assert start == datetime(2023, 6, 10, tzinfo=timezone(timedelta(hours=-4)))
    assert start.utcoffset() == timedelta(hours=-4)


def test_window_start_over_dst_change_is_local_midnight():
    zone = ZoneInfo("America/Toronto")
    # DST began on 2023-03-12 in Toronto.
    anchor = datetime(2023, 3, 14, 9, 0, tzinfo=zone)
    start = window_start(anchor, 3)
    assert (start.year, start.month, start.day, start.hour, start.minute) == (
        2023,
        3,
        12,
        0,
        0,
    )
    assert start.utcoffset() == timedelta(hours=-5)


@pytest.mark.parametrize("days", [0, -1, 1.5, "7", None, True])
def test_window_start_rejects_bad_day_counts(days):
    with pytest.raises(InvalidInput):
        window_start(datetime(2017, 1, 3), days)


def test_window_start_rejects_non_datetime_anchor():
    with pytest.raises(InvalidInput):
        window_start("2017-01-03", 1)


def test_window_start_before_earliest_date_is_invalid_input():
    with pytest.raises(InvalidInput) as excinfo:
        window_start(datetime(2024, 1, 1), 1_000_000)
    assert isinstance(excinfo.value.__cause__, OverflowError)


def test_window_start_reaching_first_representable_day():
    assert window_start(datetime(1, 1, 10, 8), 10) == datetime(1, 1, 1)
