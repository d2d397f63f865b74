from types import SimpleNamespace

import pytest

from league_tracker.services import current_streak, win_percentage


def _history(*outcomes):
    """Games newest first; ``"W"`` means player ``p`` was among the winners."""
    return [
        SimpleNamespace(winners=["p"] if outcome == "W" else ["q"])
        for outcome in outcomes
    ]


@pytest.mark.parametrize(
    "outcomes, expected",
    [
        ((), 0),
        (("W",), 1),
        (("L",), -1),
        (("W", "W", "L", "W"), 2),
        (("L", "L", "L"), -3),
        (("L", "W", "W", "W"), -1),
    ],
)
def test_current_streak(outcomes, expected):
    assert current_streak(_history(*outcomes), "p") == expected


def test_current_streak_is_never_zero_with_games():
    for outcomes in (("W",), ("L",), ("W", "L"), ("L", "W")):
        assert current_streak(_history(*outcomes), "p") != 0


@pytest.mark.parametrize(
    "wins, games, expected",
    [
        (1, 3, 33.3),
        (1, 6, 16.6),
        (2, 3, 66.6),
        (1, 1, 100.0),
        (0, 4, 0.0),
        (0, 0, 0.0),
    ],
)
def test_win_percentage_truncates(wins, games, expected):
    assert win_percentage(wins, games) == expected
