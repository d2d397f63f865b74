"""Internal application services (pure helpers, plus the stats aggregator)."""

from .validation import InvalidInput
from .outcome import GameOutcome, PreparedGame, prepare_game, resolve_outcome
from .date_window import window_start
from .stats import current_streak, win_percentage
from .player_stats import StatsResult, get_stats, stats_filter

__all__ = [
    "InvalidInput",
    "GameOutcome",
    "PreparedGame",
    "prepare_game",
    "resolve_outcome",
    "window_start",
    "current_streak",
    "win_percentage",
    "StatsResult",
    "get_stats",
    "stats_filter",
]
