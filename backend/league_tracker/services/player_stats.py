from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from datetime import datetime, tzinfo

from ..storage import GameFilter, GameStore
from ..time_utils import to_storage
from .date_window import window_start
from .stats import current_streak, win_percentage


@dataclass(frozen=True)
class StatsResult:
    number_of_games: int = 0
    number_of_wins: int = 0
    win_percentage: float = 0.0
    current_streak: int = 0


def stats_filter(
    player_id: str,
    days: int | None = None,
    *,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> GameFilter:
    """Build the filter selecting ``player_id``'s games, optionally within a trailing window.

    ``now`` defaults to the current time in ``tz``; with no ``tz`` the host's
    local wall clock is used.
    """
    if days is None:
        return GameFilter(player_id=player_id)
    anchor = now if now is not None else datetime.now(tz)
    return GameFilter(player_id=player_id, played_from=to_storage(window_start(anchor, days)))


async def get_stats(
    store: GameStore,
    player_id: str,
    days: int | None = None,
    *,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> StatsResult:
    """Compute games, wins, win percentage and current streak for a player.

    The two counts and the history used for the streak are fetched
    concurrently. Any storage failure propagates unchanged.
    """
    games_filter = stats_filter(player_id, days, now=now, tz=tz)
    wins_filter = replace(games_filter, winners_only=True)

    number_of_games, number_of_wins, history = await asyncio.gather(
        store.count_games(games_filter),
        store.count_games(wins_filter),
        store.find_games(games_filter),
    )

    return StatsResult(
        number_of_games=number_of_games,
        number_of_wins=number_of_wins,
        win_percentage=win_percentage(number_of_wins, number_of_games),
        current_streak=current_streak(history, player_id),
    )
