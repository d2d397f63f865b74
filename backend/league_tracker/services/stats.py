from __future__ import annotations

from typing import Protocol, Sequence


class HasWinners(Protocol):
    winners: Sequence[str]


def current_streak(games: Sequence[HasWinners], player_id: str) -> int:
    """Return the signed streak ending at the most recent game.

    Args:
        games: The player's games, most recent first. The order is trusted,
            not checked; unsorted input gives a wrong streak.
        player_id: Player whose outcomes are read from each game's winners.

    Returns:
        The number of consecutive games, counted from the most recent one,
        sharing that game's outcome: positive for wins, negative for losses.
        ``0`` only when there are no games.
    """
    if not games:
        return 0
    is_winning = player_id in games[0].winners
    length = next(
        (
            index
            for index, game in enumerate(games)
            if (player_id in game.winners) != is_winning
        ),
        len(games),
    )
    return length if is_winning else -length


def win_percentage(wins: int, games: int) -> float:
    """Return ``wins / games`` as a percentage truncated to one decimal.

    Truncation, not rounding: 1 of 6 gives ``16.6``.
    """
    if games <= 0:
        return 0.0
    return (1000 * wins // games) / 10
