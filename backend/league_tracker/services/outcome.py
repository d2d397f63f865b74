"""Game outcome resolution and the derived fields stored with every game."""

from __future__ import annotations

from typing import Literal, NamedTuple, Sequence

from .validation import validate_rosters, validate_score

Side = Literal["away", "home"]

AWAY: Side = "away"
HOME: Side = "home"


class GameOutcome(NamedTuple):
    winning_side: Side
    winning_roster: list[str]


class PreparedGame(NamedTuple):
    players_away: list[str]
    players_home: list[str]
    players: list[str]
    winner: Side
    winners: list[str]


def resolve_outcome(
    goals_away: int,
    goals_home: int,
    players_away: Sequence[str],
    players_home: Sequence[str],
) -> GameOutcome:
    """Return the winning side and the roster that belongs to it.

    The away side wins only with a strictly higher score, so a tie resolves
    to the home side. Games in this league are not expected to end level;
    the rule is kept so stored results stay comparable.
    """

    validate_score(goals_away, field_name="goalsAway")
    validate_score(goals_home, field_name="goalsHome")
    if goals_away > goals_home:
        return GameOutcome(AWAY, list(players_away))
    return GameOutcome(HOME, list(players_home))


def prepare_game(
    goals_away: int,
    goals_home: int,
    players_away: Sequence[str],
    players_home: Sequence[str],
) -> PreparedGame:
    """Compute everything a game stores besides its raw inputs.

    Rosters are sorted by player id so stored games compare and display
    deterministically; the combined roster is away followed by home.
    """

    validate_rosters(players_away, players_home)
    away = sorted(players_away)
    home = sorted(players_home)
    outcome = resolve_outcome(goals_away, goals_home, away, home)
    return PreparedGame(
        players_away=away,
        players_home=home,
        players=away + home,
        winner=outcome.winning_side,
        winners=outcome.winning_roster,
    )
