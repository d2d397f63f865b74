from typing import Any, Sequence


class InvalidInput(ValueError):
    """Raised when an engine function is called with arguments outside its contract."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


def validate_score(value: Any, *, field_name: str = "score") -> int:
    """Return ``value`` if it is a non-negative integer score.

    Booleans are rejected explicitly since ``bool`` is a subclass of ``int``.
    """

    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput(f"{field_name} must be an integer.")
    if value < 0:
        raise InvalidInput(f"{field_name} must be >= 0.")
    return value


def validate_day_count(value: Any) -> int:
    """Return ``value`` if it is a usable trailing-window length in days."""

    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput("days must be an integer.")
    if value < 1:
        raise InvalidInput("days must be >= 1.")
    return value


def validate_rosters(players_away: Sequence[str], players_home: Sequence[str]) -> None:
    """Validate the two sides of a game.

    Rules:
    - Each side needs at least one player
    - A player may appear only once in a game
    """

    if not players_away:
        raise InvalidInput("Away roster must include at least one player.")
    if not players_home:
        raise InvalidInput("Home roster must include at least one player.")

    seen: set[str] = set()
    duplicates: list[str] = []
    for pid in [*players_away, *players_home]:
        if pid in seen and pid not in duplicates:
            duplicates.append(pid)
        seen.add(pid)
    if duplicates:
        raise InvalidInput("duplicate players: " + ", ".join(sorted(duplicates)))
