from typing import Any, List, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, Field, field_validator, model_validator, ConfigDict

from .services import StatsResult
from .time_utils import require_utc

NAME_PATTERN = r"^[A-Za-z0-9 ._'-]+$"


def _normalize_name(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a string")
    trimmed = " ".join(value.split())
    if not trimmed:
        raise ValueError(f"{field_name} must not be empty")
    return trimmed


def _split_player_names(value: Any) -> Any:
    """Accept rosters as a list of names or a comma-separated string."""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    if isinstance(value, (list, tuple)):
        names = []
        for item in value:
            if not isinstance(item, str):
                raise ValueError("player names must be strings")
            if item.strip():
                names.append(_normalize_name(item, "player name"))
        return names
    return value


class StatsOut(BaseModel):
    numberOfGames: int = 0
    numberOfWins: int = 0
    winPercentage: float = 0.0
    currentStreak: int = 0

    @classmethod
    def from_result(cls, result: StatsResult) -> "StatsOut":
        return cls(
            numberOfGames=result.number_of_games,
            numberOfWins=result.number_of_wins,
            winPercentage=result.win_percentage,
            currentStreak=result.current_streak,
        )


class PlayerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50, pattern=NAME_PATTERN)
    series: Optional[str] = Field(default=None, max_length=100)
    role: Optional[Literal["admin", "user"]] = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("name", mode="before")
    @classmethod
    def _validate_name(cls, value: Any) -> str:
        return _normalize_name(value, "name")

    @field_validator("series", mode="before")
    @classmethod
    def _validate_series(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValueError("series must be a string")
        return value.strip() or None


class PlayerOut(BaseModel):
    id: str
    name: str
    displayName: Optional[str] = None
    role: Optional[str] = None
    series: List[str] = Field(default_factory=list)
    stats: Optional[StatsOut] = None


class SeriesCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, pattern=NAME_PATTERN)

    model_config = ConfigDict(extra="forbid")

    @field_validator("name", mode="before")
    @classmethod
    def _validate_name(cls, value: Any) -> str:
        return _normalize_name(value, "name")


class SeriesSummaryOut(BaseModel):
    id: str
    name: str


class SeriesPlayerOut(BaseModel):
    name: str
    stats: StatsOut


class SeriesOut(BaseModel):
    id: str
    name: str
    players: List[SeriesPlayerOut] = Field(default_factory=list)


class GameCreate(BaseModel):
    """Payload for recording a game, or updating one when ``game`` is set."""

    game: Optional[str] = None
    series: str = Field(..., min_length=1)
    teamAway: str = Field(..., min_length=1, max_length=100)
    teamHome: str = Field(..., min_length=1, max_length=100)
    goalsAway: int = Field(..., ge=0)
    goalsHome: int = Field(..., ge=0)
    playersAway: List[str]
    playersHome: List[str]
    date: Optional[datetime] = None

    @field_validator("teamAway", "teamHome", "series", mode="before")
    @classmethod
    def _strip_labels(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("goalsAway", "goalsHome", mode="before")
    @classmethod
    def _reject_bool_scores(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("scores must be integers")
        return value

    @field_validator("playersAway", "playersHome", mode="before")
    @classmethod
    def _split_players(cls, value: Any) -> Any:
        return _split_player_names(value)

    @field_validator("date")
    @classmethod
    def _normalize_date(cls, v: datetime | None) -> datetime | None:
        return require_utc(v, field_name="date")

    @model_validator(mode="after")
    def _require_players(self) -> "GameCreate":
        if not self.playersAway:
            raise ValueError("playersAway must include at least one player")
        if not self.playersHome:
            raise ValueError("playersHome must include at least one player")
        return self


class GameIdOut(BaseModel):
    """Schema returned after recording a game."""

    id: str


class GameOut(BaseModel):
    """Detailed game information returned by the API."""

    id: str
    series: Optional[str] = None
    date: datetime
    teamAway: str
    teamHome: str
    goalsAway: int
    goalsHome: int
    winner: Literal["away", "home"]
    playersAway: List[str] = Field(default_factory=list)
    playersHome: List[str] = Field(default_factory=list)
    winners: List[str] = Field(default_factory=list)
