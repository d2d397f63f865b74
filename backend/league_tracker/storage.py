"""Storage collaborator used by the stats engine.

The engine never talks to SQLAlchemy directly. It receives a ``GameStore``
that can count games matching a ``GameFilter`` and return the matching games
newest first, with their winning rosters filled in.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from fastapi import Request
from sqlalchemy import Select, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload, sessionmaker

from . import db
from .models import Game, GamePlayer

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Base class for failures reported by the storage layer."""


class StorageUnavailable(StorageError):
    """A query could not be completed."""


class DuplicateKey(StorageError):
    """A write collided with a unique constraint."""


@dataclass(frozen=True)
class GameFilter:
    player_id: str
    winners_only: bool = False
    played_from: datetime | None = None  # inclusive, naive UTC


@dataclass(frozen=True)
class GameRecord:
    id: str
    series_id: str
    played_at: datetime
    team_away: str
    team_home: str
    goals_away: int
    goals_home: int
    winner: str
    players_away: list[str] = field(default_factory=list)
    players_home: list[str] = field(default_factory=list)
    winners: list[str] = field(default_factory=list)

    @property
    def players(self) -> list[str]:
        return self.players_away + self.players_home

    @classmethod
    def from_model(cls, game: Game) -> "GameRecord":
        return cls(
            id=game.id,
            series_id=game.series_id,
            played_at=game.played_at,
            team_away=game.team_away,
            team_home=game.team_home,
            goals_away=game.goals_away,
            goals_home=game.goals_home,
            winner=game.winner,
            players_away=game.players_away,
            players_home=game.players_home,
            winners=game.winners,
        )


class GameStore(Protocol):
    async def count_games(self, games_filter: GameFilter) -> int:
        ...

    async def find_games(
        self, games_filter: GameFilter, *, limit: int | None = None
    ) -> list[GameRecord]:
        ...


def _matching_game_ids(games_filter: GameFilter) -> Select:
    stmt = select(GamePlayer.game_id).where(
        GamePlayer.player_id == games_filter.player_id
    )
    if games_filter.winners_only:
        stmt = stmt.where(GamePlayer.is_winner.is_(True))
    return stmt


def _apply_game_filter(stmt: Select, games_filter: GameFilter) -> Select:
    stmt = stmt.where(Game.id.in_(_matching_game_ids(games_filter)))
    if games_filter.played_from is not None:
        stmt = stmt.where(Game.played_at >= games_filter.played_from)
    return stmt


class SqlGameStore:
    """``GameStore`` backed by the SQLAlchemy models.

    Each call opens its own session so independent queries may run at the
    same time.
    """

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    async def count_games(self, games_filter: GameFilter) -> int:
        stmt = _apply_game_filter(
            select(func.count()).select_from(Game), games_filter
        )
        try:
            async with self._session_factory() as session:
                return (await session.execute(stmt)).scalar_one()
        except SQLAlchemyError as exc:
            logger.warning("Counting games for %s failed: %s", games_filter.player_id, exc)
            raise StorageUnavailable("counting games failed") from exc

    async def find_games(
        self, games_filter: GameFilter, *, limit: int | None = None
    ) -> list[GameRecord]:
        stmt = (
            _apply_game_filter(select(Game), games_filter)
            .options(selectinload(Game.roster))
            .order_by(Game.played_at.desc(), Game.recorded_at.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        try:
            async with self._session_factory() as session:
                rows = (await session.execute(stmt)).scalars().all()
                return [GameRecord.from_model(game) for game in rows]
        except SQLAlchemyError as exc:
            logger.warning("Loading games for %s failed: %s", games_filter.player_id, exc)
            raise StorageUnavailable("loading games failed") from exc


async def commit_unique(session: AsyncSession) -> None:
    """Commit ``session``, reporting unique-constraint collisions as ``DuplicateKey``."""

    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        raise DuplicateKey(str(exc.orig)) from exc


def get_game_store(request: Request) -> GameStore:
    """FastAPI dependency returning the application's ``GameStore``.

    The store is built on first use and kept on ``app.state`` for the life of
    the application.
    """

    store = getattr(request.app.state, "game_store", None)
    if store is None:
        store = SqlGameStore(db.get_sessionmaker())
        request.app.state.game_store = store
    return store
