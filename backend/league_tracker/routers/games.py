import logging
import uuid
from collections import Counter
from typing import Iterable

from fastapi import APIRouter, Depends, Request
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..cache import player_stats_cache
from ..db import get_session
from ..exceptions import (
    GameNotFound,
    PlayerNotInSeries,
    ProblemDetail,
    SeriesNotFound,
    http_problem,
)
from ..models import Game, GamePlayer, Player, Series
from ..rate_limit import game_write_rate_limit, limiter
from ..schemas import GameCreate, GameIdOut, GameOut
from ..services import prepare_game
from ..time_utils import coerce_utc, to_storage

logger = logging.getLogger(__name__)

# Resource-only prefix; versioning is added in main.py
router = APIRouter(
    prefix="/games",
    tags=["games"],
    responses={400: {"model": ProblemDetail}, 404: {"model": ProblemDetail}},
)


async def load_player_names(
    session: AsyncSession, player_ids: Iterable[str]
) -> dict[str, str]:
    ids = {pid for pid in player_ids if pid}
    if not ids:
        return {}
    rows = (
        await session.execute(select(Player.id, Player.name).where(Player.id.in_(ids)))
    ).all()
    return {row.id: row.name for row in rows}


def to_game_out(
    game: Game, names: dict[str, str], *, series_name: str | None = None
) -> GameOut:
    def _names(player_ids: list[str]) -> list[str]:
        return [names.get(pid, pid) for pid in player_ids]

    return GameOut(
        id=game.id,
        series=series_name,
        date=coerce_utc(game.played_at),
        teamAway=game.team_away,
        teamHome=game.team_home,
        goalsAway=game.goals_away,
        goalsHome=game.goals_home,
        winner=game.winner,
        playersAway=_names(game.players_away),
        playersHome=_names(game.players_home),
        winners=_names(game.winners),
    )


def _roster_ids(names: list[str], members: dict[str, str], series_name: str) -> list[str]:
    ids = []
    for name in names:
        pid = members.get(name.lower())
        if pid is None:
            raise PlayerNotInSeries(name, series_name)
        ids.append(pid)
    return ids


async def record_game(body: GameCreate, session: AsyncSession) -> GameIdOut:
    """Create a game, or overwrite the game named by ``body.game``.

    Roster names are resolved against the series' members; the stored
    rosters, winner and winning roster come from ``prepare_game``.
    """
    game: Game | None = None
    if body.game:
        game = (
            await session.execute(
                select(Game)
                .where(Game.id == body.game)
                .options(selectinload(Game.roster))
            )
        ).scalar_one_or_none()
        if game is None:
            raise GameNotFound(body.game)
        logger.info("Updating game %s", game.id)

    series = (
        await session.execute(
            select(Series)
            .where(Series.name == body.series)
            .options(selectinload(Series.players))
        )
    ).scalar_one_or_none()
    if series is None:
        raise SeriesNotFound(body.series)

    members = {player.name: player.id for player in series.players}
    away_ids = _roster_ids(body.playersAway, members, series.name)
    home_ids = _roster_ids(body.playersHome, members, series.name)

    dup_ids = [pid for pid, cnt in Counter(away_ids + home_ids).items() if cnt > 1]
    if dup_ids:
        id_to_name = {pid: name for name, pid in members.items()}
        raise http_problem(
            status_code=400,
            detail="duplicate players: " + ", ".join(sorted(id_to_name[pid] for pid in dup_ids)),
            code="game_duplicate_players",
        )

    prepared = prepare_game(body.goalsAway, body.goalsHome, away_ids, home_ids)

    previous_players: list[str] = []
    if game is None:
        game = Game(id=uuid.uuid4().hex)
        session.add(game)
    else:
        previous_players = game.players
        game.roster.clear()
        await session.flush()

    game.series_id = series.id
    game.team_away = body.teamAway
    game.team_home = body.teamHome
    game.goals_away = body.goalsAway
    game.goals_home = body.goalsHome
    game.winner = prepared.winner
    if body.date is not None:
        game.played_at = to_storage(body.date)

    winners = set(prepared.winners)
    away_count = len(prepared.players_away)
    game.roster = [
        GamePlayer(
            player_id=pid,
            side="away" if position < away_count else "home",
            position=position,
            is_winner=pid in winners,
        )
        for position, pid in enumerate(prepared.players)
    ]
    await session.commit()

    await player_stats_cache.invalidate_players([*previous_players, *prepared.players])
    logger.info("Recorded game %s in series %s", game.id, series.name)
    return GameIdOut(id=game.id)


@router.post("", response_model=GameIdOut)
@limiter.limit(game_write_rate_limit)
async def record_game_route(
    request: Request,
    body: GameCreate,
    session: AsyncSession = Depends(get_session),
) -> GameIdOut:
    return await record_game(body, session)


@router.get("/{game_id}", response_model=GameOut)
async def get_game(game_id: str, session: AsyncSession = Depends(get_session)) -> GameOut:
    game = (
        await session.execute(
            select(Game)
            .where(Game.id == game_id)
            .options(selectinload(Game.roster), selectinload(Game.series))
        )
    ).scalar_one_or_none()
    if game is None:
        raise GameNotFound(game_id)
    names = await load_player_names(session, game.players)
    return to_game_out(game, names, series_name=game.series.name)
