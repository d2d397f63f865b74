import asyncio
import logging
import uuid

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..cache import player_stats_cache
from ..config import SERIES_GAMES_LIMIT, STATS_MAX_DAYS
from ..db import get_session
from ..exceptions import ProblemDetail, SeriesNotFound
from ..models import Game, GamePlayer, Series, series_player
from ..schemas import (
    GameOut,
    SeriesCreate,
    SeriesOut,
    SeriesPlayerOut,
    SeriesSummaryOut,
)
from ..storage import DuplicateKey, GameStore, commit_unique, get_game_store
from .games import load_player_names, to_game_out
from .players import player_stats

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/series",
    tags=["series"],
    responses={404: {"model": ProblemDetail}},
)


def _to_series_summary(series: Series) -> SeriesSummaryOut:
    return SeriesSummaryOut(id=series.id, name=series.name)


async def _get_series(session: AsyncSession, name: str, *, with_players: bool = False) -> Series:
    stmt = select(Series).where(Series.name == name)
    if with_players:
        stmt = stmt.options(selectinload(Series.players))
    series = (await session.execute(stmt)).scalar_one_or_none()
    if series is None:
        raise SeriesNotFound(name)
    return series


@router.get("", response_model=list[str])
async def list_series(session: AsyncSession = Depends(get_session)) -> list[str]:
    return list((await session.execute(select(Series.name).order_by(Series.name))).scalars().all())


@router.post(
    "",
    response_model=SeriesSummaryOut,
    status_code=status.HTTP_201_CREATED,
    responses={200: {"model": SeriesSummaryOut}},
)
async def create_series(
    body: SeriesCreate,
    response: Response,
    session: AsyncSession = Depends(get_session),
) -> SeriesSummaryOut:
    """Create a series; creating one that already exists is not an error."""
    session.add(Series(id=uuid.uuid4().hex, name=body.name))
    try:
        await commit_unique(session)
        logger.info("Added series %s", body.name)
    except DuplicateKey:
        response.status_code = status.HTTP_200_OK
    return _to_series_summary(await _get_series(session, body.name))


@router.get("/{name}", response_model=SeriesOut)
async def get_series(
    name: str,
    stats_days: int | None = Query(None, ge=1, le=STATS_MAX_DAYS),
    session: AsyncSession = Depends(get_session),
    store: GameStore = Depends(get_game_store),
) -> SeriesOut:
    series = await _get_series(session, name, with_players=True)
    stats = await asyncio.gather(
        *(player_stats(store, player.id, stats_days) for player in series.players)
    )
    return SeriesOut(
        id=series.id,
        name=series.name,
        players=[
            SeriesPlayerOut(name=player.name, stats=player_result)
            for player, player_result in zip(series.players, stats)
        ],
    )


@router.get("/{name}/games", response_model=list[GameOut])
async def list_series_games(
    name: str,
    limit: int = Query(SERIES_GAMES_LIMIT, ge=1, le=100),
    session: AsyncSession = Depends(get_session),
) -> list[GameOut]:
    series = await _get_series(session, name)
    games = (
        await session.execute(
            select(Game)
            .where(Game.series_id == series.id)
            .options(selectinload(Game.roster))
            .order_by(Game.played_at.desc(), Game.recorded_at.desc())
            .limit(limit)
        )
    ).scalars().all()
    names = await load_player_names(
        session, {pid for game in games for pid in game.players}
    )
    return [to_game_out(game, names, series_name=series.name) for game in games]


@router.delete("/{name}", status_code=204)
async def delete_series(name: str, session: AsyncSession = Depends(get_session)):
    """Delete a series together with its games; unknown names are ignored."""
    series = (
        await session.execute(select(Series).where(Series.name == name))
    ).scalar_one_or_none()
    if series is None:
        return Response(status_code=204)

    game_ids = select(Game.id).where(Game.series_id == series.id)
    affected = (
        await session.execute(
            select(GamePlayer.player_id).where(GamePlayer.game_id.in_(game_ids)).distinct()
        )
    ).scalars().all()
    await session.execute(delete(GamePlayer).where(GamePlayer.game_id.in_(game_ids)))
    await session.execute(delete(Game).where(Game.series_id == series.id))
    await session.execute(
        delete(series_player).where(series_player.c.series_id == series.id)
    )
    await session.execute(delete(Series).where(Series.id == series.id))
    await session.commit()
    await player_stats_cache.invalidate_players(affected)
    logger.info("Deleted series %s", name)
    return Response(status_code=204)
