import logging
import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..cache import player_stats_cache
from ..config import STATS_MAX_DAYS, STATS_TIMEZONE
from ..db import get_session
from ..exceptions import PlayerNotFound, ProblemDetail, SeriesNotFound
from ..models import GamePlayer, Player, Series, series_player
from ..schemas import PlayerCreate, PlayerOut, StatsOut
from ..services import get_stats, stats_filter
from ..storage import DuplicateKey, GameStore, commit_unique, get_game_store

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/players",
    tags=["players"],
    responses={400: {"model": ProblemDetail}, 404: {"model": ProblemDetail}},
)


async def player_stats(
    store: GameStore,
    player_id: str,
    days: int | None = None,
    *,
    now: datetime | None = None,
) -> StatsOut:
    """Return a player's stats, served from the stats cache when possible.

    Windowed results are keyed on the window's lower bound, so a cached
    entry stops matching once the window moves past midnight.
    """
    if days is not None and now is None:
        now = datetime.now(STATS_TIMEZONE)
    played_from = stats_filter(player_id, days, now=now).played_from

    async def compute() -> StatsOut:
        result = await get_stats(store, player_id, days, now=now, tz=STATS_TIMEZONE)
        return StatsOut.from_result(result)

    stats = await player_stats_cache.get_or_compute((player_id, played_from), compute)
    return stats.model_copy(deep=True)


def _to_player_out(player: Player, stats: StatsOut | None = None) -> PlayerOut:
    return PlayerOut(
        id=player.id,
        name=player.name,
        displayName=player.display_name,
        role=player.role,
        series=[s.name for s in player.series],
        stats=stats,
    )


async def _load_player(session: AsyncSession, name: str) -> Player | None:
    return (
        await session.execute(
            select(Player)
            .where(Player.name == name.strip().lower())
            .options(selectinload(Player.series))
        )
    ).scalar_one_or_none()


@router.post(
    "",
    response_model=PlayerOut,
    status_code=status.HTTP_201_CREATED,
    responses={200: {"model": PlayerOut}},
)
async def create_player(
    body: PlayerCreate,
    response: Response,
    session: AsyncSession = Depends(get_session),
):
    """Register a player, or return the existing one with the same name.

    When ``series`` is given the player also joins that series.
    """
    normalized_name = body.name.lower()
    session.add(
        Player(
            id=uuid.uuid4().hex,
            name=normalized_name,
            display_name=body.name,
            role=body.role,
        )
    )
    try:
        await commit_unique(session)
        logger.info("Added player %s", normalized_name)
    except DuplicateKey:
        response.status_code = status.HTTP_200_OK

    player = await _load_player(session, normalized_name)
    if player is None:
        raise PlayerNotFound(normalized_name)

    if body.series:
        series = (
            await session.execute(
                select(Series)
                .where(Series.name == body.series)
                .options(selectinload(Series.players))
            )
        ).scalar_one_or_none()
        if series is None:
            raise SeriesNotFound(body.series)
        if all(member.id != player.id for member in series.players):
            logger.debug("Adding player %s to series %s", player.name, series.name)
            # back_populates keeps player.series in step
            series.players.append(player)
            await session.commit()

    return _to_player_out(player)


@router.get("/{name}", response_model=PlayerOut)
async def get_player(
    name: str,
    stats_days: int | None = Query(None, ge=1, le=STATS_MAX_DAYS),
    session: AsyncSession = Depends(get_session),
    store: GameStore = Depends(get_game_store),
):
    player = await _load_player(session, name)
    if player is None:
        raise PlayerNotFound(name)
    stats = await player_stats(store, player.id, stats_days)
    return _to_player_out(player, stats)


@router.delete("/{name}", status_code=204)
async def delete_player(name: str, session: AsyncSession = Depends(get_session)):
    player_id = (
        await session.execute(
            select(Player.id).where(Player.name == name.strip().lower())
        )
    ).scalar_one_or_none()
    if player_id is not None:
        await session.execute(delete(GamePlayer).where(GamePlayer.player_id == player_id))
        await session.execute(
            delete(series_player).where(series_player.c.player_id == player_id)
        )
        await session.execute(delete(Player).where(Player.id == player_id))
        await session.commit()
        await player_stats_cache.invalidate_players([player_id])
        logger.info("Deleted player %s", name.strip().lower())
    return Response(status_code=204)
