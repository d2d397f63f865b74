import asyncio
from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from league_tracker.db import dispose_engine, get_sessionmaker
from league_tracker.models import Game, GamePlayer, Player, Series
from league_tracker.services import prepare_game
from league_tracker.time_utils import to_storage

DEMO_SERIES = "demo-series"
DEMO_PLAYERS = ["alex", "bella", "carlos", "diana"]

# (days ago, team away, team home, goals away, goals home, away names, home names)
DEMO_GAMES = [
    (6, "VAN", "MTL", 3, 2, ["alex", "bella"], ["carlos", "diana"]),
    (4, "TOR", "BOS", 1, 4, ["alex", "carlos"], ["bella", "diana"]),
    (1, "EDM", "CGY", 5, 5, ["bella", "carlos"], ["alex", "diana"]),
]


async def main():
    async with get_sessionmaker()() as s:
        series = (
            await s.execute(
                select(Series)
                .where(Series.name == DEMO_SERIES)
                .options(selectinload(Series.players))
            )
        ).scalar_one_or_none()
        if series is None:
            series = Series(id=DEMO_SERIES, name=DEMO_SERIES, players=[])
            s.add(series)

        existing_players = {
            x.name: x for x in (await s.execute(select(Player))).scalars().all()
        }
        for name in DEMO_PLAYERS:
            player = existing_players.get(name)
            if player is None:
                player = Player(id=f"demo-{name}", name=name, display_name=name.title())
                s.add(player)
                existing_players[name] = player
            if player not in series.players:
                series.players.append(player)
        await s.commit()

        have_games = (
            await s.execute(select(Game.id).where(Game.series_id == series.id).limit(1))
        ).scalar_one_or_none()
        if have_games is not None:
            return

        now = datetime.now(timezone.utc)
        for days_ago, team_away, team_home, goals_away, goals_home, away, home in DEMO_GAMES:
            prepared = prepare_game(
                goals_away,
                goals_home,
                [existing_players[n].id for n in away],
                [existing_players[n].id for n in home],
            )
            winners = set(prepared.winners)
            s.add(
                Game(
                    id=f"demo-game-{days_ago}",
                    series_id=series.id,
                    played_at=to_storage(now - timedelta(days=days_ago)),
                    team_away=team_away,
                    team_home=team_home,
                    goals_away=goals_away,
                    goals_home=goals_home,
                    winner=prepared.winner,
                    roster=[
                        GamePlayer(
                            player_id=pid,
                            side="away" if i < len(prepared.players_away) else "home",
                            position=i,
                            is_winner=pid in winners,
                        )
                        for i, pid in enumerate(prepared.players)
                    ],
                )
            )
        await s.commit()


async def run():
    try:
        await main()
    finally:
        await dispose_engine()


if __name__ == "__main__":
    asyncio.run(run())
