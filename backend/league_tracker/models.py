from sqlalchemy.orm import relationship
from sqlalchemy import (
    Column,
    String,
    DateTime,
    ForeignKey,
    Integer,
    Boolean,
    Index,
    Table,
)
from sqlalchemy.sql import func
from .db import Base
from .time_utils import utcnow_naive

series_player = Table(
    "series_player",
    Base.metadata,
    Column(
        "series_id",
        String,
        ForeignKey("series.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "player_id",
        String,
        ForeignKey("player.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Player(Base):
    __tablename__ = "player"
    id = Column(String, primary_key=True)
    name = Column(String, nullable=False, unique=True)  # always lower-case
    display_name = Column(String, nullable=True)
    role = Column(String, nullable=True)  # "admin" | "user"
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    series = relationship(
        "Series",
        secondary=series_player,
        back_populates="players",
        order_by="Series.name",
    )
    roster_entries = relationship("GamePlayer", back_populates="player")


class Series(Base):
    __tablename__ = "series"
    id = Column(String, primary_key=True)
    name = Column(String, nullable=False, unique=True)

    players = relationship(
        "Player",
        secondary=series_player,
        back_populates="series",
        order_by="Player.name",
    )
    games = relationship("Game", back_populates="series")


class Game(Base):
    __tablename__ = "game"
    id = Column(String, primary_key=True)
    series_id = Column(
        String, ForeignKey("series.id", ondelete="CASCADE"), nullable=False
    )
    played_at = Column(DateTime, nullable=False, default=utcnow_naive)  # naive UTC
    recorded_at = Column(DateTime, nullable=False, default=utcnow_naive)
    team_away = Column(String, nullable=False)
    team_home = Column(String, nullable=False)
    goals_away = Column(Integer, nullable=False)
    goals_home = Column(Integer, nullable=False)
    winner = Column(String(4), nullable=False)  # "away" | "home"

    series = relationship("Series", back_populates="games")
    roster = relationship(
        "GamePlayer",
        cascade="all, delete-orphan",
        order_by="GamePlayer.position",
        back_populates="game",
    )

    __table_args__ = (Index("ix_game_played_at", "played_at"),)

    @property
    def players(self) -> list[str]:
        return [entry.player_id for entry in self.roster]

    @property
    def players_away(self) -> list[str]:
        return [entry.player_id for entry in self.roster if entry.side == "away"]

    @property
    def players_home(self) -> list[str]:
        return [entry.player_id for entry in self.roster if entry.side == "home"]

    @property
    def winners(self) -> list[str]:
        return [entry.player_id for entry in self.roster if entry.is_winner]


class GamePlayer(Base):
    """One player's place in a game's combined roster."""

    __tablename__ = "game_player"
    game_id = Column(
        String, ForeignKey("game.id", ondelete="CASCADE"), primary_key=True
    )
    player_id = Column(
        String, ForeignKey("player.id", ondelete="CASCADE"), primary_key=True
    )
    side = Column(String(4), nullable=False)  # "away" | "home"
    position = Column(Integer, nullable=False)
    is_winner = Column(Boolean, nullable=False, default=False)

    game = relationship("Game", back_populates="roster")
    player = relationship("Player", back_populates="roster_entries")

    __table_args__ = (
        Index("ix_game_player_player_id_is_winner", "player_id", "is_winner"),
    )
