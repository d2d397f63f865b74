"""players, series, games and rosters

Revision ID: 0001_initial
Revises:
Create Date: 2024-10-01
"""

from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "player",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False, unique=True),
        sa.Column("display_name", sa.String(), nullable=True),
        sa.Column("role", sa.String(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_table(
        "series",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False, unique=True),
    )
    op.create_table(
        "series_player",
        sa.Column(
            "series_id",
            sa.String(),
            sa.ForeignKey("series.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "player_id",
            sa.String(),
            sa.ForeignKey("player.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )
    op.create_table(
        "game",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column(
            "series_id",
            sa.String(),
            sa.ForeignKey("series.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("played_at", sa.DateTime(), nullable=False),
        sa.Column("recorded_at", sa.DateTime(), nullable=False),
        sa.Column("team_away", sa.String(), nullable=False),
        sa.Column("team_home", sa.String(), nullable=False),
        sa.Column("goals_away", sa.Integer(), nullable=False),
        sa.Column("goals_home", sa.Integer(), nullable=False),
        sa.Column("winner", sa.String(length=4), nullable=False),
    )
    op.create_index("ix_game_played_at", "game", ["played_at"])
    op.create_table(
        "game_player",
        sa.Column(
            "game_id",
            sa.String(),
            sa.ForeignKey("game.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "player_id",
            sa.String(),
            sa.ForeignKey("player.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("side", sa.String(length=4), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("is_winner", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index(
        "ix_game_player_player_id_is_winner",
        "game_player",
        ["player_id", "is_winner"],
    )


def downgrade():
    op.drop_index("ix_game_player_player_id_is_winner", table_name="game_player")
    op.drop_table("game_player")
    op.drop_index("ix_game_played_at", table_name="game")
    op.drop_table("game")
    op.drop_table("series_player")
    op.drop_table("series")
    op.drop_table("player")
