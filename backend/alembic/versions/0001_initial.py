from alembic import op
import sqlalchemy as sa

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "play_group",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("slug", sa.String(), nullable=False, unique=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_table(
        "player",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("group_id", sa.String(), sa.ForeignKey("play_group.id"), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("elo", sa.Float(), nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_player_group_id", "player", ["group_id"])
    op.create_table(
        "match",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("group_id", sa.String(), sa.ForeignKey("play_group.id"), nullable=False),
        sa.Column("played_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("team1", sa.JSON(), nullable=False),
        sa.Column("team2", sa.JSON(), nullable=False),
        sa.Column("sets", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_match_group_id", "match", ["group_id"])
    op.create_table(
        "player_match_result",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("group_id", sa.String(), sa.ForeignKey("play_group.id"), nullable=False),
        sa.Column("match_id", sa.String(), sa.ForeignKey("match.id"), nullable=False),
        sa.Column("player_id", sa.String(), sa.ForeignKey("player.id"), nullable=False),
        sa.Column("is_win", sa.Boolean(), nullable=False),
        sa.Column("played_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "ix_player_match_result_group_player_played",
        "player_match_result",
        ["group_id", "player_id", "played_at"],
    )
    op.create_table(
        "materialized_partnerships",
        sa.Column("player1_id", sa.String(), sa.ForeignKey("player.id"), primary_key=True),
        sa.Column("player2_id", sa.String(), sa.ForeignKey("player.id"), primary_key=True),
        sa.Column("group_id", sa.String(), sa.ForeignKey("play_group.id"), nullable=False),
        sa.Column("matches_played", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("wins", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("losses", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("win_rate", sa.Float(), nullable=False, server_default="0"),
        sa.Column("avg_elo_change_when_paired", sa.Float(), nullable=False, server_default="0"),
        sa.Column("avg_individual_elo_change", sa.Float(), nullable=False, server_default="0"),
        sa.Column("elo_change_delta", sa.Float(), nullable=False, server_default="0"),
        sa.Column("common_opponents_beaten", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("first_played_together", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_played_together", sa.DateTime(timezone=True), nullable=True),
        sa.Column("refreshed_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index(
        "ix_materialized_partnerships_group_id",
        "materialized_partnerships",
        ["group_id"],
    )


def downgrade():
    op.drop_index("ix_materialized_partnerships_group_id", table_name="materialized_partnerships")
    op.drop_table("materialized_partnerships")
    op.drop_index("ix_player_match_result_group_player_played", table_name="player_match_result")
    op.drop_table("player_match_result")
    op.drop_index("ix_match_group_id", table_name="match")
    op.drop_table("match")
    op.drop_index("ix_player_group_id", table_name="player")
    op.drop_table("player")
    op.drop_table("play_group")
