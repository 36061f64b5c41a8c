from sqlalchemy import (
    Column,
    String,
    DateTime,
    ForeignKey,
    JSON,
    Integer,
    Float,
    Boolean,
    Index,
)
from sqlalchemy.sql import func
from .db import Base


class Group(Base):
    __tablename__ = "play_group"
    id = Column(String, primary_key=True)
    slug = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Player(Base):
    __tablename__ = "player"
    id = Column(String, primary_key=True)
    group_id = Column(String, ForeignKey("play_group.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    # Latest ELO; NULL until the player has a rated match.
    elo = Column(Float, nullable=True)
    deleted_at = Column(DateTime(timezone=True), nullable=True)


class Match(Base):
    __tablename__ = "match"
    id = Column(String, primary_key=True)
    group_id = Column(String, ForeignKey("play_group.id"), nullable=False, index=True)
    played_at = Column(DateTime(timezone=True), nullable=False)
    team1 = Column(JSON, nullable=False)  # [player_id, player_id]
    team2 = Column(JSON, nullable=False)
    sets = Column(JSON, nullable=False)  # [[team1_games, team2_games], ...]
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class MatchResult(Base):
    """One row per (player, match); the feed the streak analyzers consume."""

    __tablename__ = "player_match_result"
    id = Column(String, primary_key=True)
    group_id = Column(String, ForeignKey("play_group.id"), nullable=False)
    match_id = Column(String, ForeignKey("match.id"), nullable=False)
    player_id = Column(String, ForeignKey("player.id"), nullable=False)
    is_win = Column(Boolean, nullable=False)
    played_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index(
            "ix_player_match_result_group_player_played",
            "group_id",
            "player_id",
            "played_at",
        ),
    )


class Partnership(Base):
    """Per-pair aggregate refreshed outside the request path.

    ``player1_id`` sorts before ``player2_id``.
    """

    __tablename__ = "materialized_partnerships"
    player1_id = Column(String, ForeignKey("player.id"), primary_key=True)
    player2_id = Column(String, ForeignKey("player.id"), primary_key=True)
    group_id = Column(String, ForeignKey("play_group.id"), nullable=False, index=True)
    matches_played = Column(Integer, nullable=False, default=0)
    wins = Column(Integer, nullable=False, default=0)
    losses = Column(Integer, nullable=False, default=0)
    win_rate = Column(Float, nullable=False, default=0.0)
    avg_elo_change_when_paired = Column(Float, nullable=False, default=0.0)
    avg_individual_elo_change = Column(Float, nullable=False, default=0.0)
    elo_change_delta = Column(Float, nullable=False, default=0.0)
    common_opponents_beaten = Column(Integer, nullable=False, default=0)
    first_played_together = Column(DateTime(timezone=True), nullable=True)
    last_played_together = Column(DateTime(timezone=True), nullable=True)
    refreshed_at = Column(DateTime(timezone=True), server_default=func.now())
