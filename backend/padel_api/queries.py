"""Read queries shared by the routers.

The match result queries are the ordering boundary for the streak analyzers:
a player's feed is sorted by ``played_at``, the group feed by ``player_id``
then ``played_at``. ``match_id`` breaks ties so equal timestamps stay stable.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .db_errors import is_missing_table_error
from .exceptions import GroupNotFound, PlayerNotFound
from .models import Group, Match, MatchResult, Partnership, Player
from .services import TeamMatch
from .time_utils import coerce_utc

logger = logging.getLogger(__name__)


async def get_group(session: AsyncSession, group_id: str) -> Group:
    group = await session.get(Group, group_id)
    if group is None:
        raise GroupNotFound(group_id)
    return group


async def get_player(session: AsyncSession, group_id: str, player_id: str) -> Player:
    player = (
        await session.execute(
            select(Player).where(
                Player.id == player_id,
                Player.group_id == group_id,
                Player.deleted_at.is_(None),
            )
        )
    ).scalar_one_or_none()
    if player is None:
        raise PlayerNotFound(player_id)
    return player


async def get_players(
    session: AsyncSession, group_id: str, player_ids: Iterable[str]
) -> dict[str, Player]:
    """Return active players of ``group_id`` by id; raise for any unknown id."""

    wanted = list(dict.fromkeys(player_ids))
    rows = (
        await session.execute(
            select(Player).where(
                Player.id.in_(wanted),
                Player.group_id == group_id,
                Player.deleted_at.is_(None),
            )
        )
    ).scalars().all()
    found = {p.id: p for p in rows}
    for pid in wanted:
        if pid not in found:
            raise PlayerNotFound(pid)
    return found


async def player_names(session: AsyncSession, player_ids: Iterable[str]) -> dict[str, str]:
    ids = set(player_ids)
    if not ids:
        return {}
    rows = (
        await session.execute(select(Player.id, Player.name).where(Player.id.in_(ids)))
    ).all()
    return {row.id: row.name for row in rows}


async def player_match_results(
    session: AsyncSession, group_id: str, player_id: str
) -> Sequence:
    stmt = (
        select(
            MatchResult.match_id,
            MatchResult.is_win,
            MatchResult.played_at,
        )
        .where(MatchResult.group_id == group_id, MatchResult.player_id == player_id)
        .order_by(MatchResult.played_at.asc(), MatchResult.match_id.asc())
    )
    return (await session.execute(stmt)).all()


async def group_match_results(session: AsyncSession, group_id: str) -> Sequence:
    stmt = (
        select(
            MatchResult.player_id,
            MatchResult.match_id,
            MatchResult.is_win,
            MatchResult.played_at,
        )
        .where(MatchResult.group_id == group_id)
        .order_by(
            MatchResult.player_id.asc(),
            MatchResult.played_at.asc(),
            MatchResult.match_id.asc(),
        )
    )
    return (await session.execute(stmt)).all()


async def group_matches(session: AsyncSession, group_id: str) -> list[TeamMatch]:
    rows = (
        await session.execute(
            select(Match)
            .where(Match.group_id == group_id)
            .order_by(Match.played_at.asc(), Match.id.asc())
        )
    ).scalars().all()
    return [
        TeamMatch(
            id=m.id,
            played_at=coerce_utc(m.played_at),
            team1=list(m.team1 or []),
            team2=list(m.team2 or []),
            sets=[tuple(s) for s in (m.sets or [])],
        )
        for m in rows
    ]


async def get_partnership(
    session: AsyncSession, group_id: str, player_a: str, player_b: str
) -> Partnership | None:
    """Return the aggregate for a pair in either order, ``None`` if unknown."""

    player1_id, player2_id = sorted((player_a, player_b))
    try:
        row = await session.get(Partnership, (player1_id, player2_id))
    except SQLAlchemyError as exc:
        if not is_missing_table_error(exc, Partnership.__tablename__):
            raise
        logger.warning("Partnership table missing; treating %s/%s as unpaired", player1_id, player2_id)
        await session.rollback()
        return None
    if row is None or row.group_id != group_id:
        return None
    return row
