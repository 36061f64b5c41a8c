import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_session
from ..db_errors import is_missing_table_error
from ..exceptions import PartnershipNotFound, ProblemDetail, http_problem
from ..models import Partnership
from ..queries import (
    get_group,
    get_partnership,
    get_player,
    group_matches,
    player_names,
)
from ..schemas import (
    PartnershipDetailOut,
    PartnershipListOut,
    PartnershipMatchOut,
    PartnershipOut,
    PlayerPartnershipsOut,
    RankedPartnerOut,
)
from ..services import (
    calculate_synergy_score,
    get_elo_delta_indicator,
    get_matches_badge,
    get_partnership_tier,
    match_winner,
    rank_partners,
)
from ..time_utils import coerce_utc

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/groups/{group_id}/partnerships",
    tags=["partnerships"],
    responses={404: {"model": ProblemDetail}},
)

# Pairs below this many matches are too noisy to rank.
DEFAULT_MIN_MATCHES = 3
BEST_PARTNERS_LIMIT = 3

SortBy = Literal[
    "win_rate",
    "matches_played",
    "elo_change_delta",
    "last_played_together",
    "synergy_score",
]
_SQL_SORT_COLUMNS = {
    "win_rate": Partnership.win_rate,
    "matches_played": Partnership.matches_played,
    "elo_change_delta": Partnership.elo_change_delta,
    "last_played_together": Partnership.last_played_together,
}
# Unique tiebreaker so offset paging never repeats or skips a pair.
_PAIR_ORDER = (Partnership.player1_id, Partnership.player2_id)


def _partnership_out(p: Partnership, names: dict[str, str]) -> PartnershipOut:
    return PartnershipOut(
        player1Id=p.player1_id,
        player2Id=p.player2_id,
        player1Name=names.get(p.player1_id, "Unknown"),
        player2Name=names.get(p.player2_id, "Unknown"),
        matchesPlayed=p.matches_played,
        wins=p.wins,
        losses=p.losses,
        winRate=p.win_rate,
        avgEloChangeWhenPaired=p.avg_elo_change_when_paired,
        avgIndividualEloChange=p.avg_individual_elo_change,
        eloChangeDelta=p.elo_change_delta,
        commonOpponentsBeaten=p.common_opponents_beaten,
        firstPlayedTogether=coerce_utc(p.first_played_together),
        lastPlayedTogether=coerce_utc(p.last_played_together),
        synergyScore=calculate_synergy_score(p),
        tier=get_partnership_tier(p.win_rate),
        matchesBadge=get_matches_badge(p.matches_played),
        eloDeltaIndicator=get_elo_delta_indicator(p.elo_change_delta),
    )


async def _fetch(session: AsyncSession, stmt) -> list:
    """Run ``stmt``; an absent partnership table reads as no rows."""

    try:
        return list((await session.execute(stmt)).scalars().all())
    except SQLAlchemyError as exc:
        if not is_missing_table_error(exc, Partnership.__tablename__):
            raise
        logger.warning("Partnership table missing; returning no partnerships")
        await session.rollback()
        return []


def _filters(group_id: str, player_id: Optional[str], min_matches: int) -> list:
    conditions = [
        Partnership.group_id == group_id,
        Partnership.matches_played >= min_matches,
    ]
    if player_id:
        conditions.append(
            or_(Partnership.player1_id == player_id, Partnership.player2_id == player_id)
        )
    return conditions


# GET /api/v0/groups/{group_id}/partnerships
@router.get("", response_model=PartnershipListOut)
async def list_partnerships(
    group_id: str,
    player_id: Optional[str] = Query(None, alias="playerId"),
    min_matches: int = Query(DEFAULT_MIN_MATCHES, alias="minMatches", ge=0),
    sort_by: SortBy = Query("win_rate", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_session),
):
    await get_group(session, group_id)
    conditions = _filters(group_id, player_id, min_matches)
    descending = sort_order == "desc"

    if sort_by == "synergy_score":
        # Computed per row, so sort and page in Python.
        rows = await _fetch(
            session, select(Partnership).where(*conditions).order_by(*_PAIR_ORDER)
        )
        rows.sort(key=calculate_synergy_score, reverse=descending)
        total = len(rows)
        rows = rows[offset : offset + limit]
    else:
        column = _SQL_SORT_COLUMNS[sort_by]
        order = column.desc() if descending else column.asc()
        stmt = (
            select(Partnership)
            .where(*conditions)
            .order_by(order.nulls_last(), *_PAIR_ORDER)
            .offset(offset)
            .limit(limit)
        )
        rows = await _fetch(session, stmt)
        total = 0
        if rows or offset:
            counted = await _fetch(
                session,
                select(func.count()).select_from(Partnership).where(*conditions),
            )
            total = counted[0] if counted else 0

    names = await player_names(
        session, [pid for p in rows for pid in (p.player1_id, p.player2_id)]
    )
    return PartnershipListOut(
        partnerships=[_partnership_out(p, names) for p in rows],
        total=total,
        page=offset // limit + 1,
        perPage=limit,
    )


# GET /api/v0/groups/{group_id}/partnerships/players/{player_id}/best-partners
@router.get(
    "/players/{player_id}/best-partners", response_model=PlayerPartnershipsOut
)
async def best_partners(
    group_id: str,
    player_id: str,
    session: AsyncSession = Depends(get_session),
):
    player_name = (await get_player(session, group_id, player_id)).name
    rows = await _fetch(
        session,
        select(Partnership)
        .where(*_filters(group_id, player_id, DEFAULT_MIN_MATCHES))
        # rank_partners sorts stably, so equal synergy keeps this order.
        .order_by(Partnership.win_rate.desc(), *_PAIR_ORDER),
    )
    best, worst, total = rank_partners(rows, player_id, limit=BEST_PARTNERS_LIMIT)
    names = await player_names(
        session, [pid for p in rows for pid in (p.player1_id, p.player2_id)]
    )

    def ranked_out(ranked) -> RankedPartnerOut:
        return RankedPartnerOut(
            partnerId=ranked.partner_id,
            **_partnership_out(ranked.partnership, names).model_dump(),
        )

    return PlayerPartnershipsOut(
        playerId=player_id,
        playerName=player_name,
        bestPartners=[ranked_out(r) for r in best],
        worstPartners=[ranked_out(r) for r in worst],
        totalPartnerships=total,
    )


# GET /api/v0/groups/{group_id}/partnerships/{player1_id}/{player2_id}
@router.get("/{player1_id}/{player2_id}", response_model=PartnershipDetailOut)
async def partnership_detail(
    group_id: str,
    player1_id: str,
    player2_id: str,
    session: AsyncSession = Depends(get_session),
):
    if player1_id == player2_id:
        raise http_problem(422, "a partnership needs two different players", "partnership_same_player")
    await get_player(session, group_id, player1_id)
    await get_player(session, group_id, player2_id)
    partnership = await get_partnership(session, group_id, player1_id, player2_id)
    if partnership is None:
        raise PartnershipNotFound(player1_id, player2_id)

    pair = {player1_id, player2_id}
    history: list[PartnershipMatchOut] = []
    for match in await group_matches(session, group_id):
        if pair <= set(match.team1):
            side, opponents = 1, match.team2
        elif pair <= set(match.team2):
            side, opponents = 2, match.team1
        else:
            continue
        winner = match_winner(match.sets)
        if winner is None:
            continue
        games = match.sets if side == 1 else [(g2, g1) for g1, g2 in match.sets]
        history.append(
            PartnershipMatchOut(
                matchId=match.id,
                playedAt=match.played_at,
                result="win" if winner == side else "loss",
                score=", ".join(f"{a}-{b}" for a, b in games),
                opponents=list(opponents),
            )
        )
    history.reverse()

    names = await player_names(session, [partnership.player1_id, partnership.player2_id])
    return PartnershipDetailOut(
        partnership=_partnership_out(partnership, names),
        matchHistory=history,
    )
