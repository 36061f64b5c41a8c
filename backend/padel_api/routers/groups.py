import logging
import uuid
from collections import defaultdict
from statistics import mean
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..cache import group_streaks_cache
from ..db import get_session
from ..exceptions import ProblemDetail, http_problem
from ..models import Match, MatchResult
from ..queries import (
    get_group,
    get_partnership,
    get_player,
    get_players,
    group_match_results,
    group_matches,
    player_match_results,
)
from ..rate_limit import RateLimitResult, rate_limit
from ..schemas import (
    GroupStreaksOut,
    HeadToHeadMatchOut,
    HeadToHeadOut,
    HeadToHeadRecordOut,
    MatchCreate,
    MatchOut,
    MatchPredictionOut,
    PlayerStreaksOut,
    PlayerStreaksSummaryOut,
    PredictionFactorOut,
    SetScoreOut,
    StreakHistoryItemOut,
    TeamPredictionOut,
)
from ..services import (
    PlayerStreaksSummary,
    ValidationError,
    calculate_match_prediction,
    compute_group_streaks,
    compute_head_to_head,
    compute_streaks,
    match_winner,
    recent_form,
    team_average_elo,
    team_head_to_head,
    validate_set_scores,
)
from ..time_utils import coerce_utc, utcnow

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/groups",
    tags=["groups"],
    responses={404: {"model": ProblemDetail}, 429: {"model": ProblemDetail}},
)


def _summary_out(summary: PlayerStreaksSummary) -> PlayerStreaksSummaryOut:
    return PlayerStreaksSummaryOut(
        currentStreak=summary.current_streak,
        streakType=summary.current.type,
        longestWinStreak=summary.longest_win_streak,
        longestLossStreak=summary.longest_loss_streak,
    )


# GET /api/v0/groups/{group_id}/players/{player_id}/streaks
@router.get(
    "/{group_id}/players/{player_id}/streaks", response_model=PlayerStreaksOut
)
async def player_streaks(
    group_id: str,
    player_id: str,
    session: AsyncSession = Depends(get_session),
):
    await get_player(session, group_id, player_id)
    rows = await player_match_results(session, group_id, player_id)
    streaks = compute_streaks(rows)
    summary = _summary_out(streaks)
    return PlayerStreaksOut(
        playerId=player_id,
        **summary.model_dump(),
        streakHistory=[
            StreakHistoryItemOut(
                streak=item.streak,
                type=item.type,
                startMatchId=item.start_match_id,
                endMatchId=item.end_match_id,
                startDate=coerce_utc(item.start_date),
                endDate=coerce_utc(item.end_date),
            )
            for item in streaks.streak_history
        ],
    )


# GET /api/v0/groups/{group_id}/streaks
@router.get("/{group_id}/streaks", response_model=GroupStreaksOut)
async def group_streaks(group_id: str, session: AsyncSession = Depends(get_session)):
    async def compute() -> GroupStreaksOut:
        await get_group(session, group_id)
        rows = await group_match_results(session, group_id)
        return GroupStreaksOut(
            groupId=group_id,
            players={
                pid: _summary_out(summary)
                for pid, summary in compute_group_streaks(rows).items()
            },
        )

    return await group_streaks_cache.get_or_compute(group_id, compute)


# POST /api/v0/groups/{group_id}/matches
@router.post("/{group_id}/matches", response_model=MatchOut, status_code=201)
async def create_match(
    group_id: str,
    body: MatchCreate,
    session: AsyncSession = Depends(get_session),
    _limit: RateLimitResult = Depends(rate_limit("match")),
):
    await get_group(session, group_id)
    try:
        sets = validate_set_scores(body.sets)
    except ValidationError as e:
        raise http_problem(422, e.detail, "match_invalid_sets")
    winner = match_winner(sets)
    if winner is None:
        raise http_problem(422, "match must have a winner", "match_undecided")
    await get_players(session, group_id, [*body.team1, *body.team2])

    played_at = body.playedAt or utcnow()
    mid = uuid.uuid4().hex
    session.add(
        Match(
            id=mid,
            group_id=group_id,
            played_at=played_at,
            team1=body.team1,
            team2=body.team2,
            sets=[list(s) for s in sets],
        )
    )
    for team_no, team in ((1, body.team1), (2, body.team2)):
        for pid in team:
            session.add(
                MatchResult(
                    id=uuid.uuid4().hex,
                    group_id=group_id,
                    match_id=mid,
                    player_id=pid,
                    is_win=team_no == winner,
                    played_at=played_at,
                )
            )
    await session.commit()
    await group_streaks_cache.invalidate(group_id)
    logger.info("Recorded match %s in group %s", mid, group_id)

    return MatchOut(
        id=mid,
        groupId=group_id,
        playedAt=played_at,
        team1=body.team1,
        team2=body.team2,
        sets=[SetScoreOut(team1=g1, team2=g2) for g1, g2 in sets],
        winner=winner,
    )


# GET /api/v0/groups/{group_id}/head-to-head?playerA=..&playerB=..
@router.get("/{group_id}/head-to-head", response_model=HeadToHeadOut)
async def head_to_head(
    group_id: str,
    player_a: str = Query(..., alias="playerA"),
    player_b: str = Query(..., alias="playerB"),
    session: AsyncSession = Depends(get_session),
):
    if player_a == player_b:
        raise http_problem(422, "playerA and playerB must differ", "head_to_head_same_player")
    players = await get_players(session, group_id, [player_a, player_b])
    stats = compute_head_to_head(
        await group_matches(session, group_id), player_a, player_b
    )

    def record(rec) -> HeadToHeadRecordOut:
        return HeadToHeadRecordOut(
            playerId=rec.player_id,
            playerName=players[rec.player_id].name,
            wins=rec.wins,
            losses=rec.losses,
            setsWon=rec.sets_won,
            setsLost=rec.sets_lost,
        )

    return HeadToHeadOut(
        playerA=record(stats.player_a),
        playerB=record(stats.player_b),
        totalMatches=stats.total_matches,
        matches=[
            HeadToHeadMatchOut(
                id=m.id,
                playedAt=m.played_at,
                winnerId=m.winner_id,
                playerATeam=list(m.player_a_team),
                playerBTeam=list(m.player_b_team),
                score=m.score,
            )
            for m in stats.matches
        ],
    )


# GET /api/v0/groups/{group_id}/predictions?team1=a&team1=b&team2=c&team2=d
@router.get("/{group_id}/predictions", response_model=MatchPredictionOut)
async def predict_match(
    group_id: str,
    team1: List[str] = Query(...),
    team2: List[str] = Query(...),
    session: AsyncSession = Depends(get_session),
):
    if (
        len(set(team1)) != 2
        or len(set(team2)) != 2
        or set(team1) & set(team2)
    ):
        raise http_problem(
            422, "teams must be two different pairs of players", "prediction_invalid_teams"
        )
    # Looked up first: a missing partnership table rolls the session back,
    # which would expire player rows loaded before it.
    pair1 = await get_partnership(session, group_id, *team1)
    rate1 = pair1.win_rate if pair1 is not None else None
    pair2 = await get_partnership(session, group_id, *team2)
    rate2 = pair2.win_rate if pair2 is not None else None

    players = await get_players(session, group_id, [*team1, *team2])

    results = await group_match_results(session, group_id)
    history: dict[str, list[bool]] = defaultdict(list)
    for row in results:
        history[row.player_id].append(bool(row.is_win))
    streaks = compute_group_streaks(results)

    def team_form(team: List[str]):
        forms = [f for f in (recent_form(history[pid]) for pid in team) if f is not None]
        return mean(forms) if forms else None

    def team_streak(team: List[str]) -> float:
        return mean(
            streaks[pid].current_streak if pid in streaks else 0 for pid in team
        )

    form1, form2 = team_form(team1), team_form(team2)

    t1_elo = team_average_elo([players[pid].elo for pid in team1])
    t2_elo = team_average_elo([players[pid].elo for pid in team2])
    prediction = calculate_match_prediction(
        t1_elo,
        t2_elo,
        form=(form1, form2) if form1 is not None and form2 is not None else None,
        head_to_head=team_head_to_head(
            await group_matches(session, group_id), team1, team2
        ),
        streak=(team_streak(team1), team_streak(team2)),
        partnership_rate=(
            (rate1, rate2) if rate1 is not None and rate2 is not None else None
        ),
    )

    def team_out(team: List[str], avg_elo: float, prob: float) -> TeamPredictionOut:
        return TeamPredictionOut(
            playerIds=team,
            playerNames=[players[pid].name for pid in team],
            avgElo=round(avg_elo),
            winProbability=prob,
        )

    return MatchPredictionOut(
        team1=team_out(team1, t1_elo, prediction.team1_win_prob),
        team2=team_out(team2, t2_elo, prediction.team2_win_prob),
        predictedWinner=prediction.predicted_winner,
        confidence=prediction.confidence,
        factors=[
            PredictionFactorOut(
                name=f.name, value=f.value, weight=f.weight, impact=f.impact
            )
            for f in prediction.factors
        ],
    )
