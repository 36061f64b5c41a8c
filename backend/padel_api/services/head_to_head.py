"""Head-to-head records between two players who met on opposing teams."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Sequence

from .validation import sets_won


@dataclass(frozen=True)
class TeamMatch:
    """A doubles match with both line-ups and per-set games."""

    id: str
    played_at: Any
    team1: Sequence[str]
    team2: Sequence[str]
    sets: Sequence[Sequence[int]]


@dataclass
class HeadToHeadRecord:
    player_id: str
    wins: int = 0
    losses: int = 0
    sets_won: int = 0
    sets_lost: int = 0


@dataclass(frozen=True)
class HeadToHeadMatch:
    id: str
    played_at: Any
    winner_id: Optional[str]
    player_a_team: tuple[str, ...]
    player_b_team: tuple[str, ...]
    score: str


@dataclass
class HeadToHeadStats:
    player_a: HeadToHeadRecord
    player_b: HeadToHeadRecord
    total_matches: int = 0
    matches: list[HeadToHeadMatch] = field(default_factory=list)


def _team_of(match: Any, player_id: str) -> Optional[int]:
    if player_id in match.team1:
        return 1
    if player_id in match.team2:
        return 2
    return None


def compute_head_to_head(
    matches: Iterable[Any], player_a: str, player_b: str
) -> HeadToHeadStats:
    """Aggregate the matches where ``player_a`` and ``player_b`` were opponents.

    Matches where they were partners, or where either one is missing, are
    ignored. A match with equal sets won is counted in ``total_matches`` and
    listed with ``winner_id=None`` but credits nobody.
    """

    a = HeadToHeadRecord(player_id=player_a)
    b = HeadToHeadRecord(player_id=player_b)
    stats = HeadToHeadStats(player_a=a, player_b=b)

    for match in matches:
        team_a = _team_of(match, player_a)
        team_b = _team_of(match, player_b)
        if team_a is None or team_b is None or team_a == team_b:
            continue

        sets = [tuple(s) for s in match.sets]
        team1_sets, team2_sets = sets_won(sets)
        a_sets = team1_sets if team_a == 1 else team2_sets
        b_sets = team2_sets if team_a == 1 else team1_sets

        a.sets_won += a_sets
        a.sets_lost += b_sets
        b.sets_won += b_sets
        b.sets_lost += a_sets

        winner_id: Optional[str] = None
        if a_sets > b_sets:
            winner_id = player_a
            a.wins += 1
            b.losses += 1
        elif b_sets > a_sets:
            winner_id = player_b
            b.wins += 1
            a.losses += 1

        if team_a == 1:
            score = ", ".join(f"{g1}-{g2}" for g1, g2 in sets)
        else:
            score = ", ".join(f"{g2}-{g1}" for g1, g2 in sets)

        stats.total_matches += 1
        stats.matches.append(
            HeadToHeadMatch(
                id=match.id,
                played_at=match.played_at,
                winner_id=winner_id,
                player_a_team=tuple(match.team1 if team_a == 1 else match.team2),
                player_b_team=tuple(match.team1 if team_b == 1 else match.team2),
                score=score,
            )
        )

    return stats


def team_head_to_head(
    matches: Iterable[Any], team1: Sequence[str], team2: Sequence[str]
) -> Optional[tuple[float, float]]:
    """Return each line-up's win rate in decided meetings between them.

    A meeting is a match with every ``team1`` player on one side and every
    ``team2`` player on the other. ``None`` when they never met.
    """

    wins1 = wins2 = 0
    t1, t2 = set(team1), set(team2)
    for match in matches:
        side1, side2 = set(match.team1), set(match.team2)
        if t1 <= side1 and t2 <= side2:
            flipped = False
        elif t1 <= side2 and t2 <= side1:
            flipped = True
        else:
            continue
        team1_sets, team2_sets = sets_won([tuple(s) for s in match.sets])
        if team1_sets == team2_sets:
            continue
        team1_won = team1_sets > team2_sets
        if team1_won != flipped:
            wins1 += 1
        else:
            wins2 += 1

    total = wins1 + wins2
    if total == 0:
        return None
    return wins1 / total, wins2 / total
