"""Partner synergy scoring and display tiers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Literal

# ELO deltas are divided by this before clamping to [-1, 1].
ELO_DELTA_SCALE = 100.0

PartnershipTier = Literal["excellent", "good", "fair", "poor"]
EloDeltaIndicator = Literal["positive", "negative", "neutral"]


@dataclass(frozen=True)
class SynergyWeights:
    win_rate_weight: float = 0.5
    elo_delta_weight: float = 0.3
    opponent_quality_weight: float = 0.2


DEFAULT_SYNERGY_WEIGHTS = SynergyWeights()


@dataclass(frozen=True)
class PartnershipStats:
    """Aggregate record for two players who played on the same team."""

    player1_id: str
    player2_id: str
    matches_played: int = 0
    wins: int = 0
    losses: int = 0
    win_rate: float = 0.0
    avg_elo_change_when_paired: float = 0.0
    avg_individual_elo_change: float = 0.0
    elo_change_delta: float = 0.0
    common_opponents_beaten: int = 0


@dataclass(frozen=True)
class RankedPartner:
    partner_id: str
    partnership: Any
    synergy_score: float


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def calculate_synergy_score(
    partnership: Any, weights: SynergyWeights | None = None
) -> float:
    """Return the weighted synergy score of a partnership.

    ``partnership`` is read by attribute, so ORM rows and
    :class:`PartnershipStats` both work. With the default weights the score
    lies in ``[-0.3, 1.0]``; custom weights are not normalized.
    """

    w = weights or DEFAULT_SYNERGY_WEIGHTS
    matches_played = partnership.matches_played or 0

    if matches_played > 0:
        opponent_quality = _clamp(
            (partnership.common_opponents_beaten or 0) / matches_played, 0.0, 1.0
        )
    else:
        opponent_quality = 0.0

    elo_delta_norm = _clamp(
        (partnership.elo_change_delta or 0.0) / ELO_DELTA_SCALE, -1.0, 1.0
    )

    return (
        (partnership.win_rate or 0.0) * w.win_rate_weight
        + elo_delta_norm * w.elo_delta_weight
        + opponent_quality * w.opponent_quality_weight
    )


def get_partnership_tier(win_rate: float) -> PartnershipTier:
    if win_rate >= 0.7:
        return "excellent"
    if win_rate >= 0.6:
        return "good"
    if win_rate >= 0.5:
        return "fair"
    return "poor"


def get_matches_badge(matches_played: float) -> str:
    if matches_played >= 10:
        return "Established"
    if matches_played >= 5:
        return "Developing"
    return "New"


def get_elo_delta_indicator(delta: float) -> EloDeltaIndicator:
    if delta > 2:
        return "positive"
    if delta < -2:
        return "negative"
    return "neutral"


def rank_partners(
    partnerships: Iterable[Any],
    player_id: str,
    *,
    limit: int = 3,
    weights: SynergyWeights | None = None,
) -> tuple[list[RankedPartner], list[RankedPartner], int]:
    """Rank a player's partnerships by synergy.

    Returns ``(best, worst, total)`` where ``best`` holds the ``limit``
    highest scores (highest first) and ``worst`` the ``limit`` lowest (lowest
    first). With few partnerships the two lists overlap.
    """

    ranked = [
        RankedPartner(
            partner_id=p.player2_id if p.player1_id == player_id else p.player1_id,
            partnership=p,
            synergy_score=calculate_synergy_score(p, weights),
        )
        for p in partnerships
    ]
    ranked.sort(key=lambda r: r.synergy_score, reverse=True)
    if limit <= 0:
        return [], [], len(ranked)
    best = ranked[:limit]
    worst = list(reversed(ranked[-limit:]))
    return best, worst, len(ranked)
