"""ELO-based match outcome prediction with form and synergy adjustments."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Literal, Optional, Sequence

DEFAULT_ELO = 1000.0
MIN_PROBABILITY = 0.05
MAX_PROBABILITY = 0.95

# Maximum swing each factor can apply to team 1's win probability.
FORM_WEIGHT = 0.05
HEAD_TO_HEAD_WEIGHT = 0.10
STREAK_WEIGHT = 0.05
PARTNERSHIP_WEIGHT = 0.05

# Factors smaller than this are applied but not listed.
MIN_LISTED_IMPACT = 0.01

Confidence = Literal["low", "medium", "high"]
Impact = Literal["team1", "team2", "neutral"]


@dataclass(frozen=True)
class PredictionFactor:
    name: str
    value: str
    weight: str
    impact: Impact


@dataclass
class MatchPrediction:
    team1_win_prob: float
    team2_win_prob: float
    predicted_winner: Literal[1, 2]
    confidence: Confidence
    factors: list[PredictionFactor] = field(default_factory=list)


def expected_score(elo: float, opponent_elo: float) -> float:
    return 1 / (1 + math.pow(10, (opponent_elo - elo) / 400))


def team_average_elo(elos: Sequence[Optional[float]]) -> float:
    values = [DEFAULT_ELO if e is None else float(e) for e in elos]
    if not values:
        return DEFAULT_ELO
    return sum(values) / len(values)


def confidence_level(win_prob: float) -> Confidence:
    if 0.70 <= win_prob <= 0.85:
        return "high"
    if 0.55 <= win_prob <= 0.70 or 0.15 <= win_prob <= 0.30:
        return "medium"
    return "low"


def _signed_pct(advantage: float, positive: bool) -> str:
    return f"{'+' if positive else ''}{advantage * 100:.0f}%"


def _identity(value: float) -> float:
    return value


def _streak_pressure(streak: float) -> float:
    return math.tanh(streak / 3)


def calculate_match_prediction(
    team1_avg_elo: float,
    team2_avg_elo: float,
    *,
    form: Optional[tuple[float, float]] = None,
    head_to_head: Optional[tuple[float, float]] = None,
    streak: Optional[tuple[float, float]] = None,
    partnership_rate: Optional[tuple[float, float]] = None,
) -> MatchPrediction:
    """Predict a doubles match from team ELO averages.

    Each optional argument is a ``(team1, team2)`` pair and only shifts the
    probability when given: ``form`` and ``partnership_rate`` are win rates in
    ``[0, 1]``, ``head_to_head`` the win rates in previous meetings and
    ``streak`` the signed current streaks.
    """

    prob = expected_score(team1_avg_elo, team2_avg_elo)
    factors: list[PredictionFactor] = []

    elo_advantage = team1_avg_elo - team2_avg_elo
    factors.append(
        PredictionFactor(
            name="ELO advantage",
            value=f"{'+' if elo_advantage > 0 else ''}{elo_advantage:g}",
            weight=f"{abs(elo_advantage / 50):.0f}%",
            impact="team1" if elo_advantage > 0 else "team2" if elo_advantage < 0 else "neutral",
        )
    )

    adjustments = (
        ("Recent form", form, FORM_WEIGHT, _identity),
        ("Head-to-head", head_to_head, HEAD_TO_HEAD_WEIGHT, _identity),
        ("Current streak", streak, STREAK_WEIGHT, _streak_pressure),
        ("Partner synergy", partnership_rate, PARTNERSHIP_WEIGHT, _identity),
    )
    for name, pair, weight, transform in adjustments:
        if pair is None:
            continue
        advantage = (transform(pair[0]) - transform(pair[1])) * weight
        prob += advantage
        if abs(advantage) > MIN_LISTED_IMPACT:
            factors.append(
                PredictionFactor(
                    name=name,
                    value=_signed_pct(advantage, pair[0] > pair[1]),
                    weight=f"±{weight * 100:.0f}%",
                    impact="team1" if advantage > 0 else "team2",
                )
            )

    prob = max(MIN_PROBABILITY, min(MAX_PROBABILITY, prob))

    return MatchPrediction(
        team1_win_prob=prob,
        team2_win_prob=1 - prob,
        predicted_winner=1 if prob > 0.5 else 2,
        confidence=confidence_level(max(prob, 1 - prob)),
        factors=factors,
    )
