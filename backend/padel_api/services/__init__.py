"""Internal application services (pure helpers, no I/O)."""

from .validation import ValidationError, validate_set_scores, sets_won, match_winner
from .stats import rolling_win_percentage, recent_form
from .streaks import (
    MatchResultRow,
    StreakHistoryItem,
    CurrentStreak,
    PlayerStreaksSummary,
    PlayerStreaks,
    compute_streaks,
    compute_group_streaks,
)
from .synergy import (
    SynergyWeights,
    DEFAULT_SYNERGY_WEIGHTS,
    PartnershipStats,
    RankedPartner,
    calculate_synergy_score,
    get_partnership_tier,
    get_matches_badge,
    get_elo_delta_indicator,
    rank_partners,
)
from .head_to_head import (
    TeamMatch,
    HeadToHeadStats,
    compute_head_to_head,
    team_head_to_head,
)
from .prediction import (
    MatchPrediction,
    calculate_match_prediction,
    team_average_elo,
)

__all__ = [
    "validate_set_scores",
    "ValidationError",
    "sets_won",
    "match_winner",
    "rolling_win_percentage",
    "recent_form",
    "MatchResultRow",
    "StreakHistoryItem",
    "CurrentStreak",
    "PlayerStreaksSummary",
    "PlayerStreaks",
    "compute_streaks",
    "compute_group_streaks",
    "SynergyWeights",
    "DEFAULT_SYNERGY_WEIGHTS",
    "PartnershipStats",
    "RankedPartner",
    "calculate_synergy_score",
    "get_partnership_tier",
    "get_matches_badge",
    "get_elo_delta_indicator",
    "rank_partners",
    "TeamMatch",
    "HeadToHeadStats",
    "compute_head_to_head",
    "team_head_to_head",
    "MatchPrediction",
    "calculate_match_prediction",
    "team_average_elo",
]
