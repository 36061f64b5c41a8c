from typing import Any, Dict, List, Optional, Sequence

TEAMS = ("team1", "team2")


class ValidationError(Exception):
    """Raised when submitted set scores are invalid."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


def validate_set_scores(
    sets: List[Dict[str, Any]],
    *,
    max_sets: Optional[int] = 3,
    max_games_per_side: Optional[int] = 7,
) -> List[tuple[int, int]]:
    """Validate padel set scores and return them as ``(team1, team2)`` pairs.

    Rules:
    - At least one set is required
    - Number of sets must be <= ``max_sets`` (if provided)
    - Each set must be an object ``{team1, team2}``
    - Games must be integers >= 0 (booleans are rejected)
    - A set cannot be tied
    """

    if not isinstance(sets, list) or len(sets) == 0:
        raise ValidationError("At least one set is required.")
    if max_sets is not None and len(sets) > max_sets:
        raise ValidationError(f"Too many sets. Max allowed is {max_sets}.")

    out: List[tuple[int, int]] = []
    for i, s in enumerate(sets, start=1):
        if not isinstance(s, dict):
            raise ValidationError(f"Set #{i} must be an object with fields team1 and team2.")
        if any(team not in s for team in TEAMS):
            raise ValidationError(f"Set #{i} must include both team1 and team2.")

        v1, v2 = s["team1"], s["team2"]

        # bool is a subclass of int
        if isinstance(v1, bool) or isinstance(v2, bool):
            raise ValidationError(f"Set #{i} games must be integers (not booleans).")

        try:
            g1 = int(v1)
            g2 = int(v2)
        except (TypeError, ValueError):
            raise ValidationError(f"Set #{i} games must be integers.")

        if g1 < 0 or g2 < 0:
            raise ValidationError(f"Set #{i} games must be >= 0.")
        if g1 == g2:
            raise ValidationError(f"Set #{i} cannot be a tie.")
        if max_games_per_side is not None and (
            g1 > max_games_per_side or g2 > max_games_per_side
        ):
            raise ValidationError(
                f"Set #{i} games must be <= {max_games_per_side}."
            )
        out.append((g1, g2))
    return out


def sets_won(sets: Sequence[Sequence[int]]) -> tuple[int, int]:
    """Count sets won by each team from ``(team1, team2)`` game pairs."""

    team1 = sum(1 for g1, g2 in sets if g1 > g2)
    team2 = sum(1 for g1, g2 in sets if g2 > g1)
    return team1, team2


def match_winner(sets: Sequence[Sequence[int]]) -> Optional[int]:
    """Return ``1`` or ``2`` for the team with more sets, ``None`` if level."""

    team1, team2 = sets_won(sets)
    if team1 == team2:
        return None
    return 1 if team1 > team2 else 2
