from __future__ import annotations

from collections import deque
from typing import Optional, Sequence

# Matches that make up a player's "recent form".
RECENT_FORM_SPAN = 5


def rolling_win_percentage(results: Sequence[bool], span: int) -> list[float]:
    """Win rate over the last ``span`` results, at every point of ``results``.

    Early entries use however many results exist so far, so the first value is
    always 0.0 or 1.0.
    """

    if span <= 0:
        raise ValueError("span must be positive")
    window: deque[bool] = deque(maxlen=span)
    rates: list[float] = []
    for won in results:
        window.append(bool(won))
        rates.append(sum(window) / len(window))
    return rates


def recent_form(results: Sequence[bool], span: int = RECENT_FORM_SPAN) -> Optional[float]:
    if not results:
        return None
    return rolling_win_percentage(results[-span:], span)[-1]
