"""Win/loss streak analysis over chronologically ordered match results.

Both analyzers trust the order of the rows they are given: a single player's
rows must be sorted by ``played_at`` ascending, and the group feed by
``(player_id, played_at)`` ascending. Nothing is re-sorted here; out-of-order
input silently produces wrong run boundaries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from itertools import groupby
from operator import attrgetter
from typing import Any, Iterable, Literal, Optional, Sequence

StreakType = Literal["win", "loss"]


@dataclass(frozen=True)
class MatchResultRow:
    """One player's outcome in one match."""

    match_id: str
    is_win: bool
    played_at: datetime | str
    player_id: Optional[str] = None


@dataclass(frozen=True)
class StreakHistoryItem:
    """A maximal run of consecutive matches with the same outcome."""

    streak: int
    type: StreakType
    start_match_id: str
    end_match_id: str
    start_date: Any
    end_date: Any


@dataclass(frozen=True)
class CurrentStreak:
    type: Literal["win", "loss", "none"] = "none"
    count: int = 0

    @property
    def signed(self) -> int:
        """Positive for a win streak, negative for a loss streak, 0 for none."""

        if self.type == "win":
            return self.count
        if self.type == "loss":
            return -self.count
        return 0


@dataclass
class PlayerStreaksSummary:
    current: CurrentStreak = field(default_factory=CurrentStreak)
    longest_win_streak: int = 0
    longest_loss_streak: int = 0

    @property
    def current_streak(self) -> int:
        return self.current.signed


@dataclass
class PlayerStreaks(PlayerStreaksSummary):
    streak_history: list[StreakHistoryItem] = field(default_factory=list)


class _RunTracker:
    """Accumulates runs for one player's ordered results."""

    def __init__(self, *, keep_history: bool) -> None:
        self.keep_history = keep_history
        self.history: list[StreakHistoryItem] = []
        self.longest_win = 0
        self.longest_loss = 0
        self.run_type: StreakType | None = None
        self.run_count = 0
        self._start_row: Any = None
        self._last_row: Any = None

    def push(self, row: Any) -> None:
        outcome: StreakType = "win" if bool(row.is_win) else "loss"
        if self.run_type == outcome:
            self.run_count += 1
        else:
            self._close_run()
            self.run_type = outcome
            self.run_count = 1
            self._start_row = row
        self._last_row = row

    def _close_run(self) -> None:
        if self.run_type is None:
            return
        if self.run_type == "win":
            self.longest_win = max(self.longest_win, self.run_count)
        else:
            self.longest_loss = max(self.longest_loss, self.run_count)
        if self.keep_history:
            self.history.append(
                StreakHistoryItem(
                    streak=self.run_count,
                    type=self.run_type,
                    start_match_id=self._start_row.match_id,
                    end_match_id=self._last_row.match_id,
                    start_date=self._start_row.played_at,
                    end_date=self._last_row.played_at,
                )
            )

    def finish(self) -> PlayerStreaks:
        # The last run is still open; it goes through the same close step.
        self._close_run()
        current = (
            CurrentStreak(type=self.run_type, count=self.run_count)
            if self.run_type is not None
            else CurrentStreak()
        )
        return PlayerStreaks(
            current=current,
            longest_win_streak=self.longest_win,
            longest_loss_streak=self.longest_loss,
            streak_history=self.history,
        )


def compute_streaks(rows: Iterable[Any]) -> PlayerStreaks:
    """Compute current/longest streaks and the run history for one player.

    Rows are read by attribute (``match_id``, ``is_win``, ``played_at``), so
    :class:`MatchResultRow` instances and SQLAlchemy result rows both work.
    An empty feed yields the zero-value result.
    """

    tracker = _RunTracker(keep_history=True)
    for row in rows:
        tracker.push(row)
    return tracker.finish()


def compute_group_streaks(rows: Sequence[Any]) -> dict[str, PlayerStreaksSummary]:
    """Compute streak summaries for every player of a group in one pass.

    ``rows`` must be grouped by ``player_id`` and ordered by ``played_at``
    within each player. Players without rows get no entry. Run histories are
    not kept, only the summary numbers.
    """

    out: dict[str, PlayerStreaksSummary] = {}
    for player_id, player_rows in groupby(rows, key=attrgetter("player_id")):
        tracker = _RunTracker(keep_history=False)
        for row in player_rows:
            tracker.push(row)
        result = tracker.finish()
        out[player_id] = PlayerStreaksSummary(
            current=result.current,
            longest_win_streak=result.longest_win_streak,
            longest_loss_streak=result.longest_loss_streak,
        )
    return out
