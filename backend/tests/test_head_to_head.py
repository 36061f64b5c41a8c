from datetime import datetime, timedelta, timezone

from padel_api.services.head_to_head import (
    TeamMatch,
    compute_head_to_head,
    team_head_to_head,
)

START = datetime(2024, 5, 1, tzinfo=timezone.utc)


def _match(n: int, team1, team2, sets) -> TeamMatch:
    return TeamMatch(
        id=f"m{n}",
        played_at=START + timedelta(days=n),
        team1=team1,
        team2=team2,
        sets=sets,
    )


MATCHES = [
    _match(1, ["a", "x"], ["b", "y"], [(6, 4), (6, 3)]),
    _match(2, ["b", "z"], ["a", "y"], [(6, 4), (3, 6), (6, 1)]),
    # Partners, not opponents.
    _match(3, ["a", "b"], ["x", "y"], [(6, 0), (6, 0)]),
    # b absent.
    _match(4, ["a", "x"], ["y", "z"], [(6, 0), (6, 0)]),
    _match(5, ["y", "a"], ["x", "b"], [(2, 6), (6, 7)]),
]


def test_counts_only_matches_as_opponents() -> None:
    stats = compute_head_to_head(MATCHES, "a", "b")

    assert stats.total_matches == 3
    assert [m.id for m in stats.matches] == ["m1", "m2", "m5"]
    assert (stats.player_a.wins, stats.player_a.losses) == (1, 2)
    assert (stats.player_b.wins, stats.player_b.losses) == (2, 1)
    assert (stats.player_a.sets_won, stats.player_a.sets_lost) == (3, 4)
    assert (stats.player_b.sets_won, stats.player_b.sets_lost) == (4, 3)


def test_match_details_are_from_player_a_perspective() -> None:
    stats = compute_head_to_head(MATCHES, "a", "b")
    first, second, _ = stats.matches

    assert first.winner_id == "a"
    assert first.player_a_team == ("a", "x")
    assert first.player_b_team == ("b", "y")
    assert first.score == "6-4, 6-3"

    assert second.winner_id == "b"
    assert second.player_a_team == ("a", "y")
    assert second.score == "4-6, 6-3, 1-6"


def test_records_are_symmetric() -> None:
    ab = compute_head_to_head(MATCHES, "a", "b")
    ba = compute_head_to_head(MATCHES, "b", "a")

    assert ab.total_matches == ba.total_matches
    assert ab.player_a.wins == ba.player_b.wins
    assert ab.player_a.sets_won == ba.player_b.sets_won


def test_undecided_match_is_listed_without_winner() -> None:
    level = [_match(9, ["a", "x"], ["b", "y"], [(6, 4), (4, 6)])]

    stats = compute_head_to_head(level, "a", "b")

    assert stats.total_matches == 1
    assert stats.matches[0].winner_id is None
    assert stats.player_a.wins == stats.player_a.losses == 0
    assert stats.player_a.sets_won == stats.player_a.sets_lost == 1


def test_never_met() -> None:
    stats = compute_head_to_head(MATCHES, "a", "nobody")

    assert stats.total_matches == 0
    assert stats.matches == []


def test_team_head_to_head_handles_either_side() -> None:
    matches = [
        _match(1, ["a", "b"], ["c", "d"], [(6, 4), (6, 4)]),
        _match(2, ["d", "c"], ["b", "a"], [(6, 4), (6, 4)]),
        _match(3, ["c", "d"], ["a", "b"], [(1, 6), (2, 6)]),
        # Undecided meetings are skipped.
        _match(4, ["a", "b"], ["c", "d"], [(6, 4), (4, 6)]),
        # Different line-up.
        _match(5, ["a", "c"], ["b", "d"], [(6, 0), (6, 0)]),
    ]

    assert team_head_to_head(matches, ["a", "b"], ["c", "d"]) == (2 / 3, 1 / 3)
    assert team_head_to_head(matches, ["c", "d"], ["b", "a"]) == (1 / 3, 2 / 3)


def test_team_head_to_head_without_meetings() -> None:
    assert team_head_to_head(MATCHES, ["a", "b"], ["c", "d"]) is None
