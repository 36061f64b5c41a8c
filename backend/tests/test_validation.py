import pytest
from padel_api.services.validation import (
    ValidationError,
    match_winner,
    sets_won,
    validate_set_scores,
)


def test_accepts_valid_sets() -> None:
    assert validate_set_scores([{"team1": 6, "team2": 4}]) == [(6, 4)]
    assert validate_set_scores(
        [{"team1": 6, "team2": 4}, {"team1": 3, "team2": 6}, {"team1": 7, "team2": 6}]
    ) == [(6, 4), (3, 6), (7, 6)]


def test_coerces_numeric_strings() -> None:
    assert validate_set_scores([{"team1": "6", "team2": "2"}]) == [(6, 2)]


@pytest.mark.parametrize(
    "sets, msg",
    [
        ([], "At least one set"),                            # empty list
        ([{"team1": 6, "team2": 6}], "cannot be a tie"),     # tie
        ([{"team1": -1, "team2": 0}], ">= 0"),               # negative
        ([{"team1": "x", "team2": 0}], "integers"),          # non-integer
        ([{"team1": True, "team2": 0}], "not booleans"),     # boolean
        ([{"team1": 6}], "include both team1 and team2"),    # missing key
        ([{"team1": 9, "team2": 7}], "<= 7"),                # too many games
        ("not a list", "At least one set"),                  # wrong top-level type
        ([42], "must be an object"),                         # non-dict set entry
    ],
    ids=[
        "empty",
        "tie",
        "negative",
        "non-integer",
        "boolean",
        "missing-key",
        "too-many-games",
        "not-a-list",
        "non-dict-entry",
    ],
)
def test_rejects_invalid_sets(sets, msg) -> None:
    with pytest.raises(ValidationError) as exc:
        validate_set_scores(sets)  # type: ignore[arg-type]
    assert msg.lower() in str(exc.value).lower()


def test_rejects_too_many_sets() -> None:
    with pytest.raises(ValidationError) as exc:
        validate_set_scores([{"team1": 6, "team2": 0}] * 4)
    assert exc.value.detail == "Too many sets. Max allowed is 3."


def test_limits_can_be_lifted() -> None:
    sets = [{"team1": 10, "team2": 8}] * 5
    assert len(validate_set_scores(sets, max_sets=None, max_games_per_side=None)) == 5


def test_error_names_the_offending_set() -> None:
    with pytest.raises(ValidationError) as exc:
        validate_set_scores([{"team1": 6, "team2": 1}, {"team1": 2, "team2": 2}])
    assert exc.value.detail == "Set #2 cannot be a tie."


def test_sets_won_and_winner() -> None:
    assert sets_won([(6, 4), (3, 6), (6, 2)]) == (2, 1)
    assert match_winner([(6, 4), (3, 6), (6, 2)]) == 1
    assert match_winner([(2, 6), (3, 6)]) == 2
    assert match_winner([(6, 4), (4, 6)]) is None
