import math

import pytest

from padel_api.services.prediction import (
    DEFAULT_ELO,
    calculate_match_prediction,
    confidence_level,
    expected_score,
    team_average_elo,
)
from padel_api.services.stats import recent_form, rolling_win_percentage


def test_expected_score_is_symmetric() -> None:
    assert expected_score(1000, 1000) == pytest.approx(0.5)
    assert expected_score(1200, 1000) + expected_score(1000, 1200) == pytest.approx(1.0)


def test_team_average_elo_defaults_missing_ratings() -> None:
    assert team_average_elo([1200.0, None]) == pytest.approx((1200 + DEFAULT_ELO) / 2)
    assert team_average_elo([]) == DEFAULT_ELO


@pytest.mark.parametrize(
    "prob, level",
    [(0.5, "low"), (0.55, "medium"), (0.69, "medium"), (0.7, "high"), (0.85, "high"),
     (0.86, "low"), (0.95, "low"), (0.2, "medium")],
)
def test_confidence_level(prob, level) -> None:
    assert confidence_level(prob) == level


def test_elo_only_prediction() -> None:
    prediction = calculate_match_prediction(1100.0, 1000.0)

    assert prediction.team1_win_prob == pytest.approx(1 / (1 + 10 ** -0.25))
    assert prediction.team1_win_prob + prediction.team2_win_prob == pytest.approx(1.0)
    assert prediction.predicted_winner == 1
    assert prediction.confidence == "medium"
    [elo] = prediction.factors
    assert elo.name == "ELO advantage"
    assert elo.value == "+100"
    assert elo.weight == "2%"
    assert elo.impact == "team1"


def test_probability_is_clamped() -> None:
    prediction = calculate_match_prediction(
        2000.0, 1000.0, form=(1.0, 0.0), head_to_head=(1.0, 0.0)
    )

    assert prediction.team1_win_prob == pytest.approx(0.95)
    assert prediction.team2_win_prob == pytest.approx(0.05)
    assert prediction.confidence == "low"


def test_form_shifts_probability() -> None:
    prediction = calculate_match_prediction(1000.0, 1000.0, form=(1.0, 0.0))

    assert prediction.team1_win_prob == pytest.approx(0.55)
    form = prediction.factors[1]
    assert (form.name, form.value, form.weight, form.impact) == (
        "Recent form",
        "+5%",
        "±5%",
        "team1",
    )


def test_head_to_head_favours_team2() -> None:
    prediction = calculate_match_prediction(1000.0, 1000.0, head_to_head=(0.0, 1.0))

    assert prediction.team1_win_prob == pytest.approx(0.40)
    assert prediction.predicted_winner == 2
    h2h = prediction.factors[1]
    assert h2h.value == "-10%"
    assert h2h.impact == "team2"


def test_streaks_saturate() -> None:
    prediction = calculate_match_prediction(1000.0, 1000.0, streak=(3.0, -3.0))

    assert prediction.team1_win_prob == pytest.approx(0.5 + 2 * math.tanh(1) * 0.05)
    assert prediction.factors[1].name == "Current streak"


def test_small_factors_are_applied_but_not_listed() -> None:
    prediction = calculate_match_prediction(
        1000.0, 1000.0, partnership_rate=(0.55, 0.5)
    )

    assert prediction.team1_win_prob == pytest.approx(0.5025)
    assert [f.name for f in prediction.factors] == ["ELO advantage"]
    assert prediction.factors[0].impact == "neutral"


def test_rolling_win_percentage() -> None:
    assert rolling_win_percentage([True, False, True, True], 2) == [1.0, 0.5, 0.5, 1.0]
    with pytest.raises(ValueError):
        rolling_win_percentage([True], 0)


def test_recent_form_uses_last_five() -> None:
    assert recent_form([]) is None
    assert recent_form([False] * 5 + [True] * 5) == 1.0
    assert recent_form([True, False]) == 0.5
