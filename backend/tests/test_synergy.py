import pytest

from padel_api.services.synergy import (
    PartnershipStats,
    SynergyWeights,
    calculate_synergy_score,
    get_elo_delta_indicator,
    get_matches_badge,
    get_partnership_tier,
    rank_partners,
)


def _stats(**overrides) -> PartnershipStats:
    values = dict(player1_id="a", player2_id="b", matches_played=10)
    values.update(overrides)
    return PartnershipStats(**values)


def test_synergy_score_weights_each_component() -> None:
    stats = _stats(win_rate=0.8, elo_change_delta=50.0, common_opponents_beaten=5)

    # 0.8 * 0.5 + 0.5 * 0.3 + 0.5 * 0.2
    assert calculate_synergy_score(stats) == pytest.approx(0.65)


def test_synergy_score_without_matches_ignores_opponents() -> None:
    stats = _stats(matches_played=0, win_rate=0.0, common_opponents_beaten=4)

    assert calculate_synergy_score(stats) == 0.0


def test_synergy_score_clamps_elo_delta() -> None:
    high = _stats(win_rate=0.5, elo_change_delta=400.0)
    low = _stats(win_rate=0.5, elo_change_delta=-400.0)

    assert calculate_synergy_score(high) == pytest.approx(0.25 + 0.3)
    assert calculate_synergy_score(low) == pytest.approx(0.25 - 0.3)


def test_synergy_score_clamps_opponent_ratio() -> None:
    stats = _stats(matches_played=2, win_rate=0.0, common_opponents_beaten=9)

    assert calculate_synergy_score(stats) == pytest.approx(0.2)


@pytest.mark.parametrize(
    "stats, expected",
    [
        (_stats(win_rate=1.0, elo_change_delta=1000.0, common_opponents_beaten=10), 1.0),
        (_stats(win_rate=0.0, elo_change_delta=-1000.0, common_opponents_beaten=0), -0.3),
    ],
    ids=["max", "min"],
)
def test_synergy_score_bounds(stats, expected) -> None:
    assert calculate_synergy_score(stats) == pytest.approx(expected)


def test_synergy_score_accepts_custom_weights() -> None:
    stats = _stats(win_rate=0.5, elo_change_delta=0.0, common_opponents_beaten=0)
    weights = SynergyWeights(win_rate_weight=1.0, elo_delta_weight=0.0, opponent_quality_weight=0.0)

    assert calculate_synergy_score(stats, weights) == pytest.approx(0.5)


@pytest.mark.parametrize(
    "win_rate, tier",
    [(0.7, "excellent"), (0.95, "excellent"), (0.6, "good"), (0.69, "good"),
     (0.6999999, "good"), (0.5999999, "fair"), (0.5, "fair"), (0.4999999, "poor"),
     (0.49, "poor"), (0.0, "poor")],
)
def test_partnership_tier(win_rate, tier) -> None:
    assert get_partnership_tier(win_rate) == tier


@pytest.mark.parametrize(
    "matches, badge",
    [(0, "New"), (4, "New"), (4.999, "New"), (5, "Developing"), (9, "Developing"),
     (9.999, "Developing"), (10, "Established"), (50, "Established")],
)
def test_matches_badge(matches, badge) -> None:
    assert get_matches_badge(matches) == badge


@pytest.mark.parametrize(
    "delta, indicator",
    [(2.01, "positive"), (2.0001, "positive"), (2.0, "neutral"), (0.0, "neutral"),
     (-2.0, "neutral"), (-2.0001, "negative"), (-2.01, "negative")],
)
def test_elo_delta_indicator(delta, indicator) -> None:
    assert get_elo_delta_indicator(delta) == indicator


def test_rank_partners_orders_by_synergy() -> None:
    partnerships = [
        PartnershipStats("a", "b", matches_played=10, win_rate=0.9),
        PartnershipStats("a", "c", matches_played=10, win_rate=0.2),
        PartnershipStats("d", "a", matches_played=10, win_rate=0.6),
        PartnershipStats("a", "e", matches_played=10, win_rate=0.4),
        PartnershipStats("a", "f", matches_played=10, win_rate=0.7),
    ]

    best, worst, total = rank_partners(partnerships, "a")

    assert total == 5
    assert [r.partner_id for r in best] == ["b", "f", "d"]
    assert [r.partner_id for r in worst] == ["c", "e", "d"]
    assert best[0].synergy_score == pytest.approx(0.45)


def test_rank_partners_with_few_partners_overlaps() -> None:
    partnerships = [PartnershipStats("a", "b", matches_played=3, win_rate=0.5)]

    best, worst, total = rank_partners(partnerships, "a")

    assert total == 1
    assert best[0].partner_id == worst[0].partner_id == "b"


def test_rank_partners_empty() -> None:
    assert rank_partners([], "a") == ([], [], 0)
