# tests/test_deal_scorer.py

"""Tests for the deal score formula, recommendations and the scoring engine."""

import random

import pytest

from conftest import NOW, make_snapshot, seed_history
from deal_watch.algorithms.deal_scorer import (
    DealScoringEngine,
    calculate_confidence,
    calculate_deal_score,
    calculate_historical_average,
    determine_recommendation,
    get_deal_quality,
)
from deal_watch.schemas.deal_schemas import PricePoint, Recommendation, Trend

SIX_AMENITIES = ["wifi", "pool", "gym", "spa", "bar", "parking"]


def _points(prices):
    return [PricePoint(price=p, observed_at=NOW) for p in prices]


class TestCalculateDealScore:
    """Component scores and their caps."""

    def test_perfect_snapshot_scores_100(self) -> None:
        hotel = make_snapshot(price_per_night=60, rating=5, review_count=1000,
                              amenities=SIX_AMENITIES, available=True)
        breakdown = calculate_deal_score(hotel, 100)
        assert breakdown.discount_score == 40
        assert breakdown.quality_score == 25
        assert breakdown.popularity_score == 15
        assert breakdown.amenity_score == 10
        assert breakdown.availability_score == 10
        assert breakdown.total_score == 100
        assert breakdown.is_deal

    def test_price_above_average_gets_no_discount_points(self) -> None:
        hotel = make_snapshot(price_per_night=150)
        assert calculate_deal_score(hotel, 100).discount_score == 0

    def test_zero_average_gets_no_discount_points(self) -> None:
        hotel = make_snapshot(price_per_night=0)
        assert calculate_deal_score(hotel, 0).discount_score == 0

    def test_unavailable_hotel_loses_availability_points(self) -> None:
        hotel = make_snapshot(available=False)
        assert calculate_deal_score(hotel, 100).availability_score == 0

    def test_total_rounds_half_up(self) -> None:
        # 0 discount + 12.5 quality + 0 + 0 + 0
        hotel = make_snapshot(price_per_night=100, rating=2.5, review_count=0,
                              amenities=[], available=False)
        assert calculate_deal_score(hotel, 100).total_score == 13

    def test_score_always_within_bounds(self) -> None:
        rng = random.Random(20251108)
        extremes = [
            make_snapshot(price_per_night=0, rating=0, review_count=0, amenities=[]),
            make_snapshot(price_per_night=1_000_000, rating=5, review_count=10**9),
            make_snapshot(price_per_night=0, rating=5, review_count=10**9,
                          amenities=[f"a{i}" for i in range(50)], available=True),
        ]
        randomized = [
            make_snapshot(
                price_per_night=rng.uniform(0, 2000),
                rating=rng.uniform(0, 5),
                review_count=rng.randint(0, 100_000),
                amenities=[f"amenity-{i}" for i in range(rng.randint(0, 12))],
                available=rng.random() < 0.5,
            )
            for _ in range(300)
        ]
        for hotel in extremes + randomized:
            for average in (0, 1, 50, 100, 5000, rng.uniform(0, 3000)):
                total = calculate_deal_score(hotel, average).total_score
                assert 0 <= total <= 100


class TestHistoryStatistics:
    """Average and confidence derived from history depth."""

    def test_historical_average_rounds_half_up(self) -> None:
        assert calculate_historical_average(_points([100, 101])) == 101

    def test_confidence_grows_with_history(self) -> None:
        assert calculate_confidence(_points([100] * 3)) == 10
        assert calculate_confidence(_points([100] * 30)) == 100
        assert calculate_confidence(_points([100] * 45)) == 100


class TestDetermineRecommendation:
    """Ordered rule table, first match wins."""

    @pytest.mark.parametrize(
        "score, trend, expected",
        [
            (90, Trend.RISING, Recommendation.BOOK_NOW),
            (86, Trend.FLAT, Recommendation.BOOK_NOW),
            (81, Trend.FALLING, Recommendation.BOOK_NOW),
            (80, Trend.FALLING, Recommendation.MONITOR),
            (75, Trend.FALLING, Recommendation.MONITOR),
            (75, Trend.RISING, Recommendation.WAIT),
            (70, Trend.FALLING, Recommendation.WAIT),
        ],
    )
    def test_rule_table(self, score, trend, expected) -> None:
        assert determine_recommendation(score, trend) == expected

    def test_deal_quality_labels(self) -> None:
        assert get_deal_quality(90) == "Excellent Deal"
        assert get_deal_quality(82) == "Great Deal"
        assert get_deal_quality(70) == "Good Deal"
        assert get_deal_quality(69) == "Not a Deal"


class TestDealScoringEngine:
    """score() and evaluate() against a real in-memory store."""

    def test_empty_history_records_baseline_and_returns_none(self, store) -> None:
        hotel = make_snapshot(price_per_night=200)
        engine = DealScoringEngine(store)

        assert engine.score(hotel, []) is None
        history = store.read_window(hotel.hotel_id, hotel.destination, now=NOW)
        assert [p.price for p in history] == [200]

    def test_scoring_twice_appends_twice(self, store) -> None:
        hotel = make_snapshot(price_per_night=100)
        seed_history(store, hotel, [100])
        engine = DealScoringEngine(store)

        history = store.read_window(hotel.hotel_id, hotel.destination, now=NOW)
        engine.score(hotel, history)
        engine.score(hotel, history)

        assert store.count(hotel.hotel_id, hotel.destination) == 3

    def test_below_threshold_still_records(self, store) -> None:
        hotel = make_snapshot(price_per_night=100, rating=2, review_count=0,
                              amenities=[], available=False)
        seed_history(store, hotel, [100, 100])
        engine = DealScoringEngine(store)

        assert engine.evaluate(hotel, now=NOW) is None
        assert store.count(hotel.hotel_id, hotel.destination) == 3

    def test_scenario_constant_history_big_discount_books_now(self, store) -> None:
        hotel = make_snapshot(price_per_night=60, rating=5, review_count=1000,
                              amenities=SIX_AMENITIES, available=True)
        seed_history(store, hotel, [100] * 30)
        engine = DealScoringEngine(store)

        verdict = engine.evaluate(hotel, now=NOW)

        assert verdict is not None
        assert verdict.historical_average == 100
        assert verdict.deal_score == 100
        assert verdict.trend == Trend.FLAT
        assert verdict.recommendation == Recommendation.BOOK_NOW
        assert verdict.savings == 40
        assert verdict.price_change_percent == pytest.approx(-40.0)
        assert verdict.confidence == 100

    def test_scenario_falling_prices_monitor(self, store) -> None:
        # avg 115, discount 13.04% -> 26.09 + 20 + 15 + 4 + 10 = 75.09
        hotel = make_snapshot(price_per_night=100, rating=4, review_count=500,
                              amenities=["wifi", "pool"], available=True)
        seed_history(store, hotel, [130, 125, 120, 115, 110, 105, 100])
        engine = DealScoringEngine(store)

        verdict = engine.evaluate(hotel, now=NOW)

        assert verdict.deal_score == 75
        assert verdict.trend == Trend.FALLING
        assert verdict.recommendation == Recommendation.MONITOR
        assert verdict.confidence == 23

    def test_scenario_rising_prices_book_now(self, store) -> None:
        # discount capped at 40, rating 3 -> 15, so 40 + 15 + 15 + 10 + 10
        hotel = make_snapshot(price_per_night=60, rating=3, review_count=1000,
                              amenities=SIX_AMENITIES, available=True)
        seed_history(store, hotel, [80, 82, 84, 86, 88, 90, 92])
        engine = DealScoringEngine(store)

        verdict = engine.evaluate(hotel, now=NOW)

        assert verdict.deal_score == 90
        assert verdict.trend == Trend.RISING
        assert verdict.recommendation == Recommendation.BOOK_NOW

    def test_points_outside_window_are_ignored(self, store) -> None:
        hotel = make_snapshot(price_per_night=100)
        seed_history(store, hotel, [1000] + [100] * 40)
        engine = DealScoringEngine(store)

        history = store.read_window(hotel.hotel_id, hotel.destination, 30, now=NOW)

        assert len(history) == 30
        assert calculate_historical_average(history) == 100
        # 100 against a 100 baseline: no discount, score 42
        assert engine.evaluate(hotel, now=NOW) is None
