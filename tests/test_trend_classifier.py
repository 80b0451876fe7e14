# tests/test_trend_classifier.py

"""Tests for the 7-point trend classifier."""

from conftest import NOW
from deal_watch.algorithms.trend_classifier import TrendClassifier, classify_trend
from deal_watch.schemas.deal_schemas import PricePoint, Trend


def test_strictly_increasing_series_is_rising() -> None:
    assert classify_trend([100, 102, 104, 106, 108, 110, 112]) == Trend.RISING


def test_strictly_decreasing_series_is_falling() -> None:
    assert classify_trend([112, 110, 108, 106, 104, 102, 100]) == Trend.FALLING


def test_short_series_is_flat_regardless_of_content() -> None:
    assert classify_trend([]) == Trend.FLAT
    assert classify_trend([10, 1000, 5, 9000, 1, 50000]) == Trend.FLAT


def test_small_moves_are_flat() -> None:
    # second half 4% above first half
    assert classify_trend([100, 100, 100, 500, 104, 104, 104]) == Trend.FLAT


def test_middle_point_is_ignored() -> None:
    assert classify_trend([100, 100, 100, 1, 100, 100, 100]) == Trend.FLAT


def test_only_last_seven_points_count() -> None:
    series = [500, 400, 300] + [100, 100, 100, 100, 120, 120, 120]
    assert classify_trend(series) == Trend.RISING


def test_accepts_price_points() -> None:
    points = [PricePoint(price=p, observed_at=NOW) for p in (90, 90, 90, 90, 80, 80, 80)]
    assert TrendClassifier().classify(points) == Trend.FALLING
