"""
Trend Classifier
Classifies short-term price momentum over the most recent 7 observations

Algorithm:
1. Fewer than 7 points -> flat (not enough signal)
2. Take the last 7 points; average indices 0-2 and 4-6 (index 3 is ignored)
3. rising if the later average is more than 5% above the earlier one,
   falling if more than 5% below, flat otherwise
"""

from typing import Sequence, Union

from loguru import logger

from ..schemas.deal_schemas import PricePoint, Trend
from ..utils.helpers import mean

TREND_WINDOW = 7
HALF_SIZE = 3
RISING_FACTOR = 1.05
FALLING_FACTOR = 0.95


def classify_trend(history: Sequence[Union[PricePoint, float]]) -> Trend:
    """
    Classify a price series as rising, falling or flat

    Args:
        history: Price points (or bare prices) in ascending time order

    Returns:
        Trend: RISING, FALLING or FLAT

    Example:
        >>> classify_trend([100, 102, 104, 106, 108, 110, 112])
        <Trend.RISING: 'rising'>
    """
    if len(history) < TREND_WINDOW:
        return Trend.FLAT

    prices = [_price_of(point) for point in history[-TREND_WINDOW:]]
    first_half = mean(prices[:HALF_SIZE])
    second_half = mean(prices[-HALF_SIZE:])

    if second_half > first_half * RISING_FACTOR:
        trend = Trend.RISING
    elif second_half < first_half * FALLING_FACTOR:
        trend = Trend.FALLING
    else:
        trend = Trend.FLAT

    logger.debug(f"Trend {trend.value}: first={first_half:.2f} second={second_half:.2f}")
    return trend


def _price_of(point: Union[PricePoint, float]) -> float:
    if isinstance(point, PricePoint):
        return point.price
    return float(point)


class TrendClassifier:
    """Object wrapper so the scoring engine can take the classifier as a dependency"""

    def classify(self, history: Sequence[Union[PricePoint, float]]) -> Trend:
        return classify_trend(history)
