"""
Deal Score Algorithm
Calculates a score (0-100) for each hotel snapshot against its price history

Algorithm Components:
1. Price Discount Score (0-40 points) - Twice the % discount vs 30-day average
2. Quality Score (0-25 points) - Proportional to rating on a 0-5 scale
3. Popularity Score (0-15 points) - Review count, saturating at 500 reviews
4. Amenity Score (0-10 points) - 2 points per distinct amenity
5. Availability Score (0-10 points) - Rooms currently bookable

Total: 0-100 points
Threshold: 70+ is considered a "deal"
"""

from datetime import datetime
from typing import List, NamedTuple, Optional, Sequence

from loguru import logger

from ..interfaces.price_history_store import DEFAULT_WINDOW_DAYS, PriceHistoryStore
from ..schemas.deal_schemas import DealVerdict, HotelSnapshot, PricePoint, Recommendation, Trend
from ..utils.helpers import clamp, mean, round_half_up
from .trend_classifier import TrendClassifier

DEAL_THRESHOLD = 70
CONFIDENCE_FULL_HISTORY = 30

MAX_DISCOUNT_SCORE = 40
MAX_QUALITY_SCORE = 25
MAX_POPULARITY_SCORE = 15
MAX_AMENITY_SCORE = 10
AVAILABILITY_SCORE = 10

POPULARITY_SATURATION = 500
POINTS_PER_AMENITY = 2


class DealScoreBreakdown(NamedTuple):
    """
    Breakdown of deal score components for transparency
    """
    discount_score: float
    quality_score: float
    popularity_score: float
    amenity_score: float
    availability_score: float
    total_score: int
    is_deal: bool

    def __repr__(self) -> str:
        return (
            f"DealScore(total={self.total_score}, "
            f"discount={self.discount_score:.1f}, "
            f"quality={self.quality_score:.1f}, "
            f"popularity={self.popularity_score:.1f}, "
            f"amenities={self.amenity_score:.1f}, "
            f"available={self.availability_score:.0f}, "
            f"is_deal={self.is_deal})"
        )


def calculate_deal_score(
    snapshot: HotelSnapshot,
    historical_average: float,
    threshold: int = DEAL_THRESHOLD
) -> DealScoreBreakdown:
    """
    Calculate the deal score for one snapshot

    Args:
        snapshot: Observed hotel price and attributes
        historical_average: Rounded mean of the hotel's recent prices
        threshold: Minimum score to be considered a deal (default: 70)

    Returns:
        DealScoreBreakdown: Named tuple with score breakdown

    Examples:
        >>> # 40% below average, top rating, popular, fully equipped
        >>> hotel = HotelSnapshot(name="Le Marais", destination="Paris",
        ...     price_per_night=60, rating=5, review_count=1000,
        ...     amenities=["wifi", "pool", "gym", "spa", "bar", "parking"],
        ...     available=True)
        >>> calculate_deal_score(hotel, 100).total_score
        100
    """

    # ============================================
    # 1. Price Discount Score (0-40 points)
    # ============================================
    discount_score = _calculate_discount_score(snapshot.price_per_night, historical_average)

    # ============================================
    # 2. Quality Score (0-25 points)
    # ============================================
    quality_score = clamp(snapshot.rating / 5 * MAX_QUALITY_SCORE, 0, MAX_QUALITY_SCORE)

    # ============================================
    # 3. Popularity Score (0-15 points)
    # ============================================
    popularity_score = clamp(
        snapshot.review_count / POPULARITY_SATURATION * MAX_POPULARITY_SCORE,
        0,
        MAX_POPULARITY_SCORE
    )

    # ============================================
    # 4. Amenity Score (0-10 points)
    # ============================================
    amenity_score = clamp(snapshot.amenity_count * POINTS_PER_AMENITY, 0, MAX_AMENITY_SCORE)

    # ============================================
    # 5. Availability Score (0-10 points)
    # ============================================
    availability_score = AVAILABILITY_SCORE if snapshot.available else 0

    # ============================================
    # Calculate Total Score
    # ============================================
    total_score = round_half_up(
        discount_score + quality_score + popularity_score + amenity_score + availability_score
    )

    breakdown = DealScoreBreakdown(
        discount_score=discount_score,
        quality_score=quality_score,
        popularity_score=popularity_score,
        amenity_score=amenity_score,
        availability_score=availability_score,
        total_score=total_score,
        is_deal=total_score >= threshold
    )

    logger.debug(f"Deal score calculated for {snapshot.hotel_id}: {breakdown}")

    return breakdown


def _calculate_discount_score(price: float, historical_average: float) -> float:
    """
    Calculate price discount score (0-40 points)

    Each percent below the historical average is worth 2 points. Prices at
    or above the average contribute nothing (never a negative score).
    """
    if historical_average <= 0:
        return 0.0

    discount_pct = (historical_average - price) / historical_average * 100
    return clamp(discount_pct * 2, 0, MAX_DISCOUNT_SCORE)


def calculate_historical_average(history: Sequence[PricePoint]) -> int:
    """Rounded arithmetic mean of the prices in a history window"""
    return round_half_up(mean(point.price for point in history))


def calculate_confidence(history: Sequence[PricePoint]) -> int:
    """
    Confidence in the baseline (0-100), growing with history depth

    30 or more observations in the window give full confidence.
    """
    return round_half_up(clamp(len(history) / CONFIDENCE_FULL_HISTORY * 100, 0, 100))


def determine_recommendation(deal_score: int, trend: Trend) -> Recommendation:
    """
    Map a deal score and price trend to a booking recommendation

    Rules are evaluated in order, first match wins:
    - score > 85 and price rising: BOOK_NOW (excellent and getting pricier)
    - score > 80: BOOK_NOW
    - score > 70 and price falling: MONITOR (could still improve)
    - otherwise: WAIT

    Example:
        >>> determine_recommendation(75, Trend.FALLING)
        <Recommendation.MONITOR: 'MONITOR'>
    """
    if deal_score > 85 and trend == Trend.RISING:
        return Recommendation.BOOK_NOW
    if deal_score > 80:
        return Recommendation.BOOK_NOW
    if deal_score > 70 and trend == Trend.FALLING:
        return Recommendation.MONITOR
    return Recommendation.WAIT


def get_deal_quality(score: int) -> str:
    """
    Get human-readable deal quality description

    Example:
        >>> get_deal_quality(85)
        'Excellent Deal'
    """
    if score >= 85:
        return "Excellent Deal"
    elif score >= 80:
        return "Great Deal"
    elif score >= DEAL_THRESHOLD:
        return "Good Deal"
    else:
        return "Not a Deal"


# ============================================
# Scoring Engine
# ============================================

class DealScoringEngine:
    """
    Turns a hotel snapshot plus its recent history into a DealVerdict

    Every scored snapshot is appended to the price history after scoring,
    so the just-scored price becomes part of future baselines. Appends are
    not deduplicated: scoring the same snapshot twice records two points.
    """

    def __init__(
        self,
        store: PriceHistoryStore,
        trend_classifier: Optional[TrendClassifier] = None,
        window_days: int = DEFAULT_WINDOW_DAYS,
        threshold: int = DEAL_THRESHOLD
    ):
        self.store = store
        self.trend_classifier = trend_classifier or TrendClassifier()
        self.window_days = window_days
        self.threshold = threshold

    def evaluate(self, snapshot: HotelSnapshot, now: Optional[datetime] = None) -> Optional[DealVerdict]:
        """
        Read the snapshot's history window from the store and score it

        Raises:
            StorageUnavailable: If the store cannot be read or written
        """
        history = self.store.read_window(
            snapshot.hotel_id,
            snapshot.destination,
            self.window_days,
            now=now
        )
        return self.score(snapshot, history)

    def score(self, snapshot: HotelSnapshot, history: List[PricePoint]) -> Optional[DealVerdict]:
        """
        Score one snapshot against its history

        Args:
            snapshot: The observation to score
            history: Price points for the same hotel, oldest first

        Returns:
            DealVerdict when the score reaches the threshold, otherwise None.
            None is also returned on first sighting (empty history), when
            there is no baseline to compare against.

        Raises:
            StorageUnavailable: If the snapshot cannot be recorded
        """
        if not history:
            self._record(snapshot)
            logger.debug(f"First sighting of {snapshot.name} ({snapshot.hotel_id}), baseline recorded")
            return None

        historical_average = calculate_historical_average(history)
        breakdown = calculate_deal_score(snapshot, historical_average, self.threshold)

        self._record(snapshot)

        if not breakdown.is_deal:
            return None

        price = snapshot.price_per_night
        if historical_average > 0:
            price_change_percent = (price - historical_average) / historical_average * 100
        else:
            price_change_percent = 0.0

        trend = self.trend_classifier.classify(history)
        recommendation = determine_recommendation(breakdown.total_score, trend)

        verdict = DealVerdict(
            hotel=snapshot,
            deal_score=breakdown.total_score,
            historical_average=historical_average,
            savings=historical_average - price,
            price_change_percent=price_change_percent,
            recommendation=recommendation,
            confidence=calculate_confidence(history),
            trend=trend
        )

        logger.info(
            f"Deal detected: {snapshot.name} in {snapshot.destination} "
            f"score={verdict.deal_score} avg={historical_average} price={price} "
            f"-> {recommendation.value} ({trend.value})"
        )

        return verdict

    def _record(self, snapshot: HotelSnapshot) -> None:
        self.store.append(
            snapshot.hotel_id,
            snapshot.destination,
            snapshot.price_per_night,
            snapshot.observed_at
        )
