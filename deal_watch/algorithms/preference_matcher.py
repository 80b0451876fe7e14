"""
Match Score Algorithm
Calculates how well a detected deal fits one user's preferences (0-100)

Algorithm Components:
1. Star Match (0-30) - Rounded rating is one of the preferred star levels
2. Price Match (0-30) - Headroom left under the nightly budget
3. Location Match (0-20) - Hotel location contains a preferred location term
4. Amenity Match (0-20) - Share of required amenities the hotel offers

Total: 0-100 (independent of the deal score scale)
Threshold: below 60 the deal is dropped for this user
"""

from typing import List, NamedTuple, Optional, Tuple

from loguru import logger

from ..schemas.deal_schemas import DealVerdict, HotelSnapshot, MatchResult, PreferencePolicy
from ..utils.helpers import format_price, round_half_up
from .urgency import UrgencyClassifier

MATCH_THRESHOLD = 60

STAR_MATCH_SCORE = 30
STAR_PARTIAL_SCORE = 10
MAX_PRICE_SCORE = 30
LOCATION_SCORE = 20
MAX_AMENITY_SCORE = 20


class MatchScoreBreakdown(NamedTuple):
    """
    Breakdown of match score components
    """
    star_score: float       # 10 or 30
    price_score: float      # 0-30
    location_score: float   # 0 or 20
    amenity_score: float    # 0-20
    total_score: int        # 0-100
    reasons: Tuple[str, ...]

    def __repr__(self) -> str:
        return (
            f"MatchScore(total={self.total_score}, "
            f"stars={self.star_score:.0f}, "
            f"price={self.price_score:.1f}, "
            f"location={self.location_score:.0f}, "
            f"amenities={self.amenity_score:.1f})"
        )


def calculate_match_score(hotel: HotelSnapshot, policy: PreferencePolicy) -> MatchScoreBreakdown:
    """
    Calculate how well a hotel fits a user's preference policy

    Reasons are collected in evaluation order: stars, price, location,
    amenities. A factor only adds a reason when it contributes.

    Args:
        hotel: Snapshot of the hotel behind the deal
        policy: The user's preference policy

    Returns:
        MatchScoreBreakdown: Detailed match score breakdown

    Example:
        >>> hotel = HotelSnapshot(name="Hotel Centrale", destination="Rome",
        ...     location="Central Rome", price_per_night=150, rating=4.4)
        >>> policy = PreferencePolicy(preferred_stars={4, 5}, max_price_per_night=300,
        ...     preferred_locations=["central"])
        >>> calculate_match_score(hotel, policy).total_score
        85
    """
    reasons: List[str] = []

    # ============================================
    # 1. Star Match Score (0-30)
    # ============================================
    star_score, star_reason = _calculate_star_match(hotel.rating, policy)
    if star_reason:
        reasons.append(star_reason)

    # ============================================
    # 2. Price Match Score (0-30)
    # ============================================
    price_score, price_reason = _calculate_price_match(hotel.price_per_night, policy.max_price_per_night)
    if price_reason:
        reasons.append(price_reason)

    # ============================================
    # 3. Location Match Score (0-20)
    # ============================================
    location_score, location_reason = _calculate_location_match(hotel.location, policy.preferred_locations)
    if location_reason:
        reasons.append(location_reason)

    # ============================================
    # 4. Amenity Match Score (0-20)
    # ============================================
    amenity_score, amenity_reason = _calculate_amenity_match(hotel.amenities, policy.required_amenities)
    if amenity_reason:
        reasons.append(amenity_reason)

    total_score = round_half_up(star_score + price_score + location_score + amenity_score)

    breakdown = MatchScoreBreakdown(
        star_score=star_score,
        price_score=price_score,
        location_score=location_score,
        amenity_score=amenity_score,
        total_score=total_score,
        reasons=tuple(reasons)
    )

    logger.debug(f"Match score calculated for {hotel.hotel_id}: {breakdown}")

    return breakdown


def _calculate_star_match(rating: float, policy: PreferencePolicy) -> Tuple[float, Optional[str]]:
    """
    Star match score: 30 for a preferred star level, 10 partial credit otherwise

    A near-miss keeps partial credit rather than being eliminated outright.
    """
    stars = round_half_up(rating)
    if stars in policy.preferred_stars:
        return float(STAR_MATCH_SCORE), f"{stars}-star hotel"
    return float(STAR_PARTIAL_SCORE), None


def _calculate_price_match(price: float, max_price: float) -> Tuple[float, Optional[str]]:
    """
    Price match score: the unused share of the budget, scaled to 30

    Over budget scores 0. The fraction is not rounded here.
    """
    if price <= max_price:
        return MAX_PRICE_SCORE * (1 - price / max_price), f"Within budget ({format_price(price)})"
    return 0.0, None


def _calculate_location_match(location: str, preferred_locations: Tuple[str, ...]) -> Tuple[float, Optional[str]]:
    """
    Location match score: 20 when any preferred term appears in the location

    The first matching term wins; several matches are not double-counted.
    """
    location_lower = location.lower()
    for term in preferred_locations:
        if term.lower() in location_lower:
            return float(LOCATION_SCORE), f"{term} location"
    return 0.0, None


def _calculate_amenity_match(
    hotel_amenities: Tuple[str, ...],
    required_amenities: Tuple[str, ...]
) -> Tuple[float, Optional[str]]:
    """
    Amenity match score (0-20)

    Logic:
    - No required amenities: 20 (trivially satisfied)
    - Otherwise proportional to the number of required amenities found,
      where a requirement is met when any hotel amenity contains it
      (case-insensitive substring)
    """
    if not required_amenities:
        return float(MAX_AMENITY_SCORE), None

    offered = [amenity.lower() for amenity in hotel_amenities]
    matched = sum(
        1 for required in required_amenities
        if any(required.lower() in amenity for amenity in offered)
    )

    score = matched / len(required_amenities) * MAX_AMENITY_SCORE
    if matched:
        return score, f"Has {matched}/{len(required_amenities)} amenities"
    return score, None


# ============================================
# Matcher
# ============================================

class PreferenceMatcher:
    """
    Scores a DealVerdict against one user's PreferencePolicy

    Deals scoring below the threshold are dropped silently for that user;
    this is a filtering decision, not an error.
    """

    def __init__(self, threshold: int = MATCH_THRESHOLD, urgency_classifier: Optional[UrgencyClassifier] = None):
        self.threshold = threshold
        self.urgency_classifier = urgency_classifier or UrgencyClassifier()

    def match(self, deal: DealVerdict, policy: PreferencePolicy, user_id: str) -> Optional[MatchResult]:
        """
        Match a deal to a user

        Args:
            deal: Verdict from the scoring engine
            policy: The user's preference policy
            user_id: Identifier of the watching user

        Returns:
            MatchResult with urgency, or None when the match score is below 60
        """
        breakdown = calculate_match_score(deal.hotel, policy)

        if breakdown.total_score < self.threshold:
            logger.info(
                f"Filtered: {deal.hotel.name} for user {user_id} (score: {breakdown.total_score})"
            )
            return None

        urgency = self.urgency_classifier.classify(deal.recommendation, breakdown.total_score)

        return MatchResult(
            user_id=user_id,
            deal=deal,
            match_score=breakdown.total_score,
            match_reasons=breakdown.reasons,
            urgency=urgency
        )


def get_match_quality(match_score: int) -> str:
    """
    Get human-readable match quality description

    Example:
        >>> get_match_quality(85)
        'Excellent Match'
    """
    if match_score >= 85:
        return "Excellent Match"
    elif match_score >= 70:
        return "Great Match"
    elif match_score >= MATCH_THRESHOLD:
        return "Good Match"
    else:
        return "Poor Match"
