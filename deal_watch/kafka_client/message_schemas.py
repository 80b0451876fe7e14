"""
Kafka Message Schemas - Pydantic v2 Models
Defines the structure of all messages published by the pipeline
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..algorithms.deal_scorer import get_deal_quality
from ..schemas.deal_schemas import DealVerdict, HotelSnapshot, MatchResult, utcnow


def _hotel_payload(hotel: HotelSnapshot) -> Dict[str, Any]:
    """Hotel fields in the camelCase shape consumers expect"""
    return {
        "id": hotel.hotel_id,
        "name": hotel.name,
        "location": hotel.location,
        "rating": hotel.rating,
        "reviewCount": hotel.review_count,
        "pricePerNight": hotel.price_per_night,
        "amenities": list(hotel.amenities),
        "availability": hotel.available,
        "url": hotel.url,
        "scrapedAt": hotel.observed_at.isoformat()
    }


# ============================================
# Hotel Price Observed (telemetry, every snapshot)
# ============================================

class HotelPriceObservedEvent(BaseModel):
    """
    Event published for every snapshot, once per watching user
    Topic: hotel-prices
    """
    eventType: str = "hotel-price-observed"
    userId: str = Field(..., description="Watching user, also the message key")
    destination: str
    hotel: Dict[str, Any]
    timestamp: datetime = Field(default_factory=utcnow)

    model_config = {
        "json_schema_extra": {
            "example": {
                "eventType": "hotel-price-observed",
                "userId": "user-42",
                "destination": "Paris",
                "hotel": {"id": "a1b2c3d4e5f6", "name": "Le Marais", "pricePerNight": 180.0}
            }
        }
    }


# ============================================
# Deal Detected (one per verdict per watching user)
# ============================================

class DealDetectedEvent(BaseModel):
    """
    Event published for every non-null DealVerdict
    Topic: deal-analysis
    """
    eventType: str = "deal-detected"
    userId: str
    destination: str
    hotel: Dict[str, Any]
    dealScore: int = Field(..., ge=0, le=100)
    dealQuality: str = ""
    savings: float
    priceChange: float
    historicalAverage: int
    recommendation: str
    confidence: int = Field(..., ge=0, le=100)
    trend: str
    timestamp: datetime = Field(default_factory=utcnow)

    model_config = {
        "json_schema_extra": {
            "example": {
                "eventType": "deal-detected",
                "userId": "user-42",
                "destination": "Paris",
                "dealScore": 88,
                "dealQuality": "Excellent Deal",
                "savings": 70.0,
                "priceChange": -28.0,
                "historicalAverage": 250,
                "recommendation": "BOOK_NOW",
                "confidence": 80,
                "trend": "rising"
            }
        }
    }


# ============================================
# Digest Queued (monitor-urgency matches)
# ============================================

class DigestQueuedEvent(BaseModel):
    """
    Event published for matches that are not urgent enough to email now.
    Digest batching belongs to the email service.
    Topic: deal-digest
    """
    eventType: str = "deal-digest-queued"
    userId: str
    destination: str
    hotel: Dict[str, Any]
    dealScore: int
    matchScore: int
    matchReasons: List[str] = Field(default_factory=list)
    urgency: str
    recommendation: str
    savings: float
    historicalAverage: int
    timestamp: datetime = Field(default_factory=utcnow)


# ============================================
# Helper Functions
# ============================================

def create_hotel_price_event(user_id: str, destination: str, hotel: HotelSnapshot) -> HotelPriceObservedEvent:
    return HotelPriceObservedEvent(
        userId=user_id,
        destination=destination,
        hotel=_hotel_payload(hotel)
    )


def create_deal_detected_event(
    user_id: str,
    destination: str,
    verdict: DealVerdict,
    timestamp: Optional[datetime] = None
) -> DealDetectedEvent:
    """
    Helper function to create DealDetectedEvent from a verdict

    Args:
        user_id: Watching user
        destination: Destination the hotel was fetched for
        verdict: Scoring engine output
        timestamp: Event time (defaults to the verdict's timestamp)

    Returns:
        DealDetectedEvent: Event ready to publish
    """
    return DealDetectedEvent(
        userId=user_id,
        destination=destination,
        hotel=_hotel_payload(verdict.hotel),
        dealScore=verdict.deal_score,
        dealQuality=get_deal_quality(verdict.deal_score),
        savings=round(verdict.savings, 2),
        priceChange=round(verdict.price_change_percent, 2),
        historicalAverage=verdict.historical_average,
        recommendation=verdict.recommendation.value,
        confidence=verdict.confidence,
        trend=verdict.trend.value,
        timestamp=timestamp or verdict.timestamp
    )


def create_digest_queued_event(match: MatchResult) -> DigestQueuedEvent:
    deal = match.deal
    return DigestQueuedEvent(
        userId=match.user_id,
        destination=deal.destination,
        hotel=_hotel_payload(deal.hotel),
        dealScore=deal.deal_score,
        matchScore=match.match_score,
        matchReasons=list(match.match_reasons),
        urgency=match.urgency.value,
        recommendation=deal.recommendation.value,
        savings=round(deal.savings, 2),
        historicalAverage=deal.historical_average,
        timestamp=match.timestamp
    )
