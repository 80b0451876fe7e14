# schemas/__init__.py
"""
Pydantic Schemas Package

Contains all Pydantic v2 models for:
- Hotel snapshots and price history points
- Deal verdicts and match results
- Backend-supplied watchlists and preference policies
"""

from .deal_schemas import (
    # Enums
    Recommendation, Trend, Urgency,
    # Observations
    HotelSnapshot, PricePoint,
    # Scoring & matching
    DealVerdict, PreferencePolicy, MatchResult,
    # Pipeline
    Watchlist, CycleReport,
    # Helpers
    generate_hotel_id, utcnow, ensure_utc,
)

__all__ = [
    "Recommendation", "Trend", "Urgency",
    "HotelSnapshot", "PricePoint",
    "DealVerdict", "PreferencePolicy", "MatchResult",
    "Watchlist", "CycleReport",
    "generate_hotel_id", "utcnow", "ensure_utc",
]
