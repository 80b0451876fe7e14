# schemas/deal_schemas.py
"""
Pydantic v2 schemas for the deal detection pipeline
Snapshots, price history, verdicts, user policies and match results
"""

import hashlib
from datetime import date, datetime, timezone
from enum import Enum
from typing import FrozenSet, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def utcnow() -> datetime:
    """Timezone-aware current time in UTC"""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC, convert aware ones to UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def generate_hotel_id(name: str, destination: str) -> str:
    """Derive a stable 12-character hotel identifier from name and destination"""
    digest = hashlib.md5(f"{name}-{destination}".encode("utf-8")).hexdigest()
    return digest[:12]


# ============================================
# Enums
# ============================================

class Recommendation(str, Enum):
    BOOK_NOW = "BOOK_NOW"
    MONITOR = "MONITOR"
    WAIT = "WAIT"


class Trend(str, Enum):
    RISING = "rising"
    FALLING = "falling"
    FLAT = "flat"


class Urgency(str, Enum):
    IMMEDIATE = "immediate"
    SOON = "soon"
    MONITOR = "monitor"


# ============================================
# Hotel observations
# ============================================

class HotelSnapshot(BaseModel):
    """One point-in-time observation of a hotel's price and attributes"""
    model_config = ConfigDict(frozen=True)

    hotel_id: str = ""
    name: str = Field(..., min_length=1)
    destination: str = Field(..., min_length=1)
    location: str = ""
    price_per_night: float = Field(..., ge=0)
    rating: float = Field(default=0.0, ge=0, le=5)
    review_count: int = Field(default=0, ge=0)
    amenities: Tuple[str, ...] = ()
    available: bool = False
    observed_at: datetime = Field(default_factory=utcnow)
    url: Optional[str] = None

    @field_validator("amenities", mode="before")
    @classmethod
    def _dedupe_amenities(cls, value):
        if value is None:
            return ()
        if isinstance(value, str):
            value = value.split(",")
        seen = []
        for amenity in value:
            amenity = str(amenity).strip()
            if amenity and amenity not in seen:
                seen.append(amenity)
        return tuple(seen)

    @field_validator("observed_at")
    @classmethod
    def _observed_at_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @model_validator(mode="before")
    @classmethod
    def _derive_hotel_id(cls, data):
        if isinstance(data, dict) and not data.get("hotel_id"):
            name, destination = data.get("name"), data.get("destination")
            if name and destination:
                data = {**data, "hotel_id": generate_hotel_id(name, destination)}
        return data

    @property
    def amenity_count(self) -> int:
        return len(self.amenities)


class PricePoint(BaseModel):
    """A stored (price, timestamp) pair inside a hotel's history"""
    model_config = ConfigDict(frozen=True)

    price: float = Field(..., ge=0)
    observed_at: datetime

    @field_validator("observed_at")
    @classmethod
    def _observed_at_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


# ============================================
# Scoring output
# ============================================

class DealVerdict(BaseModel):
    """Scoring engine output for a snapshot that qualified as a deal"""
    model_config = ConfigDict(frozen=True)

    hotel: HotelSnapshot
    deal_score: int = Field(..., ge=0, le=100)
    historical_average: int
    savings: float
    price_change_percent: float
    recommendation: Recommendation
    confidence: int = Field(..., ge=0, le=100)
    trend: Trend = Trend.FLAT
    timestamp: datetime = Field(default_factory=utcnow)

    @property
    def destination(self) -> str:
        return self.hotel.destination


# ============================================
# Personalization
# ============================================

class PreferencePolicy(BaseModel):
    """
    Per-user matching configuration, supplied by the backend

    Accepts both the backend's camelCase keys and snake_case names.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    preferred_stars: FrozenSet[int] = Field(default_factory=frozenset, alias="preferredStars")
    max_price_per_night: float = Field(..., gt=0, alias="maxPricePerNight")
    preferred_locations: Tuple[str, ...] = Field(default=(), alias="preferredLocations")
    required_amenities: Tuple[str, ...] = Field(default=(), alias="requiredAmenities")

    @field_validator("preferred_stars")
    @classmethod
    def _stars_in_range(cls, value: FrozenSet[int]) -> FrozenSet[int]:
        for stars in value:
            if not 1 <= stars <= 5:
                raise ValueError(f"preferred star rating out of range: {stars}")
        return value

    @field_validator("preferred_locations", "required_amenities", mode="before")
    @classmethod
    def _drop_blank_terms(cls, value):
        if value is None:
            return ()
        if isinstance(value, str):
            value = (value,)
        return tuple(term.strip() for term in value if isinstance(term, str) and term.strip())


class MatchResult(BaseModel):
    """A deal matched to one user, ready for dispatch or the digest"""
    model_config = ConfigDict(frozen=True)

    user_id: str
    deal: DealVerdict
    match_score: int = Field(..., ge=0, le=100)
    match_reasons: Tuple[str, ...] = ()
    urgency: Urgency
    timestamp: datetime = Field(default_factory=utcnow)

    @property
    def should_dispatch(self) -> bool:
        return self.urgency in (Urgency.IMMEDIATE, Urgency.SOON)


# ============================================
# Pipeline bookkeeping
# ============================================

class Watchlist(BaseModel):
    """A user's subscription to a destination (owned by the backend)"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    user_id: str = Field(..., min_length=1, alias="userId")
    destination: str = Field(..., min_length=1)
    check_in_date: Optional[date] = Field(default=None, alias="checkInDate")
    check_out_date: Optional[date] = Field(default=None, alias="checkOutDate")

    @field_validator("check_in_date", "check_out_date", mode="before")
    @classmethod
    def _date_only(cls, value):
        # backend serialises dates as full ISO timestamps
        if isinstance(value, str) and "T" in value:
            return value.split("T", 1)[0]
        return value


class CycleReport(BaseModel):
    """Counters for one pipeline cycle"""

    watchlist_count: int = 0
    destination_count: int = 0
    hotels_scraped: int = 0
    deals_found: int = 0
    matches: int = 0
    dispatched: int = 0
    digest_queued: int = 0
    failed_destinations: List[str] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=utcnow)
    finished_at: Optional[datetime] = None
