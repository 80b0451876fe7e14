# interfaces/hotel_source.py
"""
Hotel Source
Boundary between the external scrape service and the pipeline.

Raw listings are validated here, once, into HotelSnapshot records; nothing
downstream re-checks them.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any, List, Optional

import httpx
from loguru import logger
from pydantic import ValidationError

from ..errors import FetchFailure
from ..schemas.deal_schemas import HotelSnapshot, utcnow


def parse_hotel_listing(
    item: Any,
    destination: str,
    observed_at: Optional[datetime] = None
) -> Optional[HotelSnapshot]:
    """
    Convert one raw scrape item into a HotelSnapshot

    Only hotel items with at least one offer are kept. Raw field names
    follow the TripAdvisor dataset shape (locationString, numberOfReviews,
    offers[0].pricePerNight, offers[0].availability).

    Args:
        item: Raw listing from the scrape service
        destination: Destination the listing was fetched for
        observed_at: Observation time (defaults to now)

    Returns:
        HotelSnapshot, or None for malformed, non-hotel, offer-less or
        invalid items
    """
    if not isinstance(item, dict) or item.get("type", "hotel") != "hotel":
        return None

    offers = item.get("offers")
    if not isinstance(offers, (list, tuple)) or not offers:
        return None
    offer = offers[0]
    if not isinstance(offer, dict):
        return None

    try:
        return HotelSnapshot(
            name=item.get("name") or "",
            destination=destination,
            location=item.get("locationString") or item.get("location") or "",
            price_per_night=offer.get("pricePerNight") or 0,
            rating=item.get("rating") or 0,
            review_count=item.get("numberOfReviews") or 0,
            amenities=item.get("amenities") or [],
            available=bool(offer.get("availability")),
            observed_at=observed_at or utcnow(),
            url=item.get("url")
        )
    except ValidationError as e:
        logger.warning(f"Skipping invalid listing {item.get('name')!r} in {destination}: {e}")
        return None


class HotelSource(ABC):
    """Producer of validated snapshots, one destination per call"""

    @abstractmethod
    async def fetch_destination(
        self,
        destination: str,
        check_in: Optional[date] = None,
        check_out: Optional[date] = None
    ) -> List[HotelSnapshot]:
        """
        Fetch current listings for a destination

        Raises:
            FetchFailure: If the scrape service fails for this destination
        """

    async def close(self) -> None:
        """Release client resources (no-op by default)"""


class HttpHotelSource(HotelSource):
    """
    Fetches raw listings from the scrape service over HTTP

    GET {base_url}/api/hotels?destination=...&checkIn=...&checkOut=...
    returns a JSON list of raw items (or {"items": [...]}).
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def fetch_destination(
        self,
        destination: str,
        check_in: Optional[date] = None,
        check_out: Optional[date] = None
    ) -> List[HotelSnapshot]:
        params = {"destination": destination}
        if check_in:
            params["checkIn"] = check_in.isoformat()
        if check_out:
            params["checkOut"] = check_out.isoformat()

        logger.info(f"Fetching hotels for {destination}...")
        try:
            response = await self._client.get("/api/hotels", params=params)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise FetchFailure(f"fetch for {destination} failed: {e}") from e

        items = payload.get("items", []) if isinstance(payload, dict) else payload
        observed_at = utcnow()
        hotels = [
            snapshot for snapshot in (
                parse_hotel_listing(item, destination, observed_at) for item in items or []
            )
            if snapshot is not None
        ]

        logger.info(f"Processed {len(hotels)} hotels from {destination}")
        return hotels

    async def close(self) -> None:
        await self._client.aclose()
