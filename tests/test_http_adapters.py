# tests/test_http_adapters.py

"""Tests for the httpx-based collaborator adapters."""

import asyncio
import json
from datetime import date

import httpx
import pytest

from conftest import make_snapshot
from deal_watch.errors import CollaboratorError, DispatchFailure, FetchFailure
from deal_watch.interfaces.backend_client import BackendClient
from deal_watch.interfaces.dispatcher import HttpDealDispatcher
from deal_watch.interfaces.hotel_source import HttpHotelSource, parse_hotel_listing
from deal_watch.schemas.deal_schemas import (
    DealVerdict,
    MatchResult,
    Recommendation,
    Urgency,
)

RAW_HOTEL = {
    "type": "hotel",
    "name": "Hotel Centrale",
    "locationString": "Central Rome, Lazio",
    "rating": 4.5,
    "numberOfReviews": 812,
    "amenities": ["Free WiFi", "Pool", "Free WiFi"],
    "url": "https://example.test/hotel-centrale",
    "offers": [{"pricePerNight": 140, "availability": True}],
}


class TestParseHotelListing:
    """Validation at the scrape boundary."""

    def test_valid_listing(self) -> None:
        snapshot = parse_hotel_listing(RAW_HOTEL, "Rome")

        assert snapshot.name == "Hotel Centrale"
        assert snapshot.destination == "Rome"
        assert snapshot.location == "Central Rome, Lazio"
        assert snapshot.price_per_night == 140
        assert snapshot.review_count == 812
        assert snapshot.amenities == ("Free WiFi", "Pool")
        assert snapshot.available is True
        assert len(snapshot.hotel_id) == 12

    def test_hotel_id_is_stable(self) -> None:
        first = parse_hotel_listing(RAW_HOTEL, "Rome")
        second = parse_hotel_listing(dict(RAW_HOTEL, rating=3.0), "Rome")
        assert first.hotel_id == second.hotel_id
        assert first.hotel_id != parse_hotel_listing(RAW_HOTEL, "Milan").hotel_id

    def test_non_hotel_items_are_skipped(self) -> None:
        assert parse_hotel_listing(dict(RAW_HOTEL, type="restaurant"), "Rome") is None

    def test_items_without_offers_are_skipped(self) -> None:
        assert parse_hotel_listing(dict(RAW_HOTEL, offers=[]), "Rome") is None

    def test_invalid_items_are_skipped(self) -> None:
        assert parse_hotel_listing(dict(RAW_HOTEL, rating=7.5), "Rome") is None
        assert parse_hotel_listing(dict(RAW_HOTEL, name=""), "Rome") is None

    def test_malformed_items_are_skipped(self) -> None:
        assert parse_hotel_listing(None, "Rome") is None
        assert parse_hotel_listing("Hotel Centrale", "Rome") is None
        assert parse_hotel_listing(dict(RAW_HOTEL, offers=[None]), "Rome") is None
        assert parse_hotel_listing(dict(RAW_HOTEL, offers="140"), "Rome") is None


class TestHttpHotelSource:
    """Fetching and translating scrape service responses."""

    def test_fetch_destination_passes_dates_and_parses(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json=[RAW_HOTEL, dict(RAW_HOTEL, offers=[])])

        source = HttpHotelSource("http://scraper.test", transport=httpx.MockTransport(handler))
        hotels = asyncio.run(source.fetch_destination("Rome", date(2025, 12, 1), date(2025, 12, 4)))

        assert seen["params"] == {"destination": "Rome", "checkIn": "2025-12-01", "checkOut": "2025-12-04"}
        assert [h.name for h in hotels] == ["Hotel Centrale"]

    def test_accepts_wrapped_items(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"items": [RAW_HOTEL]}))
        source = HttpHotelSource("http://scraper.test", transport=transport)

        assert len(asyncio.run(source.fetch_destination("Rome"))) == 1

    def test_null_items_do_not_drop_destination(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json=[None, RAW_HOTEL, 42]))
        source = HttpHotelSource("http://scraper.test", transport=transport)

        hotels = asyncio.run(source.fetch_destination("Rome"))

        assert [h.name for h in hotels] == ["Hotel Centrale"]

    def test_server_error_is_fetch_failure(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(502))
        source = HttpHotelSource("http://scraper.test", transport=transport)

        with pytest.raises(FetchFailure):
            asyncio.run(source.fetch_destination("Rome"))


class TestBackendClient:
    """Watchlists, preferences and the activity log."""

    def test_active_watchlists_skip_malformed_rows(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/watchlists/active"
            assert request.headers["X-Agent-Secret"] == "s3cret"
            return httpx.Response(200, json=[
                {"userId": "u1", "destination": "Rome", "checkInDate": "2025-12-01T00:00:00.000Z"},
                {"destination": "Paris"},
            ])

        client = BackendClient("http://backend.test", "s3cret", transport=httpx.MockTransport(handler))
        watchlists = asyncio.run(client.get_active_watchlists())

        assert len(watchlists) == 1
        assert watchlists[0].user_id == "u1"
        assert watchlists[0].check_in_date == date(2025, 12, 1)

    def test_preferences_parse_camel_case(self) -> None:
        body = {
            "preferredStars": [4, 5],
            "maxPricePerNight": 250,
            "preferredLocations": ["Centro", " "],
            "requiredAmenities": ["wifi"],
        }
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json=body))
        client = BackendClient("http://backend.test", "s3cret", transport=transport)

        policy = asyncio.run(client.get_preferences("u1"))

        assert policy.preferred_stars == frozenset({4, 5})
        assert policy.max_price_per_night == 250
        assert policy.preferred_locations == ("Centro",)

    def test_preferences_errors_are_collaborator_errors(self) -> None:
        not_found = httpx.MockTransport(lambda request: httpx.Response(404))
        invalid = httpx.MockTransport(lambda request: httpx.Response(200, json={"maxPricePerNight": 0}))

        for transport in (not_found, invalid):
            client = BackendClient("http://backend.test", "s3cret", transport=transport)
            with pytest.raises(CollaboratorError):
                asyncio.run(client.get_preferences("u1"))

    def test_log_activity_posts_agent_type(self) -> None:
        posted = {}

        def handler(request: httpx.Request) -> httpx.Response:
            posted.update(json.loads(request.content))
            return httpx.Response(201)

        client = BackendClient("http://backend.test", "s3cret", transport=httpx.MockTransport(handler))

        assert asyncio.run(client.log_activity("scraped", {"hotelCount": 3})) is True
        assert posted == {"agentType": "scraper-analyzer", "action": "scraped", "details": {"hotelCount": 3}}

    def test_log_activity_failure_is_swallowed(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client = BackendClient("http://backend.test", "s3cret", transport=httpx.MockTransport(handler))

        assert asyncio.run(client.log_activity("cycle_started", {})) is False


class TestHttpDealDispatcher:
    """Hand-off of matches to the email service."""

    @staticmethod
    def _match() -> MatchResult:
        hotel = make_snapshot(price_per_night=80)
        verdict = DealVerdict(
            hotel=hotel,
            deal_score=88,
            historical_average=120,
            savings=40,
            price_change_percent=-33.3,
            recommendation=Recommendation.BOOK_NOW,
            confidence=60,
        )
        return MatchResult(
            user_id="u1",
            deal=verdict,
            match_score=90,
            match_reasons=("4-star hotel",),
            urgency=Urgency.IMMEDIATE,
        )

    def test_dispatch_posts_match_json(self) -> None:
        posted = {}

        def handler(request: httpx.Request) -> httpx.Response:
            posted["path"] = request.url.path
            posted["body"] = json.loads(request.content)
            return httpx.Response(202)

        dispatcher = HttpDealDispatcher("http://email.test", transport=httpx.MockTransport(handler))
        asyncio.run(dispatcher.dispatch(self._match()))

        assert posted["path"] == "/api/deal-alerts"
        assert posted["body"]["user_id"] == "u1"
        assert posted["body"]["urgency"] == "immediate"
        assert posted["body"]["deal"]["deal_score"] == 88

    def test_rejection_is_dispatch_failure(self) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(500))
        dispatcher = HttpDealDispatcher("http://email.test", transport=transport)

        with pytest.raises(DispatchFailure):
            asyncio.run(dispatcher.dispatch(self._match()))
