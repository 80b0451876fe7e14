# tests/conftest.py

"""Shared pytest fixtures for the pipeline tests."""

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional
from unittest.mock import AsyncMock, patch

import pytest

from deal_watch.errors import CollaboratorError, DispatchFailure, FetchFailure
from deal_watch.interfaces.dispatcher import DealDispatcher
from deal_watch.interfaces.hotel_source import HotelSource
from deal_watch.interfaces.price_history_store import MemoryPriceHistoryStore
from deal_watch.kafka_client.memory_kafka import MemoryKafka
from deal_watch.schemas.deal_schemas import HotelSnapshot, PreferencePolicy, Watchlist

NOW = datetime(2025, 11, 8, 12, 0, tzinfo=timezone.utc)


def make_snapshot(**overrides) -> HotelSnapshot:
    """Build a HotelSnapshot with sensible defaults."""
    fields = {
        "name": "Hotel Centrale",
        "destination": "Rome",
        "location": "Central Rome",
        "price_per_night": 100.0,
        "rating": 4.0,
        "review_count": 250,
        "amenities": ["wifi", "pool"],
        "available": True,
        "observed_at": NOW,
    }
    fields.update(overrides)
    return HotelSnapshot(**fields)


def seed_history(store, snapshot: HotelSnapshot, prices: List[float], end: datetime = NOW) -> None:
    """Append one point per day ending the day before ``end``."""
    for offset, price in enumerate(reversed(prices), start=1):
        store.append(snapshot.hotel_id, snapshot.destination, price, end - timedelta(days=offset))


class FakeHotelSource(HotelSource):
    """Returns canned snapshots per destination, or raises FetchFailure."""

    def __init__(self, hotels: Dict[str, List[HotelSnapshot]], failing: tuple = ()):
        self.hotels = hotels
        self.failing = set(failing)
        self.calls: List[str] = []

    async def fetch_destination(self, destination, check_in=None, check_out=None):
        self.calls.append(destination)
        if destination in self.failing:
            raise FetchFailure(f"scrape service down for {destination}")
        return list(self.hotels.get(destination, []))


class FakeBackend:
    """In-memory stand-in for BackendClient."""

    def __init__(
        self,
        watchlists: List[Watchlist],
        policies: Dict[str, PreferencePolicy],
        watchlist_error: Optional[Exception] = None
    ):
        self.watchlists = watchlists
        self.policies = policies
        self.watchlist_error = watchlist_error
        self.preference_calls: List[str] = []
        self.activity: List[tuple] = []

    async def get_active_watchlists(self):
        if self.watchlist_error:
            raise self.watchlist_error
        return list(self.watchlists)

    async def get_preferences(self, user_id):
        self.preference_calls.append(user_id)
        if user_id not in self.policies:
            raise CollaboratorError(f"no preferences for {user_id}")
        return self.policies[user_id]

    async def log_activity(self, action, details):
        self.activity.append((action, details))
        return True

    async def close(self):
        pass

    def actions(self) -> List[str]:
        return [action for action, _ in self.activity]


class FakeDispatcher(DealDispatcher):
    """Records dispatched matches; optionally fails every dispatch."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    async def dispatch(self, match):
        if self.fail:
            raise DispatchFailure("email service rejected the alert")
        self.sent.append(match)


@pytest.fixture
def mock_async_sleep():
    """Patch asyncio.sleep so destination pacing and scheduling run instantly."""
    with patch("asyncio.sleep", new_callable=AsyncMock) as sleep:
        yield sleep


@pytest.fixture
def store() -> MemoryPriceHistoryStore:
    return MemoryPriceHistoryStore()


@pytest.fixture
def bus() -> MemoryKafka:
    return MemoryKafka()


@pytest.fixture
def snapshot() -> HotelSnapshot:
    return make_snapshot()


@pytest.fixture
def generous_policy() -> PreferencePolicy:
    """Matches a 4-star central hotel under $400 with a high score."""
    return PreferencePolicy(
        preferred_stars={4, 5},
        max_price_per_night=400,
        preferred_locations=["central"],
        required_amenities=["wifi"]
    )
