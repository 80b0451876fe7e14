# interfaces/__init__.py
"""
Interfaces Package

Contains the stores and collaborator adapters:
- price_history_store: Append-only price time series (memory, Redis)
- backend_client: Watchlists, preferences and activity log
- hotel_source: Scrape service boundary and listing validation
- dispatcher: Email service hand-off
"""

from .price_history_store import (
    PriceHistoryStore,
    MemoryPriceHistoryStore,
    RedisPriceHistoryStore,
    DEFAULT_WINDOW_DAYS
)
from .backend_client import BackendClient
from .hotel_source import HotelSource, HttpHotelSource, parse_hotel_listing
from .dispatcher import DealDispatcher, HttpDealDispatcher

__all__ = [
    "PriceHistoryStore",
    "MemoryPriceHistoryStore",
    "RedisPriceHistoryStore",
    "DEFAULT_WINDOW_DAYS",
    "BackendClient",
    "HotelSource",
    "HttpHotelSource",
    "parse_hotel_listing",
    "DealDispatcher",
    "HttpDealDispatcher"
]
