# interfaces/price_history_store.py
"""
Price History Store
Append-only time-series of nightly prices keyed by (hotel_id, destination).

Two implementations share one contract:
- MemoryPriceHistoryStore: process-local, used in tests and single-node runs
- RedisPriceHistoryStore: one sorted set per key, scored by epoch seconds

History is never corrected or deleted. Points are retained indefinitely and
the rolling window is applied at read time.
"""

import json
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

import redis
from loguru import logger

from ..errors import StorageUnavailable
from ..schemas.deal_schemas import PricePoint, ensure_utc, utcnow

DEFAULT_WINDOW_DAYS = 30


class PriceHistoryStore(ABC):
    """
    Abstract contract for the price history store

    append() must serialize concurrent writes to the same key so that a
    windowed read always reflects every completed append.
    """

    @abstractmethod
    def append(self, hotel_id: str, destination: str, price: float, timestamp: datetime) -> None:
        """
        Record one observation

        Raises:
            StorageUnavailable: If the backend cannot be reached
        """

    @abstractmethod
    def read_window(
        self,
        hotel_id: str,
        destination: str,
        window_days: int = DEFAULT_WINDOW_DAYS,
        now: Optional[datetime] = None
    ) -> List[PricePoint]:
        """
        Return all points observed within the last window_days, oldest first

        Returns an empty list for a hotel with no history.

        Raises:
            StorageUnavailable: If the backend cannot be reached
        """

    def health_check(self) -> bool:
        return True

    def close(self) -> None:
        """Release backend resources (no-op by default)"""


def _window_start(window_days: int, now: Optional[datetime]) -> datetime:
    return ensure_utc(now or utcnow()) - timedelta(days=window_days)


# ============================================
# In-memory implementation
# ============================================

class MemoryPriceHistoryStore(PriceHistoryStore):
    """
    Process-local store

    Points are kept in arrival order; read_window re-sorts them by
    timestamp. sorted() is stable, so duplicate timestamps keep arrival order.
    """

    def __init__(self):
        self._points: Dict[Tuple[str, str], List[PricePoint]] = {}
        self._key_locks: Dict[Tuple[str, str], threading.Lock] = {}
        self._registry_lock = threading.Lock()
        logger.info("MemoryPriceHistoryStore initialized")

    def _lock_for(self, key: Tuple[str, str]) -> threading.Lock:
        with self._registry_lock:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = self._key_locks[key] = threading.Lock()
            return lock

    def append(self, hotel_id: str, destination: str, price: float, timestamp: datetime) -> None:
        key = (hotel_id, destination)
        point = PricePoint(price=price, observed_at=timestamp)
        with self._lock_for(key):
            self._points.setdefault(key, []).append(point)
        logger.debug(f"Recorded {hotel_id}@{destination}: {price} at {point.observed_at.isoformat()}")

    def read_window(
        self,
        hotel_id: str,
        destination: str,
        window_days: int = DEFAULT_WINDOW_DAYS,
        now: Optional[datetime] = None
    ) -> List[PricePoint]:
        key = (hotel_id, destination)
        cutoff = _window_start(window_days, now)
        with self._lock_for(key):
            points = list(self._points.get(key, ()))
        return sorted(
            (p for p in points if p.observed_at >= cutoff),
            key=lambda p: p.observed_at
        )

    def count(self, hotel_id: str, destination: str) -> int:
        """Total stored points for a key, ignoring the window"""
        key = (hotel_id, destination)
        with self._lock_for(key):
            return len(self._points.get(key, ()))

    def __repr__(self) -> str:
        return f"MemoryPriceHistoryStore(keys={len(self._points)})"


# ============================================
# Redis implementation
# ============================================

class RedisPriceHistoryStore(PriceHistoryStore):
    """
    Redis-backed store

    Layout:
        price_history:{destination}:{hotel_id}  sorted set, score = epoch seconds
        price_history:seq                       global counter

    Each member carries a sequence number so identical (price, timestamp)
    observations remain distinct members and ties sort in arrival order.
    """

    KEY_PREFIX = "price_history"

    def __init__(self, client: redis.Redis):
        self.redis_client = client

    @classmethod
    def from_settings(cls, settings) -> "RedisPriceHistoryStore":
        """Build a store from application settings"""
        client = redis.Redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            db=settings.REDIS_DB,
            password=settings.REDIS_PASSWORD or None,
            decode_responses=True,
            socket_timeout=5,
            socket_connect_timeout=5
        )
        logger.info(f"RedisPriceHistoryStore using {settings.redis_url}")
        return cls(client)

    def _get_key(self, hotel_id: str, destination: str) -> str:
        return f"{self.KEY_PREFIX}:{destination}:{hotel_id}"

    def append(self, hotel_id: str, destination: str, price: float, timestamp: datetime) -> None:
        point = PricePoint(price=price, observed_at=timestamp)
        try:
            seq = self.redis_client.incr(f"{self.KEY_PREFIX}:seq")
            member = json.dumps({
                "price": point.price,
                "observed_at": point.observed_at.isoformat(),
                "seq": seq
            })
            self.redis_client.zadd(
                self._get_key(hotel_id, destination),
                {member: point.observed_at.timestamp()}
            )
        except redis.RedisError as e:
            logger.error(f"Failed to record price for {hotel_id}@{destination}: {e}")
            raise StorageUnavailable(f"price history unavailable: {e}") from e

    def read_window(
        self,
        hotel_id: str,
        destination: str,
        window_days: int = DEFAULT_WINDOW_DAYS,
        now: Optional[datetime] = None
    ) -> List[PricePoint]:
        cutoff = _window_start(window_days, now)
        try:
            members = self.redis_client.zrangebyscore(
                self._get_key(hotel_id, destination),
                cutoff.timestamp(),
                "+inf"
            )
        except redis.RedisError as e:
            logger.error(f"Failed to read history for {hotel_id}@{destination}: {e}")
            raise StorageUnavailable(f"price history unavailable: {e}") from e

        rows = []
        for member in members:
            data = json.loads(member)
            point = PricePoint(price=data["price"], observed_at=datetime.fromisoformat(data["observed_at"]))
            if point.observed_at >= cutoff:
                rows.append((point.observed_at, data.get("seq", 0), point))

        rows.sort(key=lambda row: (row[0], row[1]))
        return [row[2] for row in rows]

    def health_check(self) -> bool:
        try:
            return bool(self.redis_client.ping())
        except redis.RedisError as e:
            logger.warning(f"Redis health check failed: {e}")
            return False

    def close(self) -> None:
        self.redis_client.close()
        logger.info("RedisPriceHistoryStore closed")
