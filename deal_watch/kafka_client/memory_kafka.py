"""
Memory-based Kafka Implementation
In-process queues standing in for the bus during tests and local runs
"""

from queue import Queue
from typing import Dict, List

from loguru import logger
from pydantic import BaseModel

from .interface import EventBus
from .message_schemas import (
    create_deal_detected_event,
    create_digest_queued_event,
    create_hotel_price_event
)
from ..schemas.deal_schemas import DealVerdict, HotelSnapshot, MatchResult

HOTEL_PRICES = "hotel-prices"
DEAL_ANALYSIS = "deal-analysis"
DEAL_DIGEST = "deal-digest"


class MemoryKafka(EventBus):
    """
    In-memory implementation of the event bus

    Features:
    - One Python Queue per topic
    - Same event payloads as the real producer
    - Drain helpers for assertions in tests

    Usage:
        bus = MemoryKafka()
        await bus.publish_hotel_price("user-1", "Paris", snapshot)
        events = bus.consume(HOTEL_PRICES)
    """

    def __init__(self):
        self.queues: Dict[str, Queue] = {
            HOTEL_PRICES: Queue(),
            DEAL_ANALYSIS: Queue(),
            DEAL_DIGEST: Queue()
        }
        logger.info("MemoryKafka initialized")

    # ============================================
    # Producer Methods
    # ============================================

    async def publish_hotel_price(self, user_id: str, destination: str, hotel: HotelSnapshot) -> None:
        event = create_hotel_price_event(user_id, destination, hotel)
        self._put(HOTEL_PRICES, event)
        logger.debug(f"Published hotel price: {hotel.hotel_id} for {user_id}")

    async def publish_deal_detected(self, user_id: str, destination: str, verdict: DealVerdict) -> None:
        event = create_deal_detected_event(user_id, destination, verdict)
        self._put(DEAL_ANALYSIS, event)
        logger.info(f"Published deal_detected: {verdict.hotel.hotel_id} (score: {verdict.deal_score})")

    async def publish_digest_queued(self, match: MatchResult) -> None:
        event = create_digest_queued_event(match)
        self._put(DEAL_DIGEST, event)
        logger.info(f"Queued for digest: {match.deal.hotel.hotel_id} for {match.user_id}")

    def _put(self, topic: str, event: BaseModel) -> None:
        self.queues[topic].put(event)

    # ============================================
    # Consumer Methods
    # ============================================

    def consume(self, topic: str) -> List[BaseModel]:
        """
        Drain all available events from a topic queue

        Returns:
            List of events (may be empty)
        """
        queue = self.queues[topic]
        results = []
        while not queue.empty():
            results.append(queue.get())
        return results

    # ============================================
    # Utility Methods
    # ============================================

    async def close(self) -> None:
        logger.info("MemoryKafka closed (no actual connections to close)")

    def health_check(self) -> bool:
        return True

    def get_queue_sizes(self) -> Dict[str, int]:
        """
        Get current size of all queues

        Returns:
            dict: Topic names and their sizes
        """
        return {topic: queue.qsize() for topic, queue in self.queues.items()}

    def __repr__(self) -> str:
        return f"MemoryKafka(queues={self.get_queue_sizes()})"
