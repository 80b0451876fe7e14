"""
Event Bus Interface - Abstract Base Class
Defines the contract for publishing pipeline events

Implementations:
- MemoryKafka: in-process queues for tests and local runs
- KafkaEventBus: real Kafka / Redpanda via kafka-python
"""

from abc import ABC, abstractmethod

from ..schemas.deal_schemas import DealVerdict, HotelSnapshot, MatchResult


class EventBus(ABC):
    """
    Abstract interface for bus operations

    Publishing is fire-and-forget from the pipeline's point of view:
    a failed or timed-out publish raises PublishFailure, which the
    coordinator logs before moving on. Retries belong to the transport.
    """

    # ============================================
    # Producer Methods
    # ============================================

    @abstractmethod
    async def publish_hotel_price(self, user_id: str, destination: str, hotel: HotelSnapshot) -> None:
        """
        Publish a hotel-price-observed event to topic: hotel-prices

        Raises:
            PublishFailure: If the message could not be delivered
        """

    @abstractmethod
    async def publish_deal_detected(self, user_id: str, destination: str, verdict: DealVerdict) -> None:
        """
        Publish a deal-detected event to topic: deal-analysis

        Raises:
            PublishFailure: If the message could not be delivered
        """

    @abstractmethod
    async def publish_digest_queued(self, match: MatchResult) -> None:
        """
        Publish a monitor-urgency match to topic: deal-digest

        Raises:
            PublishFailure: If the message could not be delivered
        """

    # ============================================
    # Utility Methods
    # ============================================

    @abstractmethod
    async def close(self) -> None:
        """
        Flush pending messages and close connections
        """

    @abstractmethod
    def health_check(self) -> bool:
        """
        Check if the bus connection is healthy

        Returns:
            bool: True if healthy, False otherwise
        """
