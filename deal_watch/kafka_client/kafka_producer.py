"""
Kafka Producer Wrapper
Async event bus backed by kafka-python, for Kafka or Redpanda brokers
"""

import asyncio
import json
import logging
from typing import Dict, List, Optional

from kafka import KafkaProducer
from kafka.errors import KafkaError

from ..config import settings
from ..errors import PublishFailure
from ..schemas.deal_schemas import DealVerdict, HotelSnapshot, MatchResult
from .interface import EventBus
from .message_schemas import (
    create_deal_detected_event,
    create_digest_queued_event,
    create_hotel_price_event
)

logger = logging.getLogger(__name__)


class KafkaEventBus(EventBus):
    """
    Async wrapper for Kafka producer

    kafka-python is synchronous, so connection setup and sends run in the
    default thread pool. Every send waits at most publish_timeout seconds
    for the broker acknowledgement.
    """

    def __init__(
        self,
        bootstrap_servers: str = None,
        client_id: str = None,
        acks: str = "all",
        publish_timeout: float = None
    ):
        """
        Initialize Kafka producer

        Args:
            bootstrap_servers: Kafka broker addresses
            client_id: Client identifier
            acks: Acknowledgment level (0, 1, all)
            publish_timeout: Seconds to wait for a send acknowledgement
        """
        self.bootstrap_servers = bootstrap_servers or settings.KAFKA_BOOTSTRAP_SERVERS
        self.client_id = client_id or settings.KAFKA_CLIENT_ID
        self.acks = acks
        self.publish_timeout = publish_timeout or settings.PUBLISH_TIMEOUT_SECONDS

        self._producer: Optional[KafkaProducer] = None

    async def start(self):
        """Start the Kafka producer"""
        if self._producer:
            return

        try:
            loop = asyncio.get_running_loop()
            self._producer = await loop.run_in_executor(
                None,
                self._create_producer
            )

            logger.info(f"Kafka producer started, connected to: {self.bootstrap_servers}")

        except KafkaError as e:
            logger.error(f"Failed to start Kafka producer: {e}")
            raise

    def _create_producer(self) -> KafkaProducer:
        """Create the underlying KafkaProducer"""
        return KafkaProducer(
            bootstrap_servers=self.bootstrap_servers.split(","),
            client_id=self.client_id,
            acks=self.acks,
            compression_type="gzip",
            value_serializer=lambda v: json.dumps(v, default=str).encode("utf-8"),
            key_serializer=lambda k: k.encode("utf-8") if k else None,
            max_block_ms=10000,
            request_timeout_ms=30000
        )

    async def close(self):
        """Flush pending messages and stop the Kafka producer"""
        if self._producer:
            try:
                loop = asyncio.get_running_loop()
                await loop.run_in_executor(None, self._producer.flush)
                await loop.run_in_executor(None, self._producer.close)
                logger.info("Kafka producer stopped")
            except KafkaError as e:
                logger.error(f"Error stopping Kafka producer: {e}")
            finally:
                self._producer = None

    async def send(
        self,
        topic: str,
        value: Dict,
        key: Optional[str] = None,
        headers: Optional[List[tuple]] = None
    ) -> None:
        """
        Send a message to a Kafka topic and wait for the acknowledgement

        Args:
            topic: Target topic name
            value: Message value (dict)
            key: Optional message key for partitioning
            headers: Optional message headers

        Raises:
            PublishFailure: If the producer cannot connect, the broker
                rejects the message, or the acknowledgement times out
        """
        if not self._producer:
            # broker was unreachable at startup; connect on first use
            try:
                await self.start()
            except KafkaError as e:
                raise PublishFailure(f"Kafka producer not started: {e}") from e

        def _send():
            future = self._producer.send(
                topic,
                value=value,
                key=key,
                headers=headers
            )
            # Wait for send to complete
            return future.get(timeout=self.publish_timeout)

        try:
            loop = asyncio.get_running_loop()
            metadata = await loop.run_in_executor(None, _send)
        except KafkaError as e:
            logger.error(f"Error sending message to {topic}: {e}")
            raise PublishFailure(f"publish to {topic} failed: {e}") from e

        logger.debug(
            f"Sent message to {topic} "
            f"partition {metadata.partition} "
            f"offset {metadata.offset}"
        )

    # ============================================
    # Pipeline events
    # ============================================

    async def publish_hotel_price(self, user_id: str, destination: str, hotel: HotelSnapshot) -> None:
        """
        Send a snapshot to the hotel-prices topic

        Message format:
        {
            "eventType": "hotel-price-observed",
            "userId": "user-42",
            "destination": "Paris",
            "hotel": { ... },
            "timestamp": "2025-11-08T10:31:00+00:00"
        }
        """
        event = create_hotel_price_event(user_id, destination, hotel)
        await self.send(
            topic=settings.KAFKA_HOTEL_PRICES_TOPIC,
            value=event.model_dump(mode="json"),
            key=user_id
        )

    async def publish_deal_detected(self, user_id: str, destination: str, verdict: DealVerdict) -> None:
        """Send a verdict to the deal-analysis topic, keyed by user"""
        event = create_deal_detected_event(user_id, destination, verdict)
        await self.send(
            topic=settings.KAFKA_DEAL_ANALYSIS_TOPIC,
            value=event.model_dump(mode="json"),
            key=user_id
        )

    async def publish_digest_queued(self, match: MatchResult) -> None:
        """Send a monitor-urgency match to the deal-digest topic"""
        event = create_digest_queued_event(match)
        await self.send(
            topic=settings.KAFKA_DEAL_DIGEST_TOPIC,
            value=event.model_dump(mode="json"),
            key=match.user_id
        )

    def health_check(self) -> bool:
        """Check if producer is connected to a broker"""
        return self._producer is not None and self._producer.bootstrap_connected()

    @property
    def is_connected(self) -> bool:
        """Check if producer is started"""
        return self._producer is not None
