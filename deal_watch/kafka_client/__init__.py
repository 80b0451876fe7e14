"""
Kafka Integration Module
Provides abstraction layer for publishing pipeline events
"""

from .interface import EventBus
from .message_schemas import (
    HotelPriceObservedEvent,
    DealDetectedEvent,
    DigestQueuedEvent
)
from .memory_kafka import MemoryKafka, HOTEL_PRICES, DEAL_ANALYSIS, DEAL_DIGEST
from .kafka_producer import KafkaEventBus

__all__ = [
    "EventBus",
    "HotelPriceObservedEvent",
    "DealDetectedEvent",
    "DigestQueuedEvent",
    "MemoryKafka",
    "KafkaEventBus",
    "HOTEL_PRICES",
    "DEAL_ANALYSIS",
    "DEAL_DIGEST"
]
