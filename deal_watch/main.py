"""
Deal Watch Service - FastAPI Application
Hosts the scrape/score/match pipeline as a background scheduler and exposes
operational endpoints.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from kafka.errors import KafkaError
from loguru import logger

from .agents.pipeline_coordinator import PipelineCoordinator
from .algorithms.deal_scorer import DealScoringEngine
from .algorithms.preference_matcher import PreferenceMatcher
from .api.routes import router as deal_watch_router
from .config import Settings, settings
from .errors import ConfigurationError
from .interfaces.backend_client import BackendClient
from .interfaces.dispatcher import HttpDealDispatcher
from .interfaces.hotel_source import HttpHotelSource
from .interfaces.price_history_store import (
    MemoryPriceHistoryStore,
    PriceHistoryStore,
    RedisPriceHistoryStore
)
from .kafka_client.kafka_producer import KafkaEventBus
from .logging_config import setup_logging

SERVICE_NAME = "Deal Watch Service"
SERVICE_VERSION = "1.0.0"


# ============================================
# Component wiring
# ============================================

def build_store(config: Settings) -> PriceHistoryStore:
    if config.PRICE_HISTORY_BACKEND == "memory":
        logger.info("Using in-memory price history")
        return MemoryPriceHistoryStore()
    return RedisPriceHistoryStore.from_settings(config)


async def build_coordinator(config: Settings) -> PipelineCoordinator:
    """
    Build every collaborator from settings and wire the coordinator

    Raises:
        ConfigurationError: If a required setting is missing
    """
    missing = config.validate()
    if missing:
        raise ConfigurationError(f"missing or invalid settings: {', '.join(missing)}")

    bus = KafkaEventBus(
        bootstrap_servers=config.KAFKA_BOOTSTRAP_SERVERS,
        client_id=config.KAFKA_CLIENT_ID,
        publish_timeout=config.PUBLISH_TIMEOUT_SECONDS
    )
    try:
        await bus.start()
    except KafkaError as e:
        logger.warning(f"Kafka unavailable at startup, will connect on first publish: {e}")

    store = build_store(config)
    engine = DealScoringEngine(store, window_days=config.HISTORY_WINDOW_DAYS)

    return PipelineCoordinator(
        engine=engine,
        matcher=PreferenceMatcher(),
        bus=bus,
        source=HttpHotelSource(config.SCRAPER_API_URL),
        backend=BackendClient(config.BACKEND_API_URL, config.AGENT_SECRET, timeout=config.HTTP_TIMEOUT_SECONDS),
        dispatcher=HttpDealDispatcher(
            config.EMAIL_SERVICE_URL,
            agent_secret=config.AGENT_SECRET,
            timeout=config.HTTP_TIMEOUT_SECONDS
        ),
        destination_delay=config.DESTINATION_DELAY_SECONDS,
        cycle_interval_hours=config.CYCLE_INTERVAL_HOURS,
        publish_timeout=config.PUBLISH_TIMEOUT_SECONDS
    )


async def shutdown_coordinator(coordinator: PipelineCoordinator):
    """Stop the scheduler and release every collaborator"""
    await coordinator.stop()
    await coordinator.bus.close()
    await coordinator.source.close()
    await coordinator.backend.close()
    await coordinator.dispatcher.close()
    coordinator.engine.store.close()


# ============================================
# Application
# ============================================

def create_app(
    coordinator: Optional[PipelineCoordinator] = None,
    start_scheduler: bool = True
) -> FastAPI:
    """
    Create the FastAPI application

    Args:
        coordinator: Pre-built coordinator (built from settings when None)
        start_scheduler: Start the background cycle loop on startup
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler"""
        setup_logging(settings.LOG_LEVEL)
        logger.info("=" * 50)
        logger.info(f"Starting {SERVICE_NAME}")
        logger.info("=" * 50)

        app.state.coordinator = coordinator or await build_coordinator(settings)
        if start_scheduler:
            await app.state.coordinator.start()

        yield

        logger.info(f"Shutting down {SERVICE_NAME}...")
        await shutdown_coordinator(app.state.coordinator)
        logger.info("Shutdown complete")

    app = FastAPI(
        title=SERVICE_NAME,
        description="Hotel deal detection and personalization pipeline.",
        version=SERVICE_VERSION,
        lifespan=lifespan
    )

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "status": "running"
        }

    app.include_router(deal_watch_router)
    return app


def main():
    import uvicorn
    uvicorn.run(
        "deal_watch.main:create_app",
        factory=True,
        host=settings.API_HOST,
        port=settings.API_PORT
    )


if __name__ == "__main__":
    main()
