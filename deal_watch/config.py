"""
Deal Watch Configuration
Loads settings from environment variables
"""

import os
from typing import List
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Settings:
    """Application settings loaded from environment"""

    # Backend collaborator (watchlists, preferences, activity log)
    BACKEND_API_URL: str = os.getenv("BACKEND_API_URL", "")
    AGENT_SECRET: str = os.getenv("AGENT_SECRET", "")

    # Scrape service and email service collaborators
    SCRAPER_API_URL: str = os.getenv("SCRAPER_API_URL", "")
    EMAIL_SERVICE_URL: str = os.getenv("EMAIL_SERVICE_URL", "")
    HTTP_TIMEOUT_SECONDS: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "15"))

    # Kafka / Redpanda Configuration
    KAFKA_BOOTSTRAP_SERVERS: str = os.getenv("KAFKA_BOOTSTRAP_SERVERS", "localhost:9092")
    KAFKA_CLIENT_ID: str = os.getenv("KAFKA_CLIENT_ID", "scraper-analyzer-agent")

    # Kafka Topics - aligned with the personalization/email consumers
    KAFKA_HOTEL_PRICES_TOPIC: str = os.getenv("KAFKA_HOTEL_PRICES_TOPIC", "hotel-prices")
    KAFKA_DEAL_ANALYSIS_TOPIC: str = os.getenv("KAFKA_DEAL_ANALYSIS_TOPIC", "deal-analysis")
    KAFKA_DEAL_DIGEST_TOPIC: str = os.getenv("KAFKA_DEAL_DIGEST_TOPIC", "deal-digest")
    PUBLISH_TIMEOUT_SECONDS: float = float(os.getenv("PUBLISH_TIMEOUT_SECONDS", "10"))

    # Price history storage: "memory" or "redis"
    PRICE_HISTORY_BACKEND: str = os.getenv("PRICE_HISTORY_BACKEND", "redis")
    REDIS_HOST: str = os.getenv("REDIS_HOST", "localhost")
    REDIS_PORT: int = int(os.getenv("REDIS_PORT", "6379"))
    REDIS_DB: int = int(os.getenv("REDIS_DB", "0"))
    REDIS_PASSWORD: str = os.getenv("REDIS_PASSWORD", "")

    # Pipeline timing
    HISTORY_WINDOW_DAYS: int = int(os.getenv("HISTORY_WINDOW_DAYS", "30"))
    CYCLE_INTERVAL_HOURS: float = float(os.getenv("CYCLE_INTERVAL_HOURS", "2"))
    DESTINATION_DELAY_SECONDS: float = float(os.getenv("DESTINATION_DELAY_SECONDS", "5"))

    # API Configuration
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "8010"))
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    REQUIRED_KEYS = ("BACKEND_API_URL", "AGENT_SECRET", "SCRAPER_API_URL", "EMAIL_SERVICE_URL")

    @property
    def kafka_servers_list(self) -> List[str]:
        """Get Kafka bootstrap servers as a list"""
        return [server.strip() for server in self.KAFKA_BOOTSTRAP_SERVERS.split(",") if server.strip()]

    @property
    def redis_url(self) -> str:
        """Get Redis connection URL"""
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    def validate(self) -> List[str]:
        """
        Check that every collaborator endpoint is configured

        Returns:
            List of missing environment variable names (empty when valid)
        """
        missing = [key for key in self.REQUIRED_KEYS if not getattr(self, key)]
        if self.PRICE_HISTORY_BACKEND not in ("memory", "redis"):
            missing.append("PRICE_HISTORY_BACKEND")
        return missing


# Global settings instance
settings = Settings()
