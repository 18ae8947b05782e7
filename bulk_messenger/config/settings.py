"""Application configuration with environment-based settings."""
import os
from typing import Optional
from dotenv import load_dotenv


class Config:
    """Base configuration class, values are read once at import time."""

    # Load environment variables
    load_dotenv()

    # Delivery provider (bulk SMS / email gateway)
    DELIVERY_CLIENT_ID: Optional[str] = os.getenv("DELIVERY_CLIENT_ID")
    DELIVERY_SECRET_KEY: Optional[str] = os.getenv("DELIVERY_SECRET_KEY")
    DELIVERY_BASE_URL: Optional[str] = os.getenv("DELIVERY_BASE_URL")
    DELIVERY_TIMEOUT: float = float(os.getenv("DELIVERY_TIMEOUT", "30"))

    # Dispatch pricing and sender label
    SMS_SENDER_ID: str = os.getenv("SMS_SENDER_ID", "BulkMsgApp")
    SMS_UNIT_RATE: float = float(os.getenv("SMS_UNIT_RATE", "0.01"))
    EMAIL_UNIT_RATE: float = float(os.getenv("EMAIL_UNIT_RATE", "0.001"))

    # Authentication
    JWT_SECRET: Optional[str] = os.getenv("JWT_SECRET")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_EXPIRES_DAYS: int = int(os.getenv("JWT_EXPIRES_DAYS", "7"))

    # Storage
    STORAGE_TYPE: str = os.getenv("STORAGE_TYPE", "redis")
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")

    # Rate Limiting
    RATELIMIT_STORAGE_URL: str = os.getenv("RATELIMIT_STORAGE_URL", "redis://localhost:6379/2")
    RATELIMIT_ENABLED: bool = os.getenv("RATELIMIT_ENABLED", "true").lower() == "true"
    SEND_RATE_LIMIT: str = os.getenv("SEND_RATE_LIMIT", "30 per minute")

    # Monitoring
    SENTRY_DSN: Optional[str] = os.getenv("SENTRY_DSN")
    ENABLE_METRICS: bool = os.getenv("ENABLE_METRICS", "true").lower() == "true"

    # Application
    ENV_NAME: str = os.getenv("FLASK_ENV", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    TESTING: bool = False
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-secret-key-change-in-production")

    @classmethod
    def validate(cls) -> None:
        """Validate required configuration values."""
        required_vars = [
            ("DELIVERY_CLIENT_ID", cls.DELIVERY_CLIENT_ID),
            ("DELIVERY_SECRET_KEY", cls.DELIVERY_SECRET_KEY),
            ("DELIVERY_BASE_URL", cls.DELIVERY_BASE_URL),
            ("JWT_SECRET", cls.JWT_SECRET),
        ]

        missing = [name for name, value in required_vars if not value]
        if missing:
            raise ValueError(f"Missing required environment variables: {', '.join(missing)}")


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    DELIVERY_CLIENT_ID = "test-client"
    DELIVERY_SECRET_KEY = "test-secret"
    DELIVERY_BASE_URL = "https://gateway.test/api/v1"
    JWT_SECRET = "test-jwt-secret-for-the-bulk-messenger-suite"
    STORAGE_TYPE = "memory"
    REDIS_URL = "redis://localhost:6379/15"  # Use different DB for tests
    RATELIMIT_ENABLED = False
    ENABLE_METRICS = False
    SENTRY_DSN = None


def get_config() -> type[Config]:
    """Factory method to get configuration based on environment."""
    env = os.getenv("FLASK_ENV", "development").lower()

    config_map = {
        "development": DevelopmentConfig,
        "production": ProductionConfig,
        "testing": TestingConfig,
    }

    return config_map.get(env, DevelopmentConfig)
