"""Factory for creating provider and repository instances (Factory Pattern)."""
import logging
from typing import Optional

from bulk_messenger.config.settings import Config
from bulk_messenger.domain.exceptions import StorageError
from bulk_messenger.domain.interfaces.contact_repository import IContactRepository
from bulk_messenger.domain.interfaces.delivery_gateway import IDeliveryGateway
from bulk_messenger.domain.interfaces.message_repository import IMessageRepository
from bulk_messenger.infrastructure.providers.http_delivery_gateway import HttpDeliveryGateway
from bulk_messenger.infrastructure.redis_client import RedisClientFactory
from bulk_messenger.infrastructure.repositories.contact_repository import (
    InMemoryContactRepository,
    RedisContactRepository,
)
from bulk_messenger.infrastructure.repositories.message_repository import (
    InMemoryMessageRepository,
    RedisMessageRepository,
)


logger = logging.getLogger(__name__)


class ProviderFactory:
    """
    Factory for creating provider instances following Factory Pattern.

    Centralizes creation logic and allows switching implementations by
    configuration.
    """

    @staticmethod
    def create_delivery_gateway(
        provider_type: str = "http",
        config: Optional[type[Config]] = None
    ) -> IDeliveryGateway:
        """
        Create a delivery gateway instance.

        Args:
            provider_type: Type of gateway ("http")
            config: Configuration class (defaults to Config)

        Returns:
            IDeliveryGateway instance

        Raises:
            ValueError: If the type is unsupported or credentials are missing
        """
        config = config or Config
        provider_type = provider_type.lower()

        if provider_type == "http":
            return HttpDeliveryGateway(
                base_url=config.DELIVERY_BASE_URL,
                client_id=config.DELIVERY_CLIENT_ID,
                secret_key=config.DELIVERY_SECRET_KEY,
                timeout=config.DELIVERY_TIMEOUT
            )
        raise ValueError(f"Unsupported delivery provider type: {provider_type}")

    @staticmethod
    def _redis_client(config: type[Config]):
        redis_client = RedisClientFactory.get_client(config.REDIS_URL)
        if redis_client is None:
            raise StorageError("Redis is not available for the message store")
        return redis_client

    @staticmethod
    def create_message_repository(
        storage_type: str = "redis",
        config: Optional[type[Config]] = None
    ) -> IMessageRepository:
        """
        Create a message repository instance.

        Args:
            storage_type: Type of storage ("redis", "memory")
            config: Configuration class (defaults to Config)

        Returns:
            IMessageRepository instance

        Raises:
            ValueError: If storage type is not supported
        """
        config = config or Config
        storage_type = storage_type.lower()

        if storage_type == "redis":
            return RedisMessageRepository(redis_client=ProviderFactory._redis_client(config))
        elif storage_type == "memory":
            return InMemoryMessageRepository()
        raise ValueError(f"Unsupported storage type: {storage_type}")

    @staticmethod
    def create_contact_repository(
        storage_type: str = "redis",
        config: Optional[type[Config]] = None
    ) -> IContactRepository:
        """
        Create a contact repository instance.

        Args:
            storage_type: Type of storage ("redis", "memory")
            config: Configuration class (defaults to Config)

        Returns:
            IContactRepository instance

        Raises:
            ValueError: If storage type is not supported
        """
        config = config or Config
        storage_type = storage_type.lower()

        if storage_type == "redis":
            return RedisContactRepository(redis_client=ProviderFactory._redis_client(config))
        elif storage_type == "memory":
            return InMemoryContactRepository()
        raise ValueError(f"Unsupported storage type: {storage_type}")
