"""Service container for dependency injection (IoC Container Pattern)."""
import logging
from typing import Optional

from bulk_messenger.application.services.message_query_service import MessageQueryService
from bulk_messenger.application.services.recipient_resolver import RecipientResolver
from bulk_messenger.application.use_cases.dispatch_message_use_case import DispatchMessageUseCase
from bulk_messenger.config.settings import Config
from bulk_messenger.domain.interfaces.contact_repository import IContactRepository
from bulk_messenger.domain.interfaces.delivery_gateway import IDeliveryGateway
from bulk_messenger.domain.interfaces.message_repository import IMessageRepository
from bulk_messenger.infrastructure.factories.provider_factory import ProviderFactory


class ServiceContainer:
    """
    Service container implementing Dependency Injection pattern.

    Singleton per process. Services are created lazily from the configured
    Config class; tests swap implementations with `override`.
    """

    _instance: Optional['ServiceContainer'] = None
    _config: type[Config] = Config
    _message_repository: Optional[IMessageRepository] = None
    _contact_repository: Optional[IContactRepository] = None
    _delivery_gateway: Optional[IDeliveryGateway] = None
    _dispatch_use_case: Optional[DispatchMessageUseCase] = None
    _query_service: Optional[MessageQueryService] = None

    def __new__(cls, config: Optional[type[Config]] = None):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, config: Optional[type[Config]] = None):
        """Initialize service container."""
        self._logger = logging.getLogger(__name__)
        if config is not None:
            type(self)._config = config

    @property
    def config(self) -> type[Config]:
        return type(self)._config

    def get_message_repository(self) -> IMessageRepository:
        """Get or create message repository instance."""
        cls = type(self)
        if cls._message_repository is None:
            storage_type = self.config.STORAGE_TYPE
            try:
                cls._message_repository = ProviderFactory.create_message_repository(
                    storage_type, self.config
                )
                self._logger.info(f"MessageRepository created with {storage_type}")
            except Exception as e:
                self._logger.error(f"Failed to create MessageRepository: {e}")
                raise
        return cls._message_repository

    def get_contact_repository(self) -> IContactRepository:
        """Get or create contact repository instance."""
        cls = type(self)
        if cls._contact_repository is None:
            storage_type = self.config.STORAGE_TYPE
            try:
                cls._contact_repository = ProviderFactory.create_contact_repository(
                    storage_type, self.config
                )
                self._logger.info(f"ContactRepository created with {storage_type}")
            except Exception as e:
                self._logger.error(f"Failed to create ContactRepository: {e}")
                raise
        return cls._contact_repository

    def get_delivery_gateway(self) -> IDeliveryGateway:
        """Get or create delivery gateway instance."""
        cls = type(self)
        if cls._delivery_gateway is None:
            try:
                cls._delivery_gateway = ProviderFactory.create_delivery_gateway("http", self.config)
                self._logger.info("DeliveryGateway created")
            except Exception as e:
                self._logger.error(f"Failed to create DeliveryGateway: {e}")
                raise
        return cls._delivery_gateway

    def get_dispatch_use_case(self) -> DispatchMessageUseCase:
        """Get or create dispatch message use case instance."""
        cls = type(self)
        if cls._dispatch_use_case is None:
            cls._dispatch_use_case = DispatchMessageUseCase(
                message_repository=self.get_message_repository(),
                recipient_resolver=RecipientResolver(self.get_contact_repository()),
                delivery_gateway=self.get_delivery_gateway(),
                sms_sender_id=self.config.SMS_SENDER_ID,
                sms_unit_rate=self.config.SMS_UNIT_RATE,
                email_unit_rate=self.config.EMAIL_UNIT_RATE
            )
            self._logger.info("DispatchMessageUseCase created")
        return cls._dispatch_use_case

    def get_query_service(self) -> MessageQueryService:
        """Get or create message query service instance."""
        cls = type(self)
        if cls._query_service is None:
            cls._query_service = MessageQueryService(self.get_message_repository())
        return cls._query_service

    @classmethod
    def override(
        cls,
        message_repository: Optional[IMessageRepository] = None,
        contact_repository: Optional[IContactRepository] = None,
        delivery_gateway: Optional[IDeliveryGateway] = None
    ) -> None:
        """Replace services with given instances and drop dependents built from the old ones."""
        if message_repository is not None:
            cls._message_repository = message_repository
        if contact_repository is not None:
            cls._contact_repository = contact_repository
        if delivery_gateway is not None:
            cls._delivery_gateway = delivery_gateway
        cls._dispatch_use_case = None
        cls._query_service = None

    @classmethod
    def reset(cls) -> None:
        """Reset all service instances (useful for testing)."""
        cls._instance = None
        cls._config = Config
        cls._message_repository = None
        cls._contact_repository = None
        cls._delivery_gateway = None
        cls._dispatch_use_case = None
        cls._query_service = None
