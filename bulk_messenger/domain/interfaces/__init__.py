"""Domain interfaces following Dependency Inversion Principle."""

from bulk_messenger.domain.interfaces.delivery_gateway import (
    DeliveryResult,
    EmailAddressee,
    IDeliveryGateway,
)
from bulk_messenger.domain.interfaces.message_repository import IMessageRepository
from bulk_messenger.domain.interfaces.contact_repository import IContactRepository

__all__ = [
    "DeliveryResult",
    "EmailAddressee",
    "IDeliveryGateway",
    "IMessageRepository",
    "IContactRepository",
]
