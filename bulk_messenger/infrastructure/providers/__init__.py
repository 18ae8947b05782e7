"""Delivery providers (Infrastructure Layer).

Implementations of IDeliveryGateway for concrete delivery vendors.
"""
from bulk_messenger.infrastructure.providers.http_delivery_gateway import HttpDeliveryGateway

__all__ = [
    "HttpDeliveryGateway",
]
