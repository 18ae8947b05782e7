"""Pytest configuration and fixtures."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from bulk_messenger import create_app
from bulk_messenger.application.services.recipient_resolver import RecipientResolver
from bulk_messenger.application.use_cases.dispatch_message_use_case import DispatchMessageUseCase
from bulk_messenger.config.settings import TestingConfig
from bulk_messenger.domain.entities.contact import Contact
from bulk_messenger.domain.interfaces.delivery_gateway import DeliveryResult, IDeliveryGateway
from bulk_messenger.infrastructure.repositories.contact_repository import InMemoryContactRepository
from bulk_messenger.infrastructure.repositories.message_repository import InMemoryMessageRepository
from bulk_messenger.infrastructure.service_container import ServiceContainer
from bulk_messenger.middleware.auth import generate_token


OWNER_ID = "user-1"
OTHER_OWNER_ID = "user-2"
FIXED_NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    """Fixed clock for deterministic schedule and sentAt checks."""
    return lambda: FIXED_NOW


@pytest.fixture
def message_repository():
    """Empty in-memory message store."""
    return InMemoryMessageRepository()


@pytest.fixture
def contact_repository():
    """In-memory contact store seeded with contacts for two owners."""
    repository = InMemoryContactRepository()
    for contact in (
        Contact(id="c-ana", owner_id=OWNER_ID, name="Ana", phone_number="+15550000001",
                email="ana@example.com"),
        Contact(id="c-ben", owner_id=OWNER_ID, name="Ben", phone_number="+15550000002"),
        Contact(id="c-cara", owner_id=OWNER_ID, name="Cara", phone_number="+15550000003"),
        Contact(id="c-dev", owner_id=OWNER_ID, name="Dev", email="dev@example.com"),
        Contact(id="c-foreign", owner_id=OTHER_OWNER_ID, name="Eve", phone_number="+15550000099"),
    ):
        repository.save(contact)
    return repository


@pytest.fixture
def delivery_gateway():
    """Gateway double that accepts every batch by default."""
    gateway = MagicMock(spec=IDeliveryGateway)
    gateway.send_bulk_sms.return_value = DeliveryResult(accepted=True, correlation_id="m1")
    gateway.send_bulk_email.return_value = DeliveryResult(accepted=True, correlation_id="b1")
    return gateway


@pytest.fixture
def use_case(message_repository, contact_repository, delivery_gateway, clock):
    """Dispatch use case wired to in-memory stores and the gateway double."""
    return DispatchMessageUseCase(
        message_repository=message_repository,
        recipient_resolver=RecipientResolver(contact_repository),
        delivery_gateway=delivery_gateway,
        sms_sender_id="BulkMsgApp",
        clock=clock
    )


@pytest.fixture
def app(message_repository, contact_repository, delivery_gateway):
    """Flask app using the testing config and the test doubles."""
    ServiceContainer.reset()
    application = create_app(TestingConfig)
    ServiceContainer.override(
        message_repository=message_repository,
        contact_repository=contact_repository,
        delivery_gateway=delivery_gateway
    )
    yield application
    ServiceContainer.reset()


@pytest.fixture
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture
def auth_headers(app):
    """Bearer token headers for OWNER_ID."""
    with app.app_context():
        token = generate_token(OWNER_ID)
    return {"Authorization": f"Bearer {token}"}
