"""Factories for creating provider and repository instances (Factory Pattern)."""

from bulk_messenger.infrastructure.factories.provider_factory import ProviderFactory

__all__ = [
    "ProviderFactory",
]
