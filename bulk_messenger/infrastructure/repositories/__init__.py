"""Repository implementations (Infrastructure Layer).

Repository implementations for data persistence.
These implement domain interfaces defined in bulk_messenger.domain.interfaces.
"""
from bulk_messenger.infrastructure.repositories.message_repository import (
    InMemoryMessageRepository,
    RedisMessageRepository,
)
from bulk_messenger.infrastructure.repositories.contact_repository import (
    InMemoryContactRepository,
    RedisContactRepository,
)

__all__ = [
    "InMemoryMessageRepository",
    "RedisMessageRepository",
    "InMemoryContactRepository",
    "RedisContactRepository",
]
