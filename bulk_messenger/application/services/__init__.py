"""Application services module.

Provider-agnostic business logic used by the dispatch use case and the API.
"""
from bulk_messenger.application.services.recipient_resolver import RecipientResolver
from bulk_messenger.application.services.message_query_service import (
    MessagePage,
    MessageQueryService,
)

__all__ = [
    "RecipientResolver",
    "MessagePage",
    "MessageQueryService",
]
