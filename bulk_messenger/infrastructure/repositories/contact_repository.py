"""Repositories for contact lookup (Repository Pattern)."""
import json
import logging
import threading
from typing import Optional, List, Dict, Any, Sequence

import redis

from bulk_messenger.domain.entities.contact import Contact
from bulk_messenger.domain.exceptions import StorageError
from bulk_messenger.domain.interfaces.contact_repository import IContactRepository


def _unique(ids: Sequence[str]) -> List[str]:
    """Drop repeated and empty ids, keeping first-seen order."""
    seen = set()
    result = []
    for contact_id in ids:
        if contact_id and contact_id not in seen:
            seen.add(contact_id)
            result.append(contact_id)
    return result


class RedisContactRepository(IContactRepository):
    """Contact documents stored as JSON under `contact:{id}`."""

    def __init__(self, redis_client: Optional[redis.Redis] = None):
        """
        Initialize the contact repository.

        Args:
            redis_client: Redis client instance (Dependency Injection)
        """
        self.redis = redis_client
        self._logger = logging.getLogger(__name__)
        self._key_prefix = "contact:"

    def _get_key(self, contact_id: str) -> str:
        return f"{self._key_prefix}{contact_id}"

    def _client(self) -> redis.Redis:
        if not self.redis:
            self._logger.error("Redis client not initialized")
            raise StorageError("Contact store unavailable")
        return self.redis

    def find_by_ids_for_owner(self, owner_id: str, contact_ids: Sequence[str]) -> List[Contact]:
        ids = _unique([str(i) for i in contact_ids])
        if not ids:
            return []

        try:
            documents = self._client().mget([self._get_key(i) for i in ids])
        except redis.RedisError as e:
            self._logger.error(f"Error loading contacts for {owner_id}: {e}")
            raise StorageError("Failed to read contacts") from e

        contacts = []
        for document in documents:
            if not document:
                continue
            try:
                contact = Contact.from_dict(json.loads(document))
            except (json.JSONDecodeError, KeyError, ValueError) as e:
                self._logger.warning(f"Skipping corrupt contact document: {e}")
                continue
            if contact.owner_id == owner_id:
                contacts.append(contact)
        return contacts

    def save(self, contact: Contact) -> Contact:
        try:
            self._client().set(self._get_key(contact.id), json.dumps(contact.to_dict()))
        except redis.RedisError as e:
            self._logger.error(f"Error saving contact {contact.id}: {e}")
            raise StorageError("Failed to store contact") from e
        return contact


class InMemoryContactRepository(IContactRepository):
    """Process-local contact store for development and tests."""

    def __init__(self):
        self._documents: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def find_by_ids_for_owner(self, owner_id: str, contact_ids: Sequence[str]) -> List[Contact]:
        with self._lock:
            documents = [self._documents.get(i) for i in _unique([str(i) for i in contact_ids])]
        return [
            Contact.from_dict(doc) for doc in documents
            if doc and doc["userId"] == owner_id
        ]

    def save(self, contact: Contact) -> Contact:
        with self._lock:
            self._documents[contact.id] = contact.to_dict()
        return contact
