"""Repositories for message documents (Repository Pattern)."""
import json
import logging
import threading
from datetime import datetime
from typing import Optional, List, Dict, Any

import redis

from bulk_messenger.domain.entities.message import Channel, Message, MessageStatus, utcnow
from bulk_messenger.domain.exceptions import StorageError
from bulk_messenger.domain.interfaces.message_repository import IMessageRepository


def _matches(message: Message, channel: Optional[Channel], status: Optional[MessageStatus]) -> bool:
    if channel is not None and message.channel != channel:
        return False
    if status is not None and message.status != status:
        return False
    return True


class RedisMessageRepository(IMessageRepository):
    """
    Message store backed by Redis.

    Each message is one JSON document under `message:{id}`; a sorted set
    `messages:owner:{owner_id}` scored by creation time indexes an owner's
    messages. Document writes are single-key SETs, so concurrent dispatches
    of different messages never contend.
    """

    def __init__(self, redis_client: Optional[redis.Redis] = None):
        """
        Initialize the message repository.

        Args:
            redis_client: Redis client instance (Dependency Injection)
        """
        self.redis = redis_client
        self._logger = logging.getLogger(__name__)
        self._key_prefix = "message:"
        self._owner_prefix = "messages:owner:"

    def _get_key(self, message_id: str) -> str:
        return f"{self._key_prefix}{message_id}"

    def _get_owner_key(self, owner_id: str) -> str:
        return f"{self._owner_prefix}{owner_id}"

    def _client(self) -> redis.Redis:
        if not self.redis:
            self._logger.error("Redis client not initialized")
            raise StorageError("Message store unavailable")
        return self.redis

    def create(self, message: Message) -> Message:
        client = self._client()
        try:
            pipeline = client.pipeline(transaction=True)
            pipeline.set(self._get_key(message.id), json.dumps(message.to_dict()))
            pipeline.zadd(
                self._get_owner_key(message.owner_id),
                {message.id: message.created_at.timestamp()}
            )
            pipeline.execute()
        except redis.RedisError as e:
            self._logger.error(f"Error creating message {message.id}: {e}")
            raise StorageError("Failed to store message") from e

        self._logger.info(f"Message created: {message.id}")
        return message

    def find_by_id(self, message_id: str) -> Optional[Message]:
        client = self._client()
        try:
            data = client.get(self._get_key(message_id))
        except redis.RedisError as e:
            self._logger.error(f"Error retrieving message {message_id}: {e}")
            raise StorageError("Failed to read message") from e

        if not data:
            return None
        return self._decode(data)

    def save(self, message: Message) -> Message:
        client = self._client()
        message.updated_at = utcnow()
        try:
            client.set(self._get_key(message.id), json.dumps(message.to_dict()))
        except redis.RedisError as e:
            self._logger.error(f"Error saving message {message.id}: {e}")
            raise StorageError("Failed to store message") from e

        self._logger.debug(f"Message saved: {message.id} status={message.status.value}")
        return message

    def find_by_owner(
        self,
        owner_id: str,
        channel: Optional[Channel] = None,
        status: Optional[MessageStatus] = None,
        offset: int = 0,
        limit: int = 20
    ) -> List[Message]:
        """
        Page of an owner's messages, newest first.

        Unfiltered pages slice the owner index directly. Channel or status
        filters have no index of their own: every document the owner has is
        loaded in one MGET and filtered in process, so cost grows with the
        owner's total history rather than the page size.
        """
        if limit <= 0:
            return []

        if channel is None and status is None:
            ids = self._owner_ids(owner_id, offset, offset + limit - 1)
            return self._load_many(ids)

        matching = [m for m in self._load_many(self._owner_ids(owner_id)) if _matches(m, channel, status)]
        return matching[offset:offset + limit]

    def count_by_owner(
        self,
        owner_id: str,
        channel: Optional[Channel] = None,
        status: Optional[MessageStatus] = None
    ) -> int:
        """Matching message count; ZCARD when unfiltered, a full owner scan otherwise."""
        if channel is None and status is None:
            try:
                return int(self._client().zcard(self._get_owner_key(owner_id)))
            except redis.RedisError as e:
                self._logger.error(f"Error counting messages for {owner_id}: {e}")
                raise StorageError("Failed to read messages") from e

        messages = self._load_many(self._owner_ids(owner_id))
        return sum(1 for m in messages if _matches(m, channel, status))

    def list_by_owner(self, owner_id: str, since: Optional[datetime] = None) -> List[Message]:
        if since is None:
            return self._load_many(self._owner_ids(owner_id))

        try:
            ids = self._client().zrevrangebyscore(
                self._get_owner_key(owner_id), "+inf", since.timestamp()
            )
        except redis.RedisError as e:
            self._logger.error(f"Error listing messages for {owner_id}: {e}")
            raise StorageError("Failed to read messages") from e
        return self._load_many(ids)

    def _owner_ids(self, owner_id: str, start: int = 0, end: int = -1) -> List[str]:
        """Message ids for an owner, newest first."""
        try:
            return list(self._client().zrevrange(self._get_owner_key(owner_id), start, end))
        except redis.RedisError as e:
            self._logger.error(f"Error listing messages for {owner_id}: {e}")
            raise StorageError("Failed to read messages") from e

    def _load_many(self, ids: List[str]) -> List[Message]:
        if not ids:
            return []
        try:
            documents = self._client().mget([self._get_key(i) for i in ids])
        except redis.RedisError as e:
            self._logger.error(f"Error loading {len(ids)} messages: {e}")
            raise StorageError("Failed to read messages") from e
        # Index entries can outlive their documents
        return [self._decode(doc) for doc in documents if doc]

    def _decode(self, data: str) -> Message:
        try:
            return Message.from_dict(json.loads(data))
        except (json.JSONDecodeError, KeyError, ValueError) as e:
            self._logger.error(f"Corrupt message document: {e}")
            raise StorageError("Corrupt message document") from e


class InMemoryMessageRepository(IMessageRepository):
    """
    Process-local message store for development and tests.

    Documents are kept as serialized dicts so callers never share mutable
    state with the store, matching the Redis backend.
    """

    def __init__(self):
        self._documents: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def create(self, message: Message) -> Message:
        with self._lock:
            self._documents[message.id] = message.to_dict()
        return message

    def find_by_id(self, message_id: str) -> Optional[Message]:
        with self._lock:
            document = self._documents.get(message_id)
        return Message.from_dict(document) if document else None

    def save(self, message: Message) -> Message:
        message.updated_at = utcnow()
        with self._lock:
            self._documents[message.id] = message.to_dict()
        return message

    def find_by_owner(
        self,
        owner_id: str,
        channel: Optional[Channel] = None,
        status: Optional[MessageStatus] = None,
        offset: int = 0,
        limit: int = 20
    ) -> List[Message]:
        if limit <= 0:
            return []
        matching = [m for m in self.list_by_owner(owner_id) if _matches(m, channel, status)]
        return matching[offset:offset + limit]

    def count_by_owner(
        self,
        owner_id: str,
        channel: Optional[Channel] = None,
        status: Optional[MessageStatus] = None
    ) -> int:
        return sum(1 for m in self.list_by_owner(owner_id) if _matches(m, channel, status))

    def list_by_owner(self, owner_id: str, since: Optional[datetime] = None) -> List[Message]:
        with self._lock:
            documents = list(self._documents.values())
        messages = [
            Message.from_dict(doc) for doc in documents if doc["userId"] == owner_id
        ]
        if since is not None:
            messages = [m for m in messages if m.created_at >= since]
        messages.sort(key=lambda m: m.created_at, reverse=True)
        return messages
