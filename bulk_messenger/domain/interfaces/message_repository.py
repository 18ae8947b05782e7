"""Interface for message storage (Repository Pattern).

Messages are stored as whole documents: the dispatch core only needs
create, find and full-document save.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional, List

from bulk_messenger.domain.entities.message import Channel, Message, MessageStatus


class IMessageRepository(ABC):
    """
    Interface for message storage following Repository Pattern.

    Allows switching storage backends (Redis, in-memory, MongoDB, etc.)
    without changing business logic.
    """

    @abstractmethod
    def create(self, message: Message) -> Message:
        """
        Persist a new message document.

        Args:
            message: Draft message

        Returns:
            The stored message

        Raises:
            StorageError: If the document could not be written
        """
        pass

    @abstractmethod
    def find_by_id(self, message_id: str) -> Optional[Message]:
        """
        Retrieve a message by id.

        Args:
            message_id: Message identifier

        Returns:
            The message, or None if it does not exist
        """
        pass

    @abstractmethod
    def save(self, message: Message) -> Message:
        """
        Overwrite the stored document with the given message state.

        Args:
            message: Mutated message

        Returns:
            The stored message
        """
        pass

    @abstractmethod
    def find_by_owner(
        self,
        owner_id: str,
        channel: Optional[Channel] = None,
        status: Optional[MessageStatus] = None,
        offset: int = 0,
        limit: int = 20
    ) -> List[Message]:
        """
        List an owner's messages, newest first.

        Args:
            owner_id: Owner identifier
            channel: Optional channel filter
            status: Optional status filter
            offset: Number of matching messages to skip
            limit: Maximum number of messages to return

        Returns:
            Matching messages
        """
        pass

    @abstractmethod
    def count_by_owner(
        self,
        owner_id: str,
        channel: Optional[Channel] = None,
        status: Optional[MessageStatus] = None
    ) -> int:
        """Count an owner's messages matching the filters."""
        pass

    @abstractmethod
    def list_by_owner(self, owner_id: str, since: Optional[datetime] = None) -> List[Message]:
        """
        List all of an owner's messages, optionally created at or after `since`.

        Args:
            owner_id: Owner identifier
            since: Optional lower bound on creation time

        Returns:
            Messages, newest first
        """
        pass
