"""Interface for contact lookup (Repository Pattern)."""
from abc import ABC, abstractmethod
from typing import List, Sequence

from bulk_messenger.domain.entities.contact import Contact


class IContactRepository(ABC):
    """
    Interface for the contact store consumed by recipient resolution.

    Contact CRUD lives elsewhere; the dispatch core only reads.
    """

    @abstractmethod
    def find_by_ids_for_owner(self, owner_id: str, contact_ids: Sequence[str]) -> List[Contact]:
        """
        Resolve contact ids owned by a user.

        Unknown ids and ids belonging to other owners are omitted, not
        reported.

        Args:
            owner_id: Requesting user
            contact_ids: Contact identifiers

        Returns:
            Contacts in the order their ids were first requested
        """
        pass

    @abstractmethod
    def save(self, contact: Contact) -> Contact:
        """
        Store a contact document.

        Args:
            contact: Contact to store

        Returns:
            The stored contact
        """
        pass
