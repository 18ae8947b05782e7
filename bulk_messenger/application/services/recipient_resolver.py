"""Recipient resolution service.

Turns contact references and ad-hoc addressees into the ordered list of
recipients a message will be persisted with.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence

from bulk_messenger.domain.entities.message import Channel, Recipient
from bulk_messenger.domain.exceptions import InvalidRequest, MissingRecipients, NoValidRecipients
from bulk_messenger.domain.interfaces.contact_repository import IContactRepository


logger = logging.getLogger(__name__)

DEFAULT_DIRECT_NAME = "Direct Recipient"


class RecipientResolver:
    """
    Builds a channel-valid recipient list from two sources.

    Contacts come first (resolved for the requesting owner only), then
    direct recipients in caller order. Candidates without the address the
    channel needs are dropped silently; only counts are logged. The two
    sources are not de-duplicated against each other.
    """

    def __init__(self, contact_repository: IContactRepository):
        """
        Initialize resolver with dependencies (Dependency Injection).

        Args:
            contact_repository: Contact lookup scoped by owner
        """
        self.contact_repository = contact_repository

    def resolve(
        self,
        owner_id: str,
        channel: Channel,
        contact_ids: Optional[Sequence[str]] = None,
        direct_recipients: Optional[Sequence[Dict[str, Any]]] = None
    ) -> List[Recipient]:
        """
        Resolve and filter recipients for a message.

        Args:
            owner_id: Requesting user
            channel: Message channel used for the eligibility filter
            contact_ids: Contact references owned by the user
            direct_recipients: Dicts with name, phoneNumber and/or email

        Returns:
            Eligible recipients, all pending

        Raises:
            MissingRecipients: If neither source was supplied
            NoValidRecipients: If nothing survives the channel filter
        """
        if not contact_ids and not direct_recipients:
            raise MissingRecipients("Missing required fields")

        candidates: List[Recipient] = []

        if contact_ids:
            contacts = self.contact_repository.find_by_ids_for_owner(owner_id, contact_ids)
            logger.info(f"Found contacts: {len(contacts)} of {len(contact_ids)} requested")
            candidates.extend(
                Recipient(name=c.name, phone_number=c.phone_number, email=c.email)
                for c in contacts
            )

        if direct_recipients:
            candidates.extend(self._from_direct(direct_recipients))

        logger.info(f"Total recipients: {len(candidates)}")

        valid = [c for c in candidates if c.is_eligible_for(channel)]
        logger.info(f"Valid recipients for {channel.value}: {len(valid)}")

        if not valid:
            raise NoValidRecipients()
        return valid

    @staticmethod
    def _from_direct(direct_recipients: Sequence[Dict[str, Any]]) -> List[Recipient]:
        recipients = []
        for entry in direct_recipients:
            if not isinstance(entry, dict):
                raise InvalidRequest("Direct recipients must be objects")
            email = RecipientResolver._address(entry, "email")
            recipients.append(Recipient(
                name=entry.get("name") or DEFAULT_DIRECT_NAME,
                phone_number=RecipientResolver._address(entry, "phoneNumber"),
                email=email.lower() if email else None,
            ))
        return recipients

    @staticmethod
    def _address(entry: Dict[str, Any], key: str) -> Optional[str]:
        """Trimmed address string, None when absent or blank."""
        value = entry.get(key)
        if value is None:
            return None
        if not isinstance(value, str):
            raise InvalidRequest(f"{key} must be a string")
        return value.strip() or None
