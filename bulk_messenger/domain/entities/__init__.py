"""Domain entities - core business objects."""
from bulk_messenger.domain.entities.message import Channel, Message, MessageStatus, Recipient
from bulk_messenger.domain.entities.contact import Contact

__all__ = [
    "Channel",
    "Message",
    "MessageStatus",
    "Recipient",
    "Contact",
]
