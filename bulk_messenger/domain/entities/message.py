"""Message domain entity and its embedded recipients."""
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, List, Dict, Any


class Channel(str, Enum):
    """Delivery medium of a message, fixed at creation."""

    SMS = "sms"
    EMAIL = "email"

    @property
    def address_field(self) -> str:
        """Name of the recipient attribute this channel delivers to."""
        return "phone_number" if self is Channel.SMS else "email"


class MessageStatus(str, Enum):
    """Status shared by messages and individual recipients."""

    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"
    DELIVERED = "delivered"  # reserved for delivery receipts

    @property
    def is_terminal(self) -> bool:
        return self in (MessageStatus.SENT, MessageStatus.FAILED)


def utcnow() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


def _format_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value)


@dataclass
class Recipient:
    """One addressee embedded in a message, with its own delivery status."""

    name: str
    phone_number: Optional[str] = None
    email: Optional[str] = None
    status: MessageStatus = MessageStatus.PENDING
    message_id: Optional[str] = None
    error: Optional[str] = None

    def address_for(self, channel: Channel) -> Optional[str]:
        """Return the channel address, or None when it is missing or blank."""
        value = getattr(self, channel.address_field)
        if value is None or not str(value).strip():
            return None
        return value

    def is_eligible_for(self, channel: Channel) -> bool:
        return self.address_for(channel) is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "phoneNumber": self.phone_number,
            "email": self.email,
            "status": self.status.value,
            "messageId": self.message_id,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Recipient":
        return cls(
            name=data.get("name") or "",
            phone_number=data.get("phoneNumber"),
            email=data.get("email"),
            status=MessageStatus(data.get("status", MessageStatus.PENDING.value)),
            message_id=data.get("messageId"),
            error=data.get("error"),
        )


@dataclass
class Message:
    """
    One dispatch request and its aggregate delivery state.

    The document is owned by the dispatch use case: it is created pending
    and mutated only while reconciling the gateway outcome.
    """

    owner_id: str
    channel: Channel
    content: str
    recipients: List[Recipient] = field(default_factory=list)
    subject: Optional[str] = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    total_recipients: int = 0
    successful_sends: int = 0
    failed_sends: int = 0
    status: MessageStatus = MessageStatus.PENDING
    scheduled_for: Optional[datetime] = None
    sent_at: Optional[datetime] = None
    cost: float = 0.0
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self):
        """Validate message entity."""
        if not self.owner_id:
            raise ValueError("owner_id is required")
        if not self.content:
            raise ValueError("content is required")
        self.channel = Channel(self.channel)

    @property
    def eligible_recipients(self) -> List[Recipient]:
        """Recipients carrying the address required by the message channel."""
        return [r for r in self.recipients if r.is_eligible_for(self.channel)]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the JSON document stored and returned by the API."""
        return {
            "id": self.id,
            "userId": self.owner_id,
            "type": self.channel.value,
            "content": self.content,
            "subject": self.subject,
            "recipients": [r.to_dict() for r in self.recipients],
            "totalRecipients": self.total_recipients,
            "successfulSends": self.successful_sends,
            "failedSends": self.failed_sends,
            "status": self.status.value,
            "scheduledFor": _format_datetime(self.scheduled_for),
            "sentAt": _format_datetime(self.sent_at),
            "cost": self.cost,
            "createdAt": _format_datetime(self.created_at),
            "updatedAt": _format_datetime(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Message":
        return cls(
            id=data["id"],
            owner_id=data["userId"],
            channel=Channel(data["type"]),
            content=data["content"],
            subject=data.get("subject"),
            recipients=[Recipient.from_dict(r) for r in data.get("recipients", [])],
            total_recipients=data.get("totalRecipients", 0),
            successful_sends=data.get("successfulSends", 0),
            failed_sends=data.get("failedSends", 0),
            status=MessageStatus(data.get("status", MessageStatus.PENDING.value)),
            scheduled_for=_parse_datetime(data.get("scheduledFor")),
            sent_at=_parse_datetime(data.get("sentAt")),
            cost=data.get("cost", 0.0),
            created_at=_parse_datetime(data.get("createdAt")) or utcnow(),
            updated_at=_parse_datetime(data.get("updatedAt")) or utcnow(),
        )
