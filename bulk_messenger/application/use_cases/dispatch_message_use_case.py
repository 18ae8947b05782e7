"""Use case for dispatching a bulk message (Use Case Pattern)."""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Sequence, Union

from bulk_messenger.application.services.recipient_resolver import RecipientResolver
from bulk_messenger.domain.entities.message import Channel, Message, MessageStatus, utcnow
from bulk_messenger.domain.exceptions import GatewayError, InvalidRequest
from bulk_messenger.domain.interfaces.delivery_gateway import EmailAddressee, IDeliveryGateway
from bulk_messenger.domain.interfaces.message_repository import IMessageRepository
from bulk_messenger.middleware.monitoring import track_dispatch
from bulk_messenger.utils.text_processor import HtmlTextProcessor


logger = logging.getLogger(__name__)

FALLBACK_ERROR = "Service error"
DEFAULT_SUBJECT = "No Subject"
DEFAULT_EMAIL_NAME = "Recipient"


@dataclass
class DispatchRequest:
    """Dispatch request as received from the API layer."""
    owner_id: str
    channel: Optional[str]
    content: Optional[str]
    subject: Optional[str] = None
    recipient_ids: Sequence[str] = field(default_factory=list)
    direct_recipients: Sequence[Dict[str, Any]] = field(default_factory=list)
    schedule: Union[str, int, float, datetime, None] = None

    @classmethod
    def from_payload(cls, owner_id: str, payload: Dict[str, Any]) -> "DispatchRequest":
        """Build a request from the JSON body of `POST /api/messages/send`."""
        return cls(
            owner_id=owner_id,
            channel=payload.get("type"),
            content=payload.get("content"),
            subject=payload.get("subject"),
            recipient_ids=payload.get("recipientIds") or [],
            direct_recipients=payload.get("directRecipients") or [],
            schedule=payload.get("schedule"),
        )


@dataclass(frozen=True)
class BatchOutcome:
    """Single all-or-nothing result of one provider call, applied to every recipient."""
    accepted: bool
    correlation_id: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, correlation_id: Optional[str]) -> "BatchOutcome":
        return cls(accepted=True, correlation_id=correlation_id)

    @classmethod
    def failure(cls, reason: Optional[str]) -> "BatchOutcome":
        return cls(accepted=False, error=reason or FALLBACK_ERROR)


def parse_schedule(value: Union[str, int, float, datetime, None]) -> Optional[datetime]:
    """
    Parse a schedule value into an aware UTC datetime.

    Accepts ISO-8601 strings (naive values are taken as UTC), datetimes and
    epoch milliseconds. Empty values mean "no schedule".

    Raises:
        InvalidRequest: If the value cannot be interpreted as a timestamp
    """
    if value is None or value == "":
        return None

    if isinstance(value, bool):
        raise InvalidRequest("Invalid schedule")

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise InvalidRequest("Invalid schedule") from e
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = f"{text[:-1]}+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as e:
            raise InvalidRequest("Invalid schedule") from e
    else:
        raise InvalidRequest("Invalid schedule")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class DispatchMessageUseCase:
    """
    Owns the message lifecycle from intake to final persisted state.

    Validation problems raise before anything is stored. Once the pending
    message exists, every delivery problem is recorded on the message
    (status FAILED plus per-recipient errors) and the message is returned
    normally.
    """

    def __init__(
        self,
        message_repository: IMessageRepository,
        recipient_resolver: RecipientResolver,
        delivery_gateway: IDeliveryGateway,
        sms_sender_id: Optional[str] = None,
        sms_unit_rate: float = 0.01,
        email_unit_rate: float = 0.001,
        clock: Callable[[], datetime] = utcnow
    ):
        """
        Initialize use case with dependencies (Dependency Injection).

        Args:
            message_repository: Message document store
            recipient_resolver: Builds the recipient list
            delivery_gateway: Bulk SMS / email provider
            sms_sender_id: Sender label for SMS batches
            sms_unit_rate: Cost per accepted SMS recipient
            email_unit_rate: Cost per accepted email recipient
            clock: Returns the current aware UTC time
        """
        self.message_repository = message_repository
        self.recipient_resolver = recipient_resolver
        self.delivery_gateway = delivery_gateway
        self.sms_sender_id = sms_sender_id
        self.unit_rates = {
            Channel.SMS: sms_unit_rate,
            Channel.EMAIL: email_unit_rate,
        }
        self._clock = clock

    def execute(self, request: DispatchRequest) -> Message:
        """
        Validate, persist and (unless scheduled for later) dispatch a message.

        Args:
            request: Dispatch request

        Returns:
            The persisted message in its latest state

        Raises:
            InvalidRequest: On missing or malformed fields
            NoValidRecipients: If no recipient fits the channel
        """
        channel, schedule = self._validate(request)

        logger.info(
            f"Sending message: owner={request.owner_id} type={channel.value} "
            f"contact_refs={len(request.recipient_ids)} direct={len(request.direct_recipients)}"
        )

        recipients = self.recipient_resolver.resolve(
            owner_id=request.owner_id,
            channel=channel,
            contact_ids=request.recipient_ids,
            direct_recipients=request.direct_recipients
        )

        message = self.message_repository.create(Message(
            owner_id=request.owner_id,
            channel=channel,
            content=request.content,
            subject=request.subject,
            recipients=recipients,
            total_recipients=len(recipients),
            scheduled_for=schedule,
        ))

        if schedule is not None and schedule > self._clock():
            logger.info(f"Message {message.id} scheduled for {schedule.isoformat()}, not dispatching")
            return message

        return self.dispatch(message)

    def dispatch(self, message: Message) -> Message:
        """
        Send a pending message and persist the reconciled result.

        Never raises on delivery failures; the outcome is recorded on the
        message instead. Messages already sent or failed are returned
        unchanged without calling the gateway.

        Args:
            message: Persisted pending message

        Returns:
            The saved message
        """
        if message.status.is_terminal:
            logger.warning(
                f"Message {message.id} already {message.status.value}, skipping dispatch"
            )
            return message

        logger.info(f"Processing message: {message.id} {message.channel.value}")

        try:
            outcome = self._send(message)
        except Exception as e:
            logger.error(f"Process message error for {message.id}: {e}", exc_info=True)
            outcome = BatchOutcome.failure(str(e))

        self._reconcile(message, outcome)
        track_dispatch(
            message.channel.value,
            message.status.value,
            message.successful_sends,
            message.failed_sends
        )

        saved = self.message_repository.save(message)
        logger.info(
            f"Message {message.id} {message.status.value}: "
            f"{message.successful_sends} sent, {message.failed_sends} failed"
        )
        return saved

    def _validate(self, request: DispatchRequest):
        if not request.channel or not request.content:
            raise InvalidRequest("Missing required fields")
        if not request.recipient_ids and not request.direct_recipients:
            raise InvalidRequest("Missing required fields")

        try:
            channel = Channel(str(request.channel).lower())
        except ValueError as e:
            raise InvalidRequest(f"Unsupported message type: {request.channel}") from e

        if not isinstance(request.content, str):
            raise InvalidRequest("Content must be a string")
        if not isinstance(request.recipient_ids, (list, tuple)):
            raise InvalidRequest("recipientIds must be a list")
        if not isinstance(request.direct_recipients, (list, tuple)):
            raise InvalidRequest("directRecipients must be a list")

        return channel, parse_schedule(request.schedule)

    def _send(self, message: Message) -> BatchOutcome:
        """Make the single provider call for the message channel."""
        eligible = message.eligible_recipients

        try:
            if message.channel is Channel.SMS:
                numbers = [r.phone_number for r in eligible]
                logger.info(f"Sending bulk SMS to: {len(numbers)} numbers")
                result = self.delivery_gateway.send_bulk_sms(
                    numbers, message.content, self.sms_sender_id
                )
                label = "SMS"
            else:
                addressees = [
                    EmailAddressee(address=r.email, display_name=r.name or DEFAULT_EMAIL_NAME)
                    for r in eligible
                ]
                logger.info(f"Sending bulk email to: {len(addressees)} addresses")
                result = self.delivery_gateway.send_bulk_email(
                    addressees,
                    message.subject or DEFAULT_SUBJECT,
                    message.content,
                    HtmlTextProcessor.strip_tags(message.content)
                )
                label = "Email"
        except GatewayError as e:
            logger.error(f"Bulk {message.channel.value} error for {message.id}: {e}")
            return BatchOutcome.failure(str(e))

        if not result.accepted:
            logger.error(f"{label} send for {message.id} returned unsuccessful status")
            return BatchOutcome.failure(f"{label} send returned unsuccessful status")

        return BatchOutcome.success(result.correlation_id)

    def _reconcile(self, message: Message, outcome: BatchOutcome) -> None:
        """Apply one batch outcome to every pending eligible recipient and the aggregates."""
        affected = [
            r for r in message.recipients
            if r.is_eligible_for(message.channel) and r.status is MessageStatus.PENDING
        ]

        for recipient in affected:
            if outcome.accepted:
                recipient.status = MessageStatus.SENT
                recipient.message_id = outcome.correlation_id
                message.successful_sends += 1
            else:
                recipient.status = MessageStatus.FAILED
                recipient.error = outcome.error or FALLBACK_ERROR
                message.failed_sends += 1

        if outcome.accepted:
            message.cost = len(affected) * self.unit_rates[message.channel]
            message.status = MessageStatus.SENT
            message.sent_at = self._clock()
        else:
            message.status = MessageStatus.FAILED
