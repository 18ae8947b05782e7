"""Interface for the bulk delivery provider (Strategy Pattern).

The dispatch use case only talks to this interface, so the HTTP provider
can be swapped for a stub or another vendor without touching reconciliation.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Sequence


@dataclass
class DeliveryResult:
    """Normalized provider answer for one bulk call."""
    accepted: bool
    correlation_id: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)


@dataclass
class EmailAddressee:
    """Email recipient as sent to the provider."""
    address: str
    display_name: str


class IDeliveryGateway(ABC):
    """
    Interface for the external bulk SMS / email capability.

    Implementations raise GatewayError on transport failures and return
    DeliveryResult(accepted=False) when the provider answers without a
    success flag or an identifier.
    """

    @abstractmethod
    def send_bulk_sms(
        self,
        numbers: Sequence[str],
        body: str,
        sender_label: Optional[str] = None
    ) -> DeliveryResult:
        """
        Send one SMS body to many phone numbers in a single call.

        Args:
            numbers: Non-empty sequence of phone numbers
            body: SMS text
            sender_label: Optional sender id shown to recipients

        Returns:
            DeliveryResult with the provider message id as correlation id
        """
        pass

    @abstractmethod
    def send_bulk_email(
        self,
        recipients: Sequence[EmailAddressee],
        subject: str,
        html_body: str,
        text_body: str
    ) -> DeliveryResult:
        """
        Send one email to many addressees in a single call.

        Args:
            recipients: Non-empty sequence of addressees
            subject: Email subject
            html_body: HTML body
            text_body: Plain-text alternative

        Returns:
            DeliveryResult with the provider batch (or message) id as correlation id
        """
        pass

    @abstractmethod
    def get_sms_status(self, message_id: str) -> Dict[str, Any]:
        """
        Look up provider-side delivery status of an SMS batch.

        Args:
            message_id: Correlation id returned by send_bulk_sms

        Returns:
            Raw provider status payload
        """
        pass

    @abstractmethod
    def test_connection(self) -> Dict[str, Any]:
        """
        Verify the configured credentials against the provider.

        Returns:
            Raw provider payload
        """
        pass
