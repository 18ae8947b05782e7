"""HTTP delivery gateway implementation (Strategy Pattern)."""
import logging
import time
from typing import Optional, Dict, Any, Sequence

import requests
from requests.adapters import HTTPAdapter
from requests.auth import HTTPBasicAuth

from bulk_messenger.config.settings import Config
from bulk_messenger.domain.exceptions import GatewayError
from bulk_messenger.domain.interfaces.delivery_gateway import (
    DeliveryResult,
    EmailAddressee,
    IDeliveryGateway,
)
from bulk_messenger.middleware.monitoring import track_gateway_call


class HttpDeliveryGateway(IDeliveryGateway):
    """
    Bulk SMS / email provider reached over HTTPS with basic auth.

    Implements IDeliveryGateway. Each bulk call is a single attempt: the
    session is mounted without a retry strategy because the provider takes
    no idempotency key and a retried batch could be sent twice.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        client_id: Optional[str] = None,
        secret_key: Optional[str] = None,
        timeout: Optional[float] = None
    ):
        """
        Initialize the gateway with process-wide credentials.

        Args:
            base_url: Provider API base URL (defaults to Config value)
            client_id: Basic auth user (defaults to Config value)
            secret_key: Basic auth password (defaults to Config value)
            timeout: Request timeout in seconds (defaults to Config value)

        Raises:
            ValueError: If any credential or the base URL is missing
        """
        self._logger = logging.getLogger(__name__)
        self.base_url = (base_url or Config.DELIVERY_BASE_URL or "").rstrip("/")
        self.client_id = client_id or Config.DELIVERY_CLIENT_ID
        self.secret_key = secret_key or Config.DELIVERY_SECRET_KEY
        self.timeout = timeout if timeout is not None else Config.DELIVERY_TIMEOUT

        if not self.client_id or not self.secret_key or not self.base_url:
            raise ValueError("Delivery provider credentials are not configured properly")

        self._headers = self._build_headers()
        self._session = self._create_session()

    def _create_session(self) -> requests.Session:
        """Create a basic-auth requests session with connection pooling and no retries."""
        session = requests.Session()
        session.auth = HTTPBasicAuth(self.client_id, self.secret_key)
        adapter = HTTPAdapter(
            max_retries=0,
            pool_connections=20,
            pool_maxsize=20,
            pool_block=False
        )
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session

    @staticmethod
    def _build_headers() -> Dict[str, str]:
        """Build the JSON headers sent with every request."""
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def send_bulk_sms(
        self,
        numbers: Sequence[str],
        body: str,
        sender_label: Optional[str] = None
    ) -> DeliveryResult:
        """
        Send one SMS body to many numbers through `POST /sms/send`.

        The provider uses the same endpoint for single and bulk SMS.

        Args:
            numbers: Non-empty sequence of phone numbers
            body: SMS text
            sender_label: Optional sender id

        Returns:
            DeliveryResult, accepted when the provider reports success or a message id

        Raises:
            ValueError: If numbers is empty
            GatewayError: On transport or provider errors
        """
        if not numbers:
            raise ValueError("At least one phone number is required")

        payload: Dict[str, Any] = {
            "recipients": [{"phone": number} for number in numbers],
            "message": body,
        }
        if sender_label:
            payload["sender_id"] = sender_label

        self._logger.info(f"Sending bulk SMS request: recipient_count={len(numbers)}")
        data = self._request("POST", "sms/send", "send_bulk_sms", "Failed to send SMS", payload)

        message_id = data.get("message_id")
        accepted = bool(data.get("success")) or bool(message_id)
        return DeliveryResult(accepted=accepted, correlation_id=message_id, raw=data)

    def send_bulk_email(
        self,
        recipients: Sequence[EmailAddressee],
        subject: str,
        html_body: str,
        text_body: str
    ) -> DeliveryResult:
        """
        Send one email to many addressees through `POST /email/send-bulk`.

        Args:
            recipients: Non-empty sequence of addressees
            subject: Email subject
            html_body: HTML body
            text_body: Plain-text body

        Returns:
            DeliveryResult, accepted when the provider reports success or a batch/message id

        Raises:
            ValueError: If recipients is empty
            GatewayError: On transport or provider errors
        """
        if not recipients:
            raise ValueError("At least one email recipient is required")

        payload = {
            "recipients": [
                {"email": r.address, "name": r.display_name} for r in recipients
            ],
            "subject": subject,
            "html": html_body,
            "text": text_body,
        }

        self._logger.info(f"Sending bulk email request: recipient_count={len(recipients)}")
        data = self._request(
            "POST", "email/send-bulk", "send_bulk_email", "Failed to send bulk email", payload
        )

        correlation_id = data.get("batch_id") or data.get("message_id")
        accepted = bool(data.get("success")) or bool(correlation_id)
        return DeliveryResult(accepted=accepted, correlation_id=correlation_id, raw=data)

    def get_sms_status(self, message_id: str) -> Dict[str, Any]:
        """Fetch provider-side delivery status for an SMS batch."""
        return self._request(
            "GET", f"sms/status/{message_id}", "get_sms_status", "Failed to get SMS status"
        )

    def test_connection(self) -> Dict[str, Any]:
        """Check that the provider accepts the configured credentials."""
        data = self._request("GET", "test", "test_connection", "Failed to test connection")
        self._logger.info("Delivery provider connection test succeeded")
        return data

    def _request(
        self,
        method: str,
        endpoint: str,
        operation: str,
        fallback_error: str,
        json_data: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Make a single authenticated request to the provider.

        Args:
            method: HTTP method
            endpoint: Path relative to the base URL
            operation: Operation name for logs and metrics
            fallback_error: Error text used when the provider gives no detail
            json_data: Optional JSON body

        Returns:
            Response JSON object

        Raises:
            GatewayError: On connection errors, non-2xx responses or non-JSON bodies
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        start_time = time.time()
        success = False

        try:
            response = self._session.request(
                method=method,
                url=url,
                headers=self._headers,
                json=json_data,
                timeout=self.timeout
            )
            self._logger.debug(f"Request: {method} {url} -> {response.status_code}")

            if not response.ok:
                self._log_error(operation, response)
                raise GatewayError(
                    self._extract_detail(response) or fallback_error,
                    http_status=response.status_code
                )

            try:
                data = response.json()
            except ValueError as json_error:
                self._logger.error(
                    f"{operation}: non-JSON response from {url}: {response.text[:200]}"
                )
                raise GatewayError(fallback_error, http_status=response.status_code) from json_error

            if not isinstance(data, dict):
                self._logger.error(f"{operation}: unexpected payload type {type(data).__name__}")
                raise GatewayError(fallback_error, http_status=response.status_code)

            self._logger.debug(f"{operation} response: {data}")
            success = True
            return data

        except requests.Timeout as e:
            self._logger.error(f"{operation}: request timeout after {self.timeout}s")
            raise GatewayError(fallback_error) from e
        except requests.RequestException as e:
            self._logger.error(f"{operation}: request failed: {e}")
            raise GatewayError(fallback_error) from e
        finally:
            track_gateway_call(operation, time.time() - start_time, success)

    @staticmethod
    def _extract_detail(response: requests.Response) -> Optional[str]:
        """Pull the provider's `detail` or `message` out of an error body."""
        try:
            error_data = response.json()
        except ValueError:
            return None
        if not isinstance(error_data, dict):
            return None
        detail = error_data.get("detail") or error_data.get("message")
        return str(detail) if detail else None

    def _log_error(self, operation: str, response: requests.Response) -> None:
        """Log error response details."""
        self._logger.error(
            f"{operation}: HTTP {response.status_code} {response.reason}: {response.text[:500]}"
        )
