"""Domain exceptions raised by the dispatch core."""
from typing import Optional


class DispatchError(Exception):
    """Base class for dispatch errors."""

    status_code: int = 500


class InvalidRequest(DispatchError):
    """Missing channel, content or recipient source; rejected before persistence."""

    status_code = 400


class MissingRecipients(InvalidRequest):
    """Neither contact references nor direct recipients were supplied."""


class NoValidRecipients(DispatchError):
    """Resolution yielded no recipient eligible for the channel."""

    status_code = 400

    def __init__(self, message: str = "No valid recipients found"):
        super().__init__(message)


class GatewayError(DispatchError):
    """Delivery provider transport failure or error response."""

    status_code = 502

    def __init__(self, message: str, http_status: Optional[int] = None):
        super().__init__(message)
        self.http_status = http_status


class StorageError(DispatchError):
    """The message or contact store could not be read or written."""
