"""Read-side service for message history and usage statistics."""
import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from bulk_messenger.domain.entities.message import Channel, Message, MessageStatus, utcnow
from bulk_messenger.domain.exceptions import InvalidRequest
from bulk_messenger.domain.interfaces.message_repository import IMessageRepository


logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 100


@dataclass
class MessagePage:
    """One page of an owner's message history."""
    messages: List[Message]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def pagination(self) -> Dict[str, int]:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "pages": self.pages,
        }


class MessageQueryService:
    """Lists an owner's messages and aggregates their counters."""

    def __init__(
        self,
        message_repository: IMessageRepository,
        clock: Callable[[], datetime] = utcnow
    ):
        self.message_repository = message_repository
        self._clock = clock

    def list_messages(
        self,
        owner_id: str,
        page: int = 1,
        limit: int = 20,
        channel: Optional[str] = None,
        status: Optional[str] = None
    ) -> MessagePage:
        """
        Fetch a page of messages, newest first.

        Args:
            owner_id: Owner identifier
            page: 1-based page number
            limit: Page size (capped at MAX_PAGE_SIZE)
            channel: Optional channel value filter ("sms" / "email")
            status: Optional status value filter

        Returns:
            MessagePage

        Raises:
            InvalidRequest: On unknown filter values or non-positive paging
        """
        if page < 1 or limit < 1:
            raise InvalidRequest("page and limit must be positive")
        limit = min(limit, MAX_PAGE_SIZE)

        channel_filter = self._parse_enum(Channel, channel, "type")
        status_filter = self._parse_enum(MessageStatus, status, "status")

        logger.info(f"Fetching messages for user: {owner_id}")
        messages = self.message_repository.find_by_owner(
            owner_id,
            channel=channel_filter,
            status=status_filter,
            offset=(page - 1) * limit,
            limit=limit
        )
        total = self.message_repository.count_by_owner(
            owner_id, channel=channel_filter, status=status_filter
        )
        logger.info(f"Messages fetched: count={len(messages)} total={total}")

        return MessagePage(messages=messages, page=page, limit=limit, total=total)

    def get_stats(self, owner_id: str) -> Dict[str, Dict[str, Any]]:
        """
        Aggregate lifetime and today's (UTC) counters for an owner.

        Returns:
            Dict with "overall" and "today" sections
        """
        messages = self.message_repository.list_by_owner(owner_id)

        overall = {
            "totalMessages": len(messages),
            "totalRecipients": sum(m.total_recipients for m in messages),
            "successfulSends": sum(m.successful_sends for m in messages),
            "failedSends": sum(m.failed_sends for m in messages),
            "totalCost": sum(m.cost for m in messages),
        }

        start_of_day = self._clock().replace(hour=0, minute=0, second=0, microsecond=0)
        todays = [m for m in messages if m.created_at >= start_of_day]
        today = {
            "todayMessages": len(todays),
            "todayRecipients": sum(m.total_recipients for m in todays),
        }

        logger.info(f"Stats fetched for user: {owner_id}")
        return {"overall": overall, "today": today}

    @staticmethod
    def _parse_enum(enum_cls, value: Optional[str], name: str):
        if not value:
            return None
        try:
            return enum_cls(value.lower())
        except ValueError as e:
            raise InvalidRequest(f"Invalid {name} filter: {value}") from e
