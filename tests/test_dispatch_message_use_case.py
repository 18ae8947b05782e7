"""Tests for the dispatch use case: intake, sending and reconciliation."""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from bulk_messenger.application.use_cases.dispatch_message_use_case import (
    BatchOutcome,
    DispatchRequest,
    parse_schedule,
)
from bulk_messenger.domain.entities.message import Channel, MessageStatus
from bulk_messenger.domain.exceptions import (
    GatewayError,
    InvalidRequest,
    NoValidRecipients,
    StorageError,
)
from bulk_messenger.domain.interfaces.delivery_gateway import DeliveryResult, EmailAddressee
from tests.conftest import FIXED_NOW, OWNER_ID


def _sms_request(**overrides):
    values = {
        "owner_id": OWNER_ID,
        "channel": "sms",
        "content": "Store opens at 9",
        "recipient_ids": ["c-ana", "c-ben", "c-cara"],
    }
    values.update(overrides)
    return DispatchRequest(**values)


def _email_request(**overrides):
    values = {
        "owner_id": OWNER_ID,
        "channel": "email",
        "content": "<p>Hello <b>there</b></p>",
        "subject": "News",
        "direct_recipients": [
            {"name": "Xia", "email": "xia@example.com"},
            {"email": "yuri@example.com"},
        ],
    }
    values.update(overrides)
    return DispatchRequest(**values)


class TestSuccessfulDispatch:
    """Accepted batches mark every recipient sent."""

    def test_sms_batch_accepted(self, use_case, delivery_gateway, message_repository):
        message = use_case.execute(_sms_request())

        assert message.status is MessageStatus.SENT
        assert [r.status for r in message.recipients] == [MessageStatus.SENT] * 3
        assert all(r.message_id == "m1" for r in message.recipients)
        assert message.cost == pytest.approx(0.03)
        assert message.successful_sends == 3
        assert message.failed_sends == 0
        assert message.sent_at == FIXED_NOW

        stored = message_repository.find_by_id(message.id)
        assert stored.status is MessageStatus.SENT
        assert stored.successful_sends == 3

    def test_sms_gateway_called_once_with_all_numbers(self, use_case, delivery_gateway):
        use_case.execute(_sms_request())

        delivery_gateway.send_bulk_sms.assert_called_once_with(
            ["+15550000001", "+15550000002", "+15550000003"],
            "Store opens at 9",
            "BulkMsgApp"
        )
        delivery_gateway.send_bulk_email.assert_not_called()

    def test_email_batch_uses_subject_and_plain_text(self, use_case, delivery_gateway):
        message = use_case.execute(_email_request())

        delivery_gateway.send_bulk_email.assert_called_once_with(
            [
                EmailAddressee(address="xia@example.com", display_name="Xia"),
                EmailAddressee(address="yuri@example.com", display_name="Direct Recipient"),
            ],
            "News",
            "<p>Hello <b>there</b></p>",
            "Hello there"
        )
        assert message.cost == pytest.approx(0.002)
        assert all(r.message_id == "b1" for r in message.recipients)

    def test_email_without_subject_gets_default(self, use_case, delivery_gateway):
        use_case.execute(_email_request(subject=None))

        args = delivery_gateway.send_bulk_email.call_args[0]
        assert args[1] == "No Subject"


class TestFailedDispatch:
    """Gateway failures are recorded on the message, never raised."""

    def test_gateway_error_marks_all_recipients_failed(self, use_case, delivery_gateway):
        delivery_gateway.send_bulk_email.side_effect = GatewayError("rate limited", http_status=429)

        message = use_case.execute(_email_request())

        assert message.status is MessageStatus.FAILED
        assert [r.status for r in message.recipients] == [MessageStatus.FAILED] * 2
        assert all(r.error == "rate limited" for r in message.recipients)
        assert message.cost == 0
        assert message.sent_at is None
        assert message.failed_sends == 2

    def test_unaccepted_response_is_a_failure(self, use_case, delivery_gateway):
        delivery_gateway.send_bulk_sms.return_value = DeliveryResult(accepted=False)

        message = use_case.execute(_sms_request())

        assert message.status is MessageStatus.FAILED
        assert message.recipients[0].error == "SMS send returned unsuccessful status"

    def test_unaccepted_email_response_message(self, use_case, delivery_gateway):
        delivery_gateway.send_bulk_email.return_value = DeliveryResult(accepted=False)

        message = use_case.execute(_email_request())

        assert message.recipients[0].error == "Email send returned unsuccessful status"

    def test_unexpected_exception_recorded_as_failure(self, use_case, delivery_gateway):
        delivery_gateway.send_bulk_sms.side_effect = RuntimeError("socket closed")

        message = use_case.execute(_sms_request())

        assert message.status is MessageStatus.FAILED
        assert message.recipients[0].error == "socket closed"

    def test_empty_error_text_falls_back(self, use_case, delivery_gateway):
        delivery_gateway.send_bulk_sms.side_effect = GatewayError("")

        message = use_case.execute(_sms_request())

        assert message.recipients[0].error == "Service error"

    def test_failed_message_is_persisted(self, use_case, delivery_gateway, message_repository):
        delivery_gateway.send_bulk_sms.side_effect = GatewayError("Insufficient balance")

        message = use_case.execute(_sms_request())

        stored = message_repository.find_by_id(message.id)
        assert stored.status is MessageStatus.FAILED
        assert stored.recipients[0].error == "Insufficient balance"

    def test_store_failure_after_send_propagates(self, use_case, message_repository):
        with patch.object(message_repository, "save", side_effect=StorageError("down")):
            with pytest.raises(StorageError):
                use_case.execute(_sms_request())


class TestAccountingInvariant:
    """successful + failed always equals the persisted recipient count."""

    @pytest.mark.parametrize("accepted", [True, False])
    def test_counts_add_up(self, use_case, delivery_gateway, accepted):
        delivery_gateway.send_bulk_sms.return_value = DeliveryResult(
            accepted=accepted, correlation_id="m1" if accepted else None
        )

        message = use_case.execute(_sms_request(
            recipient_ids=["c-ana", "c-dev"],
            direct_recipients=[{"name": "Walk-in", "phoneNumber": "+15553330000"}]
        ))

        assert message.total_recipients == 2
        assert message.successful_sends + message.failed_sends == message.total_recipients

    def test_batch_outcome_failure_defaults_reason(self):
        outcome = BatchOutcome.failure(None)

        assert outcome.accepted is False
        assert outcome.error == "Service error"


class TestScheduling:
    """Future schedules persist pending; past ones dispatch immediately."""

    def test_future_schedule_persists_pending_without_sending(
        self, use_case, delivery_gateway, message_repository
    ):
        future = (FIXED_NOW + timedelta(days=1)).isoformat()

        message = use_case.execute(_sms_request(schedule=future))

        delivery_gateway.send_bulk_sms.assert_not_called()
        assert message.status is MessageStatus.PENDING
        assert all(r.status is MessageStatus.PENDING for r in message.recipients)
        assert message.scheduled_for == FIXED_NOW + timedelta(days=1)
        assert message_repository.find_by_id(message.id).status is MessageStatus.PENDING

    def test_past_schedule_dispatches_immediately(self, use_case, delivery_gateway):
        past = (FIXED_NOW - timedelta(hours=1)).isoformat()

        message = use_case.execute(_sms_request(schedule=past))

        delivery_gateway.send_bulk_sms.assert_called_once()
        assert message.status is MessageStatus.SENT

    def test_schedule_equal_to_now_dispatches_immediately(self, use_case, delivery_gateway):
        message = use_case.execute(_sms_request(schedule=FIXED_NOW.isoformat()))

        delivery_gateway.send_bulk_sms.assert_called_once()
        assert message.status is MessageStatus.SENT
        assert message.scheduled_for == FIXED_NOW

    def test_parse_schedule_variants(self):
        expected = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)

        assert parse_schedule("2026-03-10T12:00:00Z") == expected
        assert parse_schedule("2026-03-10T12:00:00") == expected
        assert parse_schedule("2026-03-10T14:00:00+02:00") == expected
        assert parse_schedule(int(expected.timestamp() * 1000)) == expected
        assert parse_schedule(None) is None
        assert parse_schedule("") is None

    @pytest.mark.parametrize("value", ["tomorrow", True, ["2026-03-10"]])
    def test_parse_schedule_rejects_garbage(self, value):
        with pytest.raises(InvalidRequest, match="Invalid schedule"):
            parse_schedule(value)


class TestValidation:
    """Malformed requests are rejected before anything is stored."""

    @pytest.mark.parametrize("overrides", [
        {"channel": None},
        {"content": ""},
        {"recipient_ids": [], "direct_recipients": []},
    ])
    def test_missing_fields(self, use_case, message_repository, delivery_gateway, overrides):
        with pytest.raises(InvalidRequest, match="Missing required fields"):
            use_case.execute(_sms_request(**overrides))

        assert message_repository.list_by_owner(OWNER_ID) == []
        delivery_gateway.send_bulk_sms.assert_not_called()

    def test_unsupported_channel(self, use_case):
        with pytest.raises(InvalidRequest, match="Unsupported message type: fax"):
            use_case.execute(_sms_request(channel="fax"))

    def test_channel_is_case_insensitive(self, use_case):
        message = use_case.execute(_sms_request(channel="SMS"))

        assert message.channel is Channel.SMS

    def test_no_valid_recipients_persists_nothing(self, use_case, message_repository):
        with pytest.raises(NoValidRecipients):
            use_case.execute(_email_request(
                direct_recipients=[{"name": "Phone only", "phoneNumber": "+15551110000"}]
            ))

        assert message_repository.list_by_owner(OWNER_ID) == []

    def test_from_payload_reads_api_keys(self):
        request = DispatchRequest.from_payload(OWNER_ID, {
            "type": "email",
            "content": "Hi",
            "subject": "S",
            "recipientIds": ["c-1"],
            "directRecipients": [{"email": "a@example.com"}],
            "schedule": "2026-03-11T00:00:00Z",
        })

        assert request.channel == "email"
        assert request.recipient_ids == ["c-1"]
        assert request.direct_recipients == [{"email": "a@example.com"}]
        assert request.schedule == "2026-03-11T00:00:00Z"


class TestDispatchMetrics:
    """Each reconciled message is reported once."""

    def test_track_dispatch_called_with_final_counts(self, use_case):
        with patch(
            "bulk_messenger.application.use_cases.dispatch_message_use_case.track_dispatch"
        ) as mock_track:
            use_case.execute(_sms_request())

        mock_track.assert_called_once_with("sms", "sent", 3, 0)

    def test_dispatch_can_be_called_on_stored_pending_message(
        self, use_case, delivery_gateway, message_repository
    ):
        future = (FIXED_NOW + timedelta(days=1)).isoformat()
        pending = use_case.execute(_sms_request(schedule=future))

        message = use_case.dispatch(message_repository.find_by_id(pending.id))

        assert message.status is MessageStatus.SENT
        delivery_gateway.send_bulk_sms.assert_called_once()


class TestTerminalMessages:
    """Sent and failed messages are never dispatched again."""

    def test_sent_message_not_resent(self, use_case, delivery_gateway, message_repository):
        sent = use_case.execute(_sms_request())

        message = use_case.dispatch(message_repository.find_by_id(sent.id))

        assert delivery_gateway.send_bulk_sms.call_count == 1
        assert message.status is MessageStatus.SENT
        assert message.cost == pytest.approx(0.03)
        assert message.successful_sends == 3
        assert message.sent_at == FIXED_NOW

    def test_failed_message_stays_failed(self, use_case, delivery_gateway, message_repository):
        delivery_gateway.send_bulk_sms.side_effect = GatewayError("down")
        failed = use_case.execute(_sms_request())
        delivery_gateway.send_bulk_sms.side_effect = None

        message = use_case.dispatch(message_repository.find_by_id(failed.id))

        assert delivery_gateway.send_bulk_sms.call_count == 1
        assert message.status is MessageStatus.FAILED
        assert all(r.status is MessageStatus.FAILED for r in message.recipients)
        assert message_repository.find_by_id(failed.id).status is MessageStatus.FAILED
