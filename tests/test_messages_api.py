"""Tests for the messages and health HTTP endpoints."""

from unittest.mock import patch

import pytest

from bulk_messenger.domain.exceptions import GatewayError
from bulk_messenger.middleware.auth import generate_token
from tests.conftest import OTHER_OWNER_ID, OWNER_ID


SEND_URL = "/api/messages/send"


def _sms_payload(**overrides):
    payload = {
        "type": "sms",
        "content": "Flash sale today",
        "recipientIds": ["c-ana", "c-ben"],
    }
    payload.update(overrides)
    return payload


class TestAuthentication:
    """Every messages endpoint needs a bearer token."""

    @pytest.mark.parametrize("method,url", [
        ("post", SEND_URL),
        ("get", "/api/messages"),
        ("get", "/api/messages/stats"),
    ])
    def test_missing_token(self, client, method, url):
        response = getattr(client, method)(url)

        assert response.status_code == 401
        assert response.get_json() == {"success": False, "error": "Authentication required"}

    def test_invalid_token(self, client):
        response = client.get("/api/messages", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401
        assert response.get_json()["error"] == "Invalid token"

    def test_token_signed_with_other_secret(self, app, client):
        with app.app_context():
            token = generate_token(OWNER_ID, secret="another-signing-secret-of-sufficient-length")

        response = client.get("/api/messages", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401


class TestSendMessage:
    """POST /api/messages/send."""

    def test_successful_sms(self, client, auth_headers, delivery_gateway):
        response = client.post(SEND_URL, json=_sms_payload(), headers=auth_headers)

        assert response.status_code == 200
        body = response.get_json()
        assert body["success"] is True
        assert body["message"] == "Message queued successfully"
        data = body["data"]
        assert data["userId"] == OWNER_ID
        assert data["type"] == "sms"
        assert data["status"] == "sent"
        assert data["totalRecipients"] == 2
        assert data["successfulSends"] == 2
        assert data["cost"] == pytest.approx(0.02)
        assert [r["messageId"] for r in data["recipients"]] == ["m1", "m1"]
        delivery_gateway.send_bulk_sms.assert_called_once()

    def test_gateway_failure_still_returns_success(self, client, auth_headers, delivery_gateway):
        delivery_gateway.send_bulk_email.side_effect = GatewayError("rate limited", http_status=429)

        response = client.post(SEND_URL, json={
            "type": "email",
            "content": "<p>Hi</p>",
            "directRecipients": [
                {"name": "A", "email": "a@example.com"},
                {"name": "B", "email": "b@example.com"},
            ],
        }, headers=auth_headers)

        assert response.status_code == 200
        data = response.get_json()["data"]
        assert data["status"] == "failed"
        assert data["cost"] == 0
        assert data["failedSends"] == 2
        assert all(r["status"] == "failed" and r["error"] == "rate limited" for r in data["recipients"])

    def test_missing_recipients_rejected_and_nothing_stored(
        self, client, auth_headers, message_repository
    ):
        response = client.post(
            SEND_URL, json=_sms_payload(recipientIds=[]), headers=auth_headers
        )

        assert response.status_code == 400
        assert response.get_json() == {"success": False, "error": "Missing required fields"}
        assert message_repository.list_by_owner(OWNER_ID) == []

    def test_no_valid_recipients(self, client, auth_headers):
        response = client.post(
            SEND_URL, json=_sms_payload(recipientIds=["c-dev"]), headers=auth_headers
        )

        assert response.status_code == 400
        assert response.get_json()["error"] == "No valid recipients found"

    def test_unsupported_type(self, client, auth_headers):
        response = client.post(SEND_URL, json=_sms_payload(type="fax"), headers=auth_headers)

        assert response.status_code == 400
        assert "Unsupported message type" in response.get_json()["error"]

    def test_body_required(self, client, auth_headers):
        response = client.post(SEND_URL, data="plain text", headers=auth_headers)

        assert response.status_code == 400
        assert response.get_json()["error"] == "Request body required"

    def test_future_schedule_left_pending(self, client, auth_headers, delivery_gateway):
        response = client.post(
            SEND_URL, json=_sms_payload(schedule="2099-01-01T00:00:00Z"), headers=auth_headers
        )

        assert response.status_code == 200
        data = response.get_json()["data"]
        assert data["status"] == "pending"
        assert data["scheduledFor"].startswith("2099-01-01T00:00:00")
        delivery_gateway.send_bulk_sms.assert_not_called()

    def test_invalid_schedule(self, client, auth_headers):
        response = client.post(
            SEND_URL, json=_sms_payload(schedule="next week"), headers=auth_headers
        )

        assert response.status_code == 400
        assert response.get_json()["error"] == "Invalid schedule"

    def test_foreign_contacts_not_sent(self, client, auth_headers, delivery_gateway):
        response = client.post(
            SEND_URL, json=_sms_payload(recipientIds=["c-ana", "c-foreign"]), headers=auth_headers
        )

        assert response.get_json()["data"]["totalRecipients"] == 1
        numbers = delivery_gateway.send_bulk_sms.call_args[0][0]
        assert numbers == ["+15550000001"]


class TestListAndStats:
    """GET /api/messages and /api/messages/stats."""

    def test_list_is_scoped_and_paginated(self, app, client, auth_headers):
        client.post(SEND_URL, json=_sms_payload(), headers=auth_headers)
        client.post(SEND_URL, json=_sms_payload(content="Second"), headers=auth_headers)

        response = client.get("/api/messages?limit=1", headers=auth_headers)

        body = response.get_json()
        assert response.status_code == 200
        assert body["pagination"] == {"page": 1, "limit": 1, "total": 2, "pages": 2}
        assert body["data"][0]["content"] == "Second"

        with app.app_context():
            other = generate_token(OTHER_OWNER_ID)
        other_body = client.get(
            "/api/messages", headers={"Authorization": f"Bearer {other}"}
        ).get_json()
        assert other_body["data"] == []

    def test_list_type_filter(self, client, auth_headers):
        client.post(SEND_URL, json=_sms_payload(), headers=auth_headers)

        body = client.get("/api/messages?type=email", headers=auth_headers).get_json()

        assert body["data"] == []
        assert body["pagination"]["total"] == 0

    def test_list_bad_page(self, client, auth_headers):
        response = client.get("/api/messages?page=abc", headers=auth_headers)

        assert response.status_code == 400
        assert response.get_json()["error"] == "page must be an integer"

    def test_stats(self, client, auth_headers, delivery_gateway):
        client.post(SEND_URL, json=_sms_payload(), headers=auth_headers)
        delivery_gateway.send_bulk_sms.side_effect = GatewayError("down")
        client.post(SEND_URL, json=_sms_payload(recipientIds=["c-cara"]), headers=auth_headers)

        body = client.get("/api/messages/stats", headers=auth_headers).get_json()

        overall = body["data"]["overall"]
        assert body["success"] is True
        assert overall["totalMessages"] == 2
        assert overall["totalRecipients"] == 3
        assert overall["successfulSends"] == 2
        assert overall["failedSends"] == 1
        assert overall["totalCost"] == pytest.approx(0.02)
        assert body["data"]["today"]["todayMessages"] == 2


class TestHealth:
    """Health, readiness and liveness probes."""

    def test_health(self, client):
        assert client.get("/health").get_json() == {"status": "healthy", "service": "bulk-messenger"}

    def test_ready_with_memory_store(self, client):
        response = client.get("/health/ready")

        assert response.status_code == 200
        assert response.get_json()["checks"]["store"] is True

    def test_not_ready_without_redis(self, app, client):
        app.config["STORAGE_TYPE"] = "redis"
        with patch(
            "bulk_messenger.api.health.RedisClientFactory.get_client", return_value=None
        ):
            response = client.get("/health/ready")

        assert response.status_code == 503
        assert response.get_json()["status"] == "not_ready"

    def test_live(self, client):
        assert client.get("/health/live").status_code == 200

    def test_unknown_route_uses_error_envelope(self, client):
        response = client.get("/api/nothing-here")

        assert response.status_code == 404
        assert response.get_json() == {"success": False, "error": "Resource not found"}
