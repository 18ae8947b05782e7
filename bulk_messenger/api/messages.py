"""Messages API endpoints: bulk dispatch, history and usage statistics."""
import logging

from flask import Blueprint, current_app, g, jsonify, request

from bulk_messenger.application.use_cases.dispatch_message_use_case import DispatchRequest
from bulk_messenger.domain.exceptions import InvalidRequest
from bulk_messenger.infrastructure.service_container import ServiceContainer
from bulk_messenger.middleware.auth import token_required
from bulk_messenger.middleware.monitoring import track_request
from bulk_messenger.middleware.rate_limiter import limiter


messages_blueprint = Blueprint("messages", __name__, url_prefix="/api/messages")
_logger = logging.getLogger(__name__)


def _container() -> ServiceContainer:
    """Service container stored on the app by the factory."""
    container = current_app.config.get("service_container")
    if not container:
        _logger.warning("Service container not in app.config, creating new instance")
        container = ServiceContainer()
        current_app.config["service_container"] = container
    return container


def _send_rate_limit() -> str:
    return current_app.config.get("SEND_RATE_LIMIT", "30 per minute")


def _int_arg(name: str, default: int) -> int:
    value = request.args.get(name)
    if value in (None, ""):
        return default
    try:
        return int(value)
    except ValueError as e:
        raise InvalidRequest(f"{name} must be an integer") from e


@messages_blueprint.route("/send", methods=["POST"])
@token_required
@limiter.limit(_send_rate_limit)
@track_request("send_message")
def send_message():
    """
    Dispatch one message to a batch of recipients.

    Expected payload:
    {
        "type": "sms" | "email",
        "content": "Message body (HTML for email)",
        "subject": "Optional email subject",
        "recipientIds": ["<contact id>", ...],
        "directRecipients": [{"name": "...", "phoneNumber": "...", "email": "..."}],
        "schedule": "Optional ISO-8601 timestamp"
    }

    Delivery failures do not fail the request: the returned message carries
    status "failed" and per-recipient errors.

    Returns:
        JSON response with the persisted message
    """
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise InvalidRequest("Request body required")

    dispatch_request = DispatchRequest.from_payload(g.user_id, body)
    message = _container().get_dispatch_use_case().execute(dispatch_request)

    return jsonify({
        "success": True,
        "message": "Message queued successfully",
        "data": message.to_dict()
    }), 200


@messages_blueprint.route("", methods=["GET"])
@messages_blueprint.route("/", methods=["GET"])
@token_required
@track_request("list_messages")
def list_messages():
    """
    List the caller's messages, newest first.

    Query parameters: page (default 1), limit (default 20), type, status.
    """
    result = _container().get_query_service().list_messages(
        g.user_id,
        page=_int_arg("page", 1),
        limit=_int_arg("limit", 20),
        channel=request.args.get("type"),
        status=request.args.get("status")
    )

    return jsonify({
        "success": True,
        "data": [m.to_dict() for m in result.messages],
        "pagination": result.pagination()
    }), 200


@messages_blueprint.route("/stats", methods=["GET"])
@token_required
@track_request("message_stats")
def message_stats():
    """Aggregate counters over the caller's messages, overall and for today (UTC)."""
    stats = _container().get_query_service().get_stats(g.user_id)
    return jsonify({"success": True, "data": stats}), 200
