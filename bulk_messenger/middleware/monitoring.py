"""Monitoring and metrics middleware using Prometheus."""
import logging
import time
from functools import wraps
from typing import Callable

from flask import request
from prometheus_client import Counter, Histogram, make_wsgi_app
from werkzeug.middleware.dispatcher import DispatcherMiddleware

from bulk_messenger.config.settings import Config

logger = logging.getLogger(__name__)

# Prometheus metrics
messages_dispatched_total = Counter(
    'bulk_messages_dispatched_total',
    'Total number of messages reconciled, by channel and final status',
    ['channel', 'status']
)

recipients_processed_total = Counter(
    'bulk_message_recipients_total',
    'Total number of recipients reconciled, by channel and final status',
    ['channel', 'status']
)

gateway_call_duration = Histogram(
    'delivery_gateway_call_duration_seconds',
    'Time spent waiting on the delivery provider',
    ['operation', 'status'],
    buckets=[0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0]
)

api_requests_total = Counter(
    'bulk_api_requests_total',
    'Total number of API requests',
    ['method', 'endpoint', 'status']
)

api_request_duration = Histogram(
    'bulk_api_request_duration_seconds',
    'Time spent processing API requests',
    ['endpoint']
)


def register_metrics_middleware(app) -> None:
    """
    Mount the Prometheus WSGI app at /metrics.

    Args:
        app: Flask application instance
    """
    if not app.config.get("ENABLE_METRICS", Config.ENABLE_METRICS):
        return

    app.wsgi_app = DispatcherMiddleware(app.wsgi_app, {
        '/metrics': make_wsgi_app()
    })

    logger.info("Prometheus metrics enabled at /metrics")


def track_request(endpoint: str):
    """
    Decorator to track API request metrics.

    Args:
        endpoint: Endpoint name for metrics
    """
    def decorator(f: Callable) -> Callable:
        @wraps(f)
        def wrapper(*args, **kwargs):
            start_time = time.time()

            try:
                response = f(*args, **kwargs)
            except Exception:
                api_requests_total.labels(
                    method=request.method,
                    endpoint=endpoint,
                    status=500
                ).inc()
                raise

            status_code = response[1] if isinstance(response, tuple) else 200
            api_requests_total.labels(
                method=request.method,
                endpoint=endpoint,
                status=status_code
            ).inc()
            api_request_duration.labels(endpoint=endpoint).observe(time.time() - start_time)
            return response
        return wrapper
    return decorator


def track_dispatch(channel: str, status: str, successful: int, failed: int) -> None:
    """
    Track the outcome of one reconciled message.

    Args:
        channel: Message channel value
        status: Final message status value
        successful: Recipients marked sent
        failed: Recipients marked failed
    """
    try:
        messages_dispatched_total.labels(channel=channel, status=status).inc()
        if successful:
            recipients_processed_total.labels(channel=channel, status="sent").inc(successful)
        if failed:
            recipients_processed_total.labels(channel=channel, status="failed").inc(failed)
    except Exception as e:
        # Don't fail if metrics tracking fails
        logger.debug(f"Failed to track dispatch metrics: {e}")


def track_gateway_call(operation: str, duration: float, success: bool) -> None:
    """
    Track a delivery provider round-trip.

    Args:
        operation: Gateway operation name (e.g. 'send_bulk_sms')
        duration: Elapsed seconds
        success: Whether the call returned a usable payload
    """
    try:
        status = "success" if success else "error"
        gateway_call_duration.labels(operation=operation, status=status).observe(duration)
    except Exception as e:
        logger.debug(f"Failed to track gateway call metrics: {e}")
