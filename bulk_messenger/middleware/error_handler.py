"""Error handling middleware with Sentry integration."""
import logging

import sentry_sdk
from flask import jsonify
from sentry_sdk.integrations.flask import FlaskIntegration

from bulk_messenger.domain.exceptions import DispatchError

logger = logging.getLogger(__name__)


def init_error_handlers(app) -> None:
    """
    Initialize error handlers for the application.

    Every error response uses the `{"success": false, "error": ...}` envelope.

    Args:
        app: Flask application instance
    """
    sentry_dsn = app.config.get("SENTRY_DSN")
    if sentry_dsn:
        sentry_sdk.init(
            dsn=sentry_dsn,
            integrations=[FlaskIntegration()],
            traces_sample_rate=0.1,
            environment=app.config.get("ENV_NAME", "production"),
        )
        logger.info("Sentry error tracking initialized")

    @app.errorhandler(DispatchError)
    def dispatch_error(error: DispatchError):
        """Handle domain errors raised before a message is persisted."""
        if error.status_code >= 500:
            logger.error(f"Dispatch error: {error}", exc_info=True)
        else:
            logger.info(f"Rejected request: {error}")
        return jsonify({"success": False, "error": str(error)}), error.status_code

    @app.errorhandler(400)
    def bad_request(error):
        """Handle malformed requests (e.g. invalid JSON)."""
        return jsonify({"success": False, "error": "Bad request"}), 400

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 errors."""
        return jsonify({"success": False, "error": "Resource not found"}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        """Handle 405 errors."""
        return jsonify({"success": False, "error": "Method not allowed"}), 405

    @app.errorhandler(429)
    def rate_limit_error(error):
        """Handle rate limit errors."""
        return jsonify({
            "success": False,
            "error": "Rate limit exceeded. Please try again later."
        }), 429

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors."""
        logger.error(f"Internal server error: {error}", exc_info=True)
        return jsonify({"success": False, "error": "Internal server error"}), 500
