"""Flask application factory for the bulk messaging service."""
import logging
import sys

from flask import Flask, jsonify

from bulk_messenger.config.settings import Config, get_config
from bulk_messenger.api import health_blueprint, messages_blueprint
from bulk_messenger.infrastructure.service_container import ServiceContainer
from bulk_messenger.middleware.error_handler import init_error_handlers
from bulk_messenger.middleware.monitoring import register_metrics_middleware
from bulk_messenger.middleware.rate_limiter import init_rate_limiter


def create_app(config_class=None) -> Flask:
    """
    Create and configure Flask application with dependency injection.

    Missing delivery credentials or JWT secret abort startup: they are
    fixed for the process lifetime and cannot be supplied per request.

    Args:
        config_class: Optional configuration class (for testing)

    Returns:
        Configured Flask application

    Raises:
        ValueError: If required configuration is missing
    """
    config = config_class or get_config()

    if not config.TESTING:
        _configure_logging(config.DEBUG)
    _logger = logging.getLogger(__name__)

    config.validate()

    app = Flask(__name__)
    app.config.from_object(config)

    app.register_blueprint(messages_blueprint)
    app.register_blueprint(health_blueprint)

    @app.route("/", methods=["GET"])
    def root():
        """Root endpoint."""
        return jsonify({
            "status": "ok",
            "service": "bulk-messenger",
            "message": "Service is running"
        }), 200

    _initialize_middleware(app)
    _initialize_services(app, config)

    _logger.info(f"Application ready - registered blueprints: {[bp.name for bp in app.blueprints.values()]}")
    return app


def _configure_logging(debug: bool) -> None:
    """Configure application logging to stdout."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
        force=True
    )


def _initialize_middleware(app: Flask) -> None:
    """
    Initialize middleware (rate limiting, monitoring, error handling).

    Args:
        app: Flask application instance
    """
    init_rate_limiter(app)
    register_metrics_middleware(app)
    init_error_handlers(app)


def _initialize_services(app: Flask, config: type[Config]) -> None:
    """
    Create the service container and build the delivery gateway eagerly.

    Args:
        app: Flask application instance
        config: Configuration class
    """
    container = ServiceContainer(config)
    container.get_delivery_gateway()
    app.config['service_container'] = container
    logging.getLogger(__name__).debug("Remaining services will be initialized on demand")
