"""Rate limiting middleware using Flask-Limiter."""
import logging

from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from bulk_messenger.middleware.auth import peek_user_id

logger = logging.getLogger(__name__)


def get_limiter_key() -> str:
    """
    Get rate limit key based on authenticated user or IP address.

    Returns:
        String key for rate limiting
    """
    user_id = peek_user_id()
    if user_id:
        return f"rate_limit:user:{user_id}"

    # Fallback to IP address
    return get_remote_address()


limiter = Limiter(
    key_func=get_limiter_key,
    default_limits=["1000 per hour", "100 per minute"],
    strategy="fixed-window",
    headers_enabled=True
)


def init_rate_limiter(app) -> Limiter:
    """
    Bind the shared limiter to the app with storage chosen from config.

    Args:
        app: Flask application instance

    Returns:
        Configured Limiter instance
    """
    if app.config.get("RATELIMIT_ENABLED"):
        app.config.setdefault("RATELIMIT_STORAGE_URI", app.config["RATELIMIT_STORAGE_URL"])
        # Keep serving if the limiter store goes away
        app.config.setdefault("RATELIMIT_IN_MEMORY_FALLBACK_ENABLED", True)
        app.config.setdefault("RATELIMIT_SWALLOW_ERRORS", True)
    else:
        app.config.setdefault("RATELIMIT_STORAGE_URI", "memory://")

    limiter.init_app(app)
    logger.info(
        f"Rate limiting {'enabled' if app.config.get('RATELIMIT_ENABLED') else 'disabled'}"
    )
    return limiter
