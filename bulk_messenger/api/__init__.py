"""API endpoints module.

HTTP endpoints organized by domain.
"""

from bulk_messenger.api.messages import messages_blueprint
from bulk_messenger.api.health import health_blueprint

__all__ = [
    "messages_blueprint",
    "health_blueprint",
]
