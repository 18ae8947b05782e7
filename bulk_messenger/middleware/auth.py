"""Bearer token authentication for API endpoints."""
import logging
from datetime import datetime, timedelta, timezone
from functools import wraps
from typing import Callable, Optional

import jwt
from flask import current_app, g, jsonify, request

logger = logging.getLogger(__name__)


def generate_token(user_id: str, secret: Optional[str] = None, expires_days: Optional[int] = None) -> str:
    """
    Issue a signed access token for a user.

    Args:
        user_id: Owner identifier stored in the `userId` claim
        secret: Signing secret (defaults to the app's JWT_SECRET)
        expires_days: Lifetime in days (defaults to the app's JWT_EXPIRES_DAYS)

    Returns:
        Encoded JWT
    """
    now = datetime.now(timezone.utc)
    days = expires_days if expires_days is not None else current_app.config["JWT_EXPIRES_DAYS"]
    payload = {
        "userId": str(user_id),
        "iat": now,
        "exp": now + timedelta(days=days),
    }
    return jwt.encode(
        payload,
        secret or current_app.config["JWT_SECRET"],
        algorithm=current_app.config.get("JWT_ALGORITHM", "HS256"),
    )


def _bearer_token() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None
    return header[len("Bearer "):].strip() or None


def decode_user_id(token: str) -> Optional[str]:
    """Return the `userId` claim of a valid token, None otherwise."""
    try:
        payload = jwt.decode(
            token,
            current_app.config["JWT_SECRET"],
            algorithms=[current_app.config.get("JWT_ALGORITHM", "HS256")],
        )
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired token")
        return None
    except jwt.InvalidTokenError:
        return None

    user_id = payload.get("userId")
    return str(user_id) if user_id else None


def peek_user_id() -> Optional[str]:
    """User id of the current request, decoding the token if needed."""
    user_id = getattr(g, "user_id", None)
    if user_id:
        return user_id
    token = _bearer_token()
    return decode_user_id(token) if token else None


def token_required(f: Callable) -> Callable:
    """
    Decorator requiring a valid bearer token.

    Stores the authenticated owner id in `flask.g.user_id`.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = _bearer_token()
        if not token:
            return jsonify({"success": False, "error": "Authentication required"}), 401

        user_id = decode_user_id(token)
        if not user_id:
            return jsonify({"success": False, "error": "Invalid token"}), 401

        g.user_id = user_id
        return f(*args, **kwargs)

    return decorated_function
