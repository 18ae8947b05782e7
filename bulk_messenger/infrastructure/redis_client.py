"""Redis client factory shared by the message store and the readiness probe."""
import logging
from typing import Dict, Optional
from urllib.parse import urlsplit

import redis
from redis.backoff import ExponentialBackoff
from redis.retry import Retry

from bulk_messenger.config.settings import Config

logger = logging.getLogger(__name__)

SUPPORTED_SCHEMES = ("redis", "rediss", "unix")


class RedisClientFactory:
    """
    Pooled Redis clients, one per URL.

    The message store and contact store share a client when they point at
    the same URL. Connection failures are reported as None so callers can
    decide whether the store is optional.
    """

    _clients: Dict[str, redis.Redis] = {}

    @staticmethod
    def mask_url(url: str) -> str:
        """Replace the password of a Redis URL with `***` for logging."""
        parts = urlsplit(url)
        if not parts.password:
            return url
        netloc = parts.netloc.replace(f":{parts.password}@", ":***@", 1)
        return parts._replace(netloc=netloc).geturl()

    @classmethod
    def _build(cls, url: str, max_connections: int) -> redis.Redis:
        return redis.Redis.from_url(
            url,
            max_connections=max_connections,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            health_check_interval=30,
            retry=Retry(ExponentialBackoff(cap=2, base=0.2), retries=3),
            retry_on_error=[redis.ConnectionError, redis.TimeoutError],
        )

    @classmethod
    def get_client(cls, url: Optional[str] = None, max_connections: int = 50) -> Optional[redis.Redis]:
        """
        Return a connected client for the URL, creating it on first use.

        Args:
            url: Redis URL (defaults to Config.REDIS_URL)
            max_connections: Pool size for a newly created client

        Returns:
            Redis client, or None if the URL is invalid or the server is unreachable
        """
        redis_url = url or Config.REDIS_URL
        if not redis_url:
            logger.warning("REDIS_URL not configured")
            return None

        client = cls._clients.get(redis_url)
        if client is not None:
            return client

        if urlsplit(redis_url).scheme not in SUPPORTED_SCHEMES:
            logger.warning(f"Unsupported Redis URL scheme: {cls.mask_url(redis_url)}")
            return None

        client = cls._build(redis_url, max_connections)
        try:
            client.ping()
        except redis.AuthenticationError as e:
            logger.error(f"Redis authentication failed for {cls.mask_url(redis_url)}: {e}")
            return None
        except (redis.ConnectionError, redis.TimeoutError) as e:
            logger.warning(f"Redis unreachable at {cls.mask_url(redis_url)}: {e}")
            return None

        logger.info(f"Connected to Redis at {cls.mask_url(redis_url)}")
        cls._clients[redis_url] = client
        return client

    @classmethod
    def close(cls) -> None:
        """Close every pooled client."""
        for client in cls._clients.values():
            client.close()
        cls._clients.clear()
