"""
Redis Connection
"""
import logging

import redis

from wealth_oven.core.config import get_settings

logger = logging.getLogger(__name__)

_redis_client = None


def get_redis_client() -> redis.Redis:
    """Get Redis client (singleton)"""
    global _redis_client

    if _redis_client is None:
        settings = get_settings()
        _redis_client = redis.Redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=1,
            socket_timeout=1,
        )
        logger.info("Redis client created")

    return _redis_client

