"""
Cache Manager - single entry point for cache access and health
"""
import logging
from typing import Dict, Optional

import redis

from wealth_oven.core.config import get_settings
from wealth_oven.infrastructure.redis_client import get_redis_client
from wealth_oven.infrastructure.cache.auction_cache import AuctionCache

logger = logging.getLogger(__name__)


class CacheManager:
    """Owns the Redis connection and the per-entity caches"""

    def __init__(self, redis_client: Optional[redis.Redis] = None, enabled: Optional[bool] = None):
        settings = get_settings()
        if enabled is None:
            enabled = settings.CACHE_ENABLED

        if enabled and redis_client is None:
            redis_client = get_redis_client()

        self.redis_client = redis_client
        self.enabled = enabled
        self.auctions = AuctionCache(
            redis_client=redis_client,
            ttl=settings.CACHE_TTL,
            enabled=enabled,
        )

    def get_stats(self) -> Dict:
        return {"auctions": self.auctions.get_stats()}

    def health_check(self) -> Dict:
        """Check cache health"""
        if not self.enabled:
            return {"status": "disabled", "redis_connected": False}

        try:
            self.redis_client.ping()
        except redis.RedisError as e:
            logger.warning(f"Redis health check failed: {e}")
            return {"status": "degraded", "redis_connected": False, "error": str(e)}

        return {"status": "healthy", "redis_connected": True, "stats": self.get_stats()}


# ============================================================================
# SINGLETON
# ============================================================================
_cache_manager_instance = None


def get_cache_manager() -> CacheManager:
    """Get singleton cache manager"""
    global _cache_manager_instance

    if _cache_manager_instance is None:
        _cache_manager_instance = CacheManager()

    return _cache_manager_instance


def get_auction_cache() -> AuctionCache:
    """Dependency: the shared auction cache"""
    return get_cache_manager().auctions
