"""
Cache Infrastructure
"""
from wealth_oven.infrastructure.cache.base_cache import BaseCache
from wealth_oven.infrastructure.cache.auction_cache import AuctionCache
from wealth_oven.infrastructure.cache.cache_manager import (
    CacheManager,
    get_cache_manager,
    get_auction_cache,
)

__all__ = [
    "BaseCache",
    "AuctionCache",
    "CacheManager",
    "get_cache_manager",
    "get_auction_cache",
]
