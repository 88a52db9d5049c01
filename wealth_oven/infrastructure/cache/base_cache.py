"""
Base Cache - Generic read-through caching

Subclasses provide the key prefix, the DB lookup and the serializer.
Redis errors never fail a read: the cache degrades to the database.
"""
import json
import logging
from abc import ABC, abstractmethod
from typing import Optional, Dict, List, TypeVar, Generic

import redis
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BaseCache(ABC, Generic[T]):
    """
    Abstract base cache with common caching patterns

    Subclasses implement:
    - Entity-specific key prefix
    - Serialization logic
    - Database query logic
    """

    def __init__(self, redis_client: Optional[redis.Redis], ttl: int, enabled: bool = True):
        """
        Args:
            redis_client: Redis connection (may be None when caching is off)
            ttl: Time to live in seconds
            enabled: When False every read goes to the database
        """
        self.redis = redis_client
        self.ttl = ttl
        self.enabled = enabled and redis_client is not None

        # Metrics
        self.hits = 0
        self.misses = 0
        self.errors = 0

    # ========================================================================
    # ABSTRACT METHODS
    # ========================================================================

    @abstractmethod
    def _get_key_prefix(self) -> str:
        """Return cache key prefix, e.g. "auction" -> auction:<id>"""

    @abstractmethod
    def _fetch_from_db(self, entity_id: str, db: Session) -> Optional[T]:
        """Fetch entity from database"""

    @abstractmethod
    def _serialize(self, entity: T) -> Dict:
        """Convert entity to dict for caching"""

    # ========================================================================
    # CONCRETE METHODS
    # ========================================================================

    def _make_key(self, entity_id: str) -> str:
        return f"{self._get_key_prefix()}:{entity_id}"

    def get(self, entity_id: str, db: Session) -> Optional[Dict]:
        """
        Cache-first read

        1. Try cache -> hit? return
        2. Miss -> query DB
        3. Store for next time
        """
        if not self.enabled:
            entity = self._fetch_from_db(entity_id, db)
            return self._serialize(entity) if entity else None

        cache_key = self._make_key(entity_id)

        try:
            cached_data = self.redis.get(cache_key)
        except redis.RedisError as e:
            self.errors += 1
            logger.warning(f"Cache read failed for {cache_key}: {e}")
            cached_data = None

        if cached_data:
            self.hits += 1
            logger.debug(f"Cache hit {cache_key} (hit rate: {self.get_hit_rate():.1%})")
            return json.loads(cached_data)

        self.misses += 1
        logger.debug(f"Cache miss {cache_key}")

        entity = self._fetch_from_db(entity_id, db)
        if not entity:
            return None

        entity_data = self._serialize(entity)
        self._store(cache_key, entity_data)
        return entity_data

    def get_many(self, entity_ids: List[str], db: Session) -> Dict[str, Dict]:
        """
        Batch read (MGET), used by listing pages

        Returns:
            Dict mapping entity_id -> entity_data
        """
        if not entity_ids:
            return {}

        if not self.enabled:
            return {
                entity_id: self._serialize(entity)
                for entity_id, entity in self._fetch_many_from_db(entity_ids, db).items()
            }

        cache_keys = [self._make_key(eid) for eid in entity_ids]
        try:
            cached_values = self.redis.mget(cache_keys)
        except redis.RedisError as e:
            self.errors += 1
            logger.warning(f"Cache batch read failed: {e}")
            cached_values = [None] * len(entity_ids)

        result = {}
        missing_ids = []

        for entity_id, cached_value in zip(entity_ids, cached_values):
            if cached_value:
                self.hits += 1
                result[entity_id] = json.loads(cached_value)
            else:
                self.misses += 1
                missing_ids.append(entity_id)

        if missing_ids:
            for entity_id, entity in self._fetch_many_from_db(missing_ids, db).items():
                entity_data = self._serialize(entity)
                self._store(self._make_key(entity_id), entity_data)
                result[entity_id] = entity_data

        logger.debug(f"Batch {len(entity_ids) - len(missing_ids)}/{len(entity_ids)} from cache")
        return result

    def _fetch_many_from_db(self, entity_ids: List[str], db: Session) -> Dict[str, T]:
        """Default: one query per id. Override with an IN query."""
        result = {}
        for entity_id in entity_ids:
            entity = self._fetch_from_db(entity_id, db)
            if entity:
                result[entity_id] = entity
        return result

    def _store(self, cache_key: str, entity_data: Dict) -> None:
        try:
            self.redis.setex(cache_key, self.ttl, json.dumps(entity_data))
        except redis.RedisError as e:
            self.errors += 1
            logger.warning(f"Cache write failed for {cache_key}: {e}")

    def set(self, entity_id: str, entity: T) -> None:
        """Manually set/update cache"""
        if not self.enabled:
            return
        self._store(self._make_key(entity_id), self._serialize(entity))

    def invalidate(self, entity_id: str) -> None:
        """Remove from cache"""
        if not self.enabled:
            return

        cache_key = self._make_key(entity_id)
        try:
            if self.redis.delete(cache_key):
                logger.debug(f"Invalidated {cache_key}")
        except redis.RedisError as e:
            self.errors += 1
            logger.warning(f"Cache invalidation failed for {cache_key}: {e}")

    def invalidate_many(self, entity_ids: List[str]) -> None:
        if not self.enabled or not entity_ids:
            return

        try:
            self.redis.delete(*[self._make_key(eid) for eid in entity_ids])
        except redis.RedisError as e:
            self.errors += 1
            logger.warning(f"Cache invalidation failed: {e}")

    def warm(self, entities: List[T]) -> int:
        """Pre-load entities into cache"""
        if not self.enabled:
            return 0

        count = 0
        for entity in entities:
            self.set(self._get_entity_id(entity), entity)
            count += 1

        logger.info(f"Warmed {count} {self._get_key_prefix()} entries")
        return count

    def _get_entity_id(self, entity: T) -> str:
        return entity.id

    def get_hit_rate(self) -> float:
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total

    def get_stats(self) -> Dict:
        """Get cache statistics"""
        return {
            "cache_type": self._get_key_prefix(),
            "enabled": self.enabled,
            "hits": self.hits,
            "misses": self.misses,
            "errors": self.errors,
            "hit_rate": self.get_hit_rate(),
            "ttl_seconds": self.ttl,
        }
