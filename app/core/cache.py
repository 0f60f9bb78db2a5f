"""
Redis caching layer for graph read models.

This provides:
1. Optional Redis connection (the graph runs without it)
2. JSON get/set with TTL for users and graph snapshots
3. Event-driven cache invalidation
4. Pub/sub notifications so other workers can refresh
5. Hit/miss statistics

Every Redis failure is logged and swallowed: the database is the source of
truth and the cache is never required for a correct answer.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import redis.asyncio as redis

from app.config import settings

logger = logging.getLogger(__name__)

# Cache keys
ALL_USERS_KEY = "users:all"
GRAPH_DATA_KEY = "graph:data"
GRAPH_UPDATES_CHANNEL = "graph:updates"


def user_key(user_id: str) -> str:
    return f"user:{user_id}"


class CacheManager:
    """
    Redis cache manager.

    Features:
    - Automatic JSON serialization/deserialization
    - Prefixed keys
    - Pattern deletion for invalidation
    - Publish for cross-worker notifications
    """

    def __init__(self, redis_url: Optional[str] = None):
        """Initialize cache configuration; connect() opens the connection."""
        self.redis_url = redis_url if redis_url is not None else settings.redis_url
        self.redis_client = None
        self._connection_pool = None

        self.default_ttl = settings.redis_cache_ttl
        self.key_prefix = "social_graph:"

        # Performance tracking
        self.cache_stats = {"hits": 0, "misses": 0, "sets": 0, "deletes": 0}

    @property
    def is_connected(self) -> bool:
        return self.redis_client is not None

    async def connect(self):
        """Establish Redis connection if a URL is configured."""
        if not self.redis_url:
            logger.info("Redis not configured - running without cache")
            return

        try:
            self._connection_pool = redis.ConnectionPool.from_url(
                self.redis_url,
                max_connections=20,
                retry_on_timeout=True,
                decode_responses=False,  # We'll handle encoding ourselves
                socket_keepalive=True,
            )
            client = redis.Redis(connection_pool=self._connection_pool)

            # Test connection
            await client.ping()
            self.redis_client = client
            logger.info("Redis connection established successfully")

        except Exception as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise ConnectionError(f"Redis connection failed: {e}")

    async def disconnect(self):
        """Clean up Redis connections."""
        if self.redis_client:
            await self.redis_client.aclose()
            self.redis_client = None
        if self._connection_pool:
            await self._connection_pool.disconnect()
            self._connection_pool = None

    def _generate_key(self, key: str) -> str:
        """Prefix a key so several apps can share one Redis database."""
        return f"{self.key_prefix}{key}"

    def _serialize_value(self, value: Any) -> bytes:
        return json.dumps(value, default=str).encode("utf-8")

    def _deserialize_value(self, value: bytes) -> Any:
        try:
            return json.loads(value.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(f"Failed to deserialize cache value: {e}")
            return None

    async def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache.

        Returns:
            Cached value or None if not found
        """
        if not self.redis_client:
            return None

        try:
            value = await self.redis_client.get(self._generate_key(key))

            if value is not None:
                self.cache_stats["hits"] += 1
                return self._deserialize_value(value)
            else:
                self.cache_stats["misses"] += 1
                return None

        except Exception as e:
            logger.error(f"Cache get error for key {key}: {e}")
            self.cache_stats["misses"] += 1
            return None

    async def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """
        Set value in cache.

        Args:
            key: Cache key
            value: JSON-serialisable value
            ttl: Time to live in seconds (defaults to redis_cache_ttl)

        Returns:
            True if successfully set
        """
        if not self.redis_client:
            return False

        try:
            await self.redis_client.setex(
                self._generate_key(key), ttl or self.default_ttl, self._serialize_value(value)
            )
            self.cache_stats["sets"] += 1
            return True

        except Exception as e:
            logger.error(f"Cache set error for key {key}: {e}")
            return False

    async def delete(self, key: str) -> bool:
        """Delete one key; True if it existed."""
        if not self.redis_client:
            return False

        try:
            result = await self.redis_client.delete(self._generate_key(key))
            if result > 0:
                self.cache_stats["deletes"] += 1
            return result > 0

        except Exception as e:
            logger.error(f"Cache delete error for key {key}: {e}")
            return False

    async def delete_pattern(self, pattern: str) -> int:
        """
        Delete all keys matching a glob pattern such as "user:*".

        Returns:
            Number of keys deleted
        """
        if not self.redis_client:
            return 0

        try:
            keys = await self.redis_client.keys(self._generate_key(pattern))

            if keys:
                deleted = await self.redis_client.delete(*keys)
                self.cache_stats["deletes"] += deleted
                return deleted
            return 0

        except Exception as e:
            logger.error(f"Cache pattern delete error for pattern {pattern}: {e}")
            return 0

    async def publish(self, channel: str, message: Dict[str, Any]) -> int:
        """
        Publish a JSON message for other workers.

        Returns:
            Number of subscribers that received it (0 without Redis)
        """
        if not self.redis_client:
            return 0

        try:
            return await self.redis_client.publish(
                self._generate_key(channel), self._serialize_value(message)
            )
        except Exception as e:
            logger.error(f"Redis publish error on {channel}: {e}")
            return 0

    def get_stats(self) -> Dict[str, Any]:
        """Hit/miss counters and hit rate since startup."""
        total_operations = sum(self.cache_stats.values())
        lookups = self.cache_stats["hits"] + self.cache_stats["misses"]
        hit_rate = self.cache_stats["hits"] / lookups if lookups > 0 else 0

        return {
            **self.cache_stats,
            "total_operations": total_operations,
            "hit_rate": round(hit_rate, 4),
        }


# Global cache manager instance
cache_manager = CacheManager()


class CacheInvalidator:
    """
    Cache invalidation driven by graph mutation events.

    Any change to a user's hobbies or edges changes neighbor scores, so
    user-level events drop every cached user as well as the list and graph.
    """

    def __init__(self, cache_manager: CacheManager):
        self.cache = cache_manager

        self.invalidation_patterns = {
            "user_create": [ALL_USERS_KEY, GRAPH_DATA_KEY],
            "user_update": [ALL_USERS_KEY, GRAPH_DATA_KEY, "user:*"],
            "user_delete": [ALL_USERS_KEY, GRAPH_DATA_KEY, "user:{user_id}"],
            "friendship_change": [
                ALL_USERS_KEY,
                GRAPH_DATA_KEY,
                "user:{user_id_1}",
                "user:{user_id_2}",
            ],
            "history_replay": [ALL_USERS_KEY, GRAPH_DATA_KEY, "user:*"],
        }

    async def invalidate_for_event(self, event_type: str, **event_data):
        """
        Invalidate cache entries based on data change events.

        Args:
            event_type: Type of event (user_update, friendship_change, ...)
            **event_data: Event-specific data for key generation
        """
        if not self.cache.is_connected:
            return

        patterns = self.invalidation_patterns.get(event_type, [])

        invalidation_tasks = []
        for pattern in patterns:
            try:
                formatted_pattern = pattern.format(**event_data)

                if "*" in formatted_pattern:
                    invalidation_tasks.append(self._invalidate_pattern(formatted_pattern))
                else:
                    invalidation_tasks.append(self.cache.delete(formatted_pattern))

            except KeyError as e:
                logger.warning(f"Missing event data for pattern {pattern}: {e}")

        if invalidation_tasks:
            await asyncio.gather(*invalidation_tasks, return_exceptions=True)
            logger.info(f"Cache invalidation completed for event: {event_type}")

    async def _invalidate_pattern(self, pattern: str):
        """Invalidate all keys matching a pattern."""
        deleted_count = await self.cache.delete_pattern(pattern)
        if deleted_count > 0:
            logger.info(
                f"Invalidated {deleted_count} cache entries for pattern: {pattern}"
            )


async def init_cache():
    """Initialize cache connection."""
    await cache_manager.connect()
    logger.info("Cache system initialized successfully")


async def cleanup_cache():
    """Cleanup cache connections."""
    logger.info(f"Cache stats at shutdown: {cache_manager.get_stats()}")
    await cache_manager.disconnect()
    logger.info("Cache system cleaned up")
