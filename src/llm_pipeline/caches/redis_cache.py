"""
Redis-backed response cache.

Storage Strategy:
- Entries: String per conversation, key = "llm_pipeline:cache:{hash}"
- Value: JSON list of messages (auxiliary first, primary last)
- TTL: Optional, entries never expire when unset
"""

from collections.abc import Sequence
from typing import Optional

import structlog
from redis.asyncio import Redis as AsyncRedis

from llm_pipeline.caches.base import deserialize_entry, hash_messages, serialize_entry
from llm_pipeline.models.llm_models import CacheEntry
from llm_pipeline.models.messages import Message

logger = structlog.get_logger(__name__)


class RedisCache:
    """
    Response cache stored in Redis.

    Redis errors are not caught here: the CachedModel decorator turns read
    failures into CacheReadError and handles write failures per its config.
    """

    KEY_PREFIX = "llm_pipeline:cache:"

    def __init__(self, redis_client: AsyncRedis, ttl_seconds: Optional[int] = None):
        """
        Initialize cache.

        Args:
            redis_client: Async Redis client instance
            ttl_seconds: Entry lifetime (None keeps entries until evicted)
        """
        self.redis = redis_client
        self.ttl_seconds = ttl_seconds

    def _key(self, salt: str, messages: Sequence[Message]) -> str:
        return f"{self.KEY_PREFIX}{hash_messages(salt, messages)}"

    async def get_cached_response(
        self, salt: str, messages: Sequence[Message]
    ) -> Optional[CacheEntry]:
        key = self._key(salt, messages)
        value = await self.redis.get(key)
        if value is None:
            logger.debug("Cache entry not found", key=key)
            return None
        return deserialize_entry(value)

    async def set_cached_response(
        self,
        salt: str,
        messages: Sequence[Message],
        auxiliary_messages: Sequence[Message],
        primary_message: Message,
    ) -> None:
        key = self._key(salt, messages)
        value = serialize_entry(auxiliary_messages, primary_message)
        if self.ttl_seconds is None:
            await self.redis.set(key, value)
        else:
            await self.redis.setex(name=key, time=self.ttl_seconds, value=value)
        logger.debug("Stored cache entry", key=key, ttl=self.ttl_seconds)
