"""
Response cache backends for the CachedModel decorator.
"""

from llm_pipeline.caches.base import ModelResponseCache, hash_messages
from llm_pipeline.caches.file import FileCache
from llm_pipeline.caches.memory import InMemoryCache
from llm_pipeline.caches.redis_cache import RedisCache
from llm_pipeline.caches.redis_client import RedisClient
from llm_pipeline.caches.sql import SQLCache

__all__ = [
    "ModelResponseCache",
    "hash_messages",
    "InMemoryCache",
    "FileCache",
    "SQLCache",
    "RedisCache",
    "RedisClient",
]
