"""In-process response cache."""

import threading
from collections.abc import Sequence
from typing import Optional

from llm_pipeline.caches.base import hash_messages
from llm_pipeline.models.llm_models import CacheEntry
from llm_pipeline.models.messages import Message


class InMemoryCache:
    """Dict-backed cache, safe to share between threads and tasks."""

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: dict[str, CacheEntry] = {}

    async def get_cached_response(
        self, salt: str, messages: Sequence[Message]
    ) -> Optional[CacheEntry]:
        key = hash_messages(salt, messages)
        with self._lock:
            return self._entries.get(key)

    async def set_cached_response(
        self,
        salt: str,
        messages: Sequence[Message],
        auxiliary_messages: Sequence[Message],
        primary_message: Message,
    ) -> None:
        key = hash_messages(salt, messages)
        entry = CacheEntry(
            auxiliary_messages=tuple(auxiliary_messages),
            primary_message=primary_message,
        )
        with self._lock:
            self._entries[key] = entry

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
