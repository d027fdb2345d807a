"""
In-memory cache persisted to a JSON file.

The whole document is loaded on creation (a missing file is an empty cache)
and rewritten after every set. Suitable for development and small offline
runs, not for many writers.
"""

import asyncio
import json
import threading
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

import structlog

from llm_pipeline.caches.base import deserialize_entry, hash_messages, serialize_entry
from llm_pipeline.models.llm_models import CacheEntry
from llm_pipeline.models.messages import Message


logger = structlog.get_logger(__name__)


class FileCache:
    """JSON-file-backed response cache."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._entries: dict[str, CacheEntry] = {}
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            logger.debug("Cache file not found, starting empty", path=str(self.path))
            return
        document = json.loads(self.path.read_text(encoding="utf-8"))
        self._entries = {
            key: deserialize_entry(json.dumps(messages))
            for key, messages in document.items()
        }
        logger.info("Loaded file cache", path=str(self.path), entries=len(self._entries))

    def _save(self) -> None:
        with self._lock:
            document = {
                key: json.loads(serialize_entry(entry.auxiliary_messages, entry.primary_message))
                for key, entry in self._entries.items()
            }
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(document), encoding="utf-8")

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
        with self._lock:
            self._entries[key] = CacheEntry(
                auxiliary_messages=tuple(auxiliary_messages),
                primary_message=primary_message,
            )
        await asyncio.to_thread(self._save)
