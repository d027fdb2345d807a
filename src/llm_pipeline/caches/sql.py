"""SQLite response cache.

One row per conversation hash in model_cache(hash, resp), where resp is the
JSON list of stored messages (auxiliary first, primary last). Blocking sqlite
calls run in a worker thread so the event loop is never stalled.
"""

import asyncio
import sqlite3
import threading
from collections.abc import Sequence
from pathlib import Path
from types import TracebackType
from typing import Optional

from llm_pipeline.caches.base import deserialize_entry, hash_messages, serialize_entry
from llm_pipeline.models.llm_models import CacheEntry
from llm_pipeline.models.messages import Message


class SQLCache:
    """SQLite-backed response cache.

    The connection is shared between worker threads and serialized by a lock.
    """

    def __init__(self, db_path: Path | str) -> None:
        """Open (or create) the database and the model_cache table.

        Args:
            db_path: Path to SQLite database file, or ":memory:"
        """
        self._db_path = str(db_path)
        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(self._db_path, check_same_thread=False)
        self._create_schema()

    def _create_schema(self) -> None:
        with self._lock:
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS model_cache (
                    hash TEXT PRIMARY KEY,
                    resp BLOB NOT NULL
                )
            """)
            self._conn.commit()

    def _select(self, key: str) -> Optional[bytes]:
        with self._lock:
            row = self._conn.execute(
                "SELECT resp FROM model_cache WHERE hash = ?", (key,)
            ).fetchone()
        return None if row is None else row[0]

    def _upsert(self, key: str, resp: bytes) -> None:
        with self._lock:
            self._conn.execute(
                """INSERT INTO model_cache (hash, resp) VALUES (?, ?)
                ON CONFLICT(hash) DO UPDATE SET resp = excluded.resp""",
                (key, resp),
            )
            self._conn.commit()

    async def get_cached_response(
        self, salt: str, messages: Sequence[Message]
    ) -> Optional[CacheEntry]:
        resp = await asyncio.to_thread(self._select, hash_messages(salt, messages))
        if resp is None:
            return None
        return deserialize_entry(resp)

    async def set_cached_response(
        self,
        salt: str,
        messages: Sequence[Message],
        auxiliary_messages: Sequence[Message],
        primary_message: Message,
    ) -> None:
        resp = serialize_entry(auxiliary_messages, primary_message)
        await asyncio.to_thread(self._upsert, hash_messages(salt, messages), resp)

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            self._conn.close()

    def __enter__(self) -> "SQLCache":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
