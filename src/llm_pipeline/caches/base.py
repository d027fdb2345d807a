"""
Response cache contract and key derivation.

A cache maps (salt, messages) to the auxiliary and primary messages of a
successful response. The key is a pure function of the message sequence
content, so identical conversations share an entry regardless of identity.
"""

import hashlib
from collections.abc import Sequence
from typing import Optional, Protocol

from pydantic import TypeAdapter

from llm_pipeline.models.llm_models import CacheEntry
from llm_pipeline.models.messages import Message


class ModelResponseCache(Protocol):
    """Backing store used by the CachedModel decorator."""

    async def get_cached_response(
        self, salt: str, messages: Sequence[Message]
    ) -> Optional[CacheEntry]:
        """Return the stored entry, or None on a miss. Raise on store failure."""
        ...

    async def set_cached_response(
        self,
        salt: str,
        messages: Sequence[Message],
        auxiliary_messages: Sequence[Message],
        primary_message: Message,
    ) -> None:
        """Store (or overwrite) the entry for these messages."""
        ...


def hash_messages(salt: str, messages: Sequence[Message]) -> str:
    """
    Derive the cache key for a conversation.

    SHA-256 (hex) of: salt, the literal "Messages", then for each message in
    order its role name, raw content and each image's base64 data URL.
    Changing this concatenation invalidates every stored entry.
    """
    parts = [salt, "Messages"]
    for message in messages:
        parts.append(message.role.value)
        parts.append(message.content)
        parts.extend(image.to_base64_encoded() for image in message.images)
    return hashlib.sha256("".join(parts).encode("utf-8")).hexdigest()


_MESSAGE_LIST = TypeAdapter(list[Message])


def serialize_entry(auxiliary_messages: Sequence[Message], primary_message: Message) -> bytes:
    """Stored form: JSON list of messages, auxiliary first, primary last."""
    return _MESSAGE_LIST.dump_json([*auxiliary_messages, primary_message])


def deserialize_entry(data: bytes | str) -> CacheEntry:
    """Inverse of serialize_entry. An empty list is a corrupt entry."""
    messages = _MESSAGE_LIST.validate_json(data)
    if not messages:
        raise ValueError("cached response contained no messages")
    return CacheEntry(
        auxiliary_messages=tuple(messages[:-1]),
        primary_message=messages[-1],
    )
