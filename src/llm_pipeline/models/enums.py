"""
Enumerations for LLM pipeline data models.
"""

from enum import Enum


class Role(str, Enum):
    """
    Role of a message in a conversation.

    Not 1:1 with any provider's roles: REASONING has no native equivalent on
    most backends and must be remapped (see RoleRemapper) before it reaches
    an adapter that does not understand it.

    The string values are the canonical role names used in cache keys and
    log records; changing them invalidates previously cached entries.
    """

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    REASONING = "reasoning"
    DEVELOPER = "developer"


class ReasoningEffort(str, Enum):
    """How hard a reasoning-capable backend should think."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    XHIGH = "xhigh"


class Verbosity(str, Enum):
    """Requested verbosity of the backend's reply."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
