"""
Pydantic data models for the LLM pipeline layer.

Includes:
- Enums (Role, ReasoningEffort, Verbosity)
- Messages (Message, ImageAttachment)
- Accounting and responses (Usage, ModelResponse, CacheEntry)
"""

from llm_pipeline.models.enums import ReasoningEffort, Role, Verbosity
from llm_pipeline.models.llm_models import CacheEntry, ModelResponse, Usage
from llm_pipeline.models.messages import (
    ImageAttachment,
    Message,
    assistant,
    system,
    user,
)

__all__ = [
    "Role",
    "ReasoningEffort",
    "Verbosity",
    "Message",
    "ImageAttachment",
    "system",
    "user",
    "assistant",
    "Usage",
    "ModelResponse",
    "CacheEntry",
]
