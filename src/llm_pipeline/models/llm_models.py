"""
Usage accounting and model response models.

Usage forms a commutative monoid under add() with Usage() as identity. Every
decorator that makes or forwards a backend call folds the usage it observed into
the running total, including on failure.
"""

from pydantic import BaseModel, ConfigDict, Field

from llm_pipeline.models.messages import Message


class Usage(BaseModel):
    """Token and call accounting, additive across attempts and composed calls."""

    model_config = ConfigDict(frozen=True)

    input_tokens: int = Field(default=0, ge=0)
    output_tokens: int = Field(default=0, ge=0)
    successful_calls: int = Field(default=0, ge=0)
    failed_calls: int = Field(default=0, ge=0)

    def add(self, other: "Usage") -> "Usage":
        return Usage(
            input_tokens=self.input_tokens + other.input_tokens,
            output_tokens=self.output_tokens + other.output_tokens,
            successful_calls=self.successful_calls + other.successful_calls,
            failed_calls=self.failed_calls + other.failed_calls,
        )

    def __add__(self, other: "Usage") -> "Usage":
        if not isinstance(other, Usage):
            return NotImplemented
        return self.add(other)

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    @property
    def total_calls(self) -> int:
        return self.successful_calls + self.failed_calls


class CacheEntry(BaseModel):
    """Value stored by a response cache for one (salt, messages) key."""

    model_config = ConfigDict(frozen=True)

    auxiliary_messages: tuple[Message, ...] = ()
    primary_message: Message


class ModelResponse(BaseModel):
    """
    Result of one Model.respond call.

    primary_message is the reply; auxiliary_messages holds anything produced on
    the way (reasoning, tool calls). usage may be the sum of several backend
    calls when the response came through retrying or composing decorators.
    """

    model_config = ConfigDict(frozen=True)

    primary_message: Message | None = None
    auxiliary_messages: tuple[Message, ...] = ()
    usage: Usage = Field(default_factory=Usage)

    @property
    def content(self) -> str:
        """Text of the primary message ("" when there is none)."""
        if self.primary_message is None:
            return ""
        return self.primary_message.content

    def only_usage(self) -> "ModelResponse":
        """Zero-message projection used on error paths."""
        return ModelResponse(usage=self.usage)

    def including_usage(self, usage: Usage) -> "ModelResponse":
        """Copy with usage summed, so prior attempts' counts are not lost."""
        return self.model_copy(update={"usage": self.usage + usage})

    def with_auxiliary(self, *messages: Message) -> "ModelResponse":
        return self.model_copy(
            update={"auxiliary_messages": self.auxiliary_messages + tuple(messages)}
        )

    @classmethod
    def from_cache_entry(cls, entry: CacheEntry) -> "ModelResponse":
        """Cached responses are free: no backend call was made."""
        return cls(
            primary_message=entry.primary_message,
            auxiliary_messages=entry.auxiliary_messages,
            usage=Usage(),
        )
