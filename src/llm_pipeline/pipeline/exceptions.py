"""
Pipeline-level exceptions.

Every pipeline failure is a PipelineError carrying the usage spent and the
number of attempts made. The underlying error (model failure, encoder
failure, last invalid response) is attached as __cause__.
"""

from collections.abc import Sequence
from typing import Any

from llm_pipeline.models.llm_models import Usage
from llm_pipeline.models.messages import Message


class PipelineError(Exception):
    """
    Base exception for pipeline calls.

    Attributes:
        message: What step failed
        usage: Usage of every model call made by this pipeline call
        attempts: Model calls attempted before giving up
        details: Structured error data for logging
    """

    def __init__(
        self,
        message: str,
        usage: Usage | None = None,
        attempts: int = 0,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.usage = usage or Usage()
        self.attempts = attempts
        self.details = details or {}

    def __str__(self) -> str:
        cause = str(self.__cause__) if self.__cause__ is not None else ""
        if cause:
            return f"{self.message}: {cause}"
        return self.message


class EncodingError(PipelineError):
    """The encoder could not build the input messages."""


class FeedbackExhaustedError(PipelineError):
    """
    The model never produced a valid response within the feedback budget.

    Attributes:
        history: Full conversation, including every rejected reply and the
            feedback sent after it
    """

    def __init__(self, attempts: int, history: Sequence[Message], usage: Usage):
        super().__init__(
            f"model failed to produce a valid response after trying {attempts} times",
            usage=usage,
            attempts=attempts,
        )
        self.history = tuple(history)


class FallbackPipelineExhaustedError(PipelineError):
    """
    No candidate model produced a valid output.

    Attributes:
        errors: One error per candidate, in the order they were tried
    """

    def __init__(self, errors: list[BaseException], usage: Usage):
        super().__init__(
            f"all {len(errors)} models failed to produce valid outputs",
            usage=usage,
            attempts=len(errors),
        )
        self.errors = errors

    def __str__(self) -> str:
        lines = [self.message]
        lines.extend(f"model {i} failed: {err}" for i, err in enumerate(self.errors))
        return "\n".join(lines)
