"""
Custom exceptions for the model layer.

Every failure raised through the Model contract is a ModelError carrying the
usage accumulated up to the failure, so that accounting survives error paths:
retry and fallback decorators fold it into their running totals, usage
counters record it, and pipelines report it to the caller.

None of these are "invalid response" errors: decorators never reclassify a
model failure as recoverable. Only parsers and validators raise
InvalidResponseError (see llm_pipeline.parsing.exceptions).
"""

from typing import Any

from llm_pipeline.models.llm_models import ModelResponse, Usage


class ModelError(Exception):
    """
    Base exception for all model-call errors.

    Attributes:
        message: Human-readable error description (what step failed)
        details: Structured error data for logging
        usage: Usage accumulated before and during the failed call
    """

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        usage: Usage | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.usage = usage or Usage()

    def __str__(self) -> str:
        cause = str(self.__cause__) if self.__cause__ is not None else ""
        if cause:
            return f"{self.message}: {cause}"
        return self.message


class ModelConnectionError(ModelError):
    """
    Raised when the backend cannot be reached.

    Includes network errors, DNS failures and refused connections.
    """


class ModelTimeoutError(ModelConnectionError):
    """Raised when a call exceeds its deadline (Timeout decorator or transport)."""


class ModelAPIError(ModelError):
    """
    Raised when the backend answers with an error payload or status.

    Attributes:
        status_code: HTTP status (None for in-band errors)
        error_type: Provider error type, if reported
        code: Provider error code, if reported
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error_type: str | None = None,
        code: str | None = None,
        usage: Usage | None = None,
    ):
        details: dict[str, Any] = {}
        if status_code is not None:
            details["status_code"] = status_code
        if error_type:
            details["error_type"] = error_type
        if code:
            details["code"] = code
        super().__init__(message, details, usage)
        self.status_code = status_code
        self.error_type = error_type
        self.code = code


class ModelNotAvailableError(ModelAPIError):
    """Raised when the requested model does not exist on the backend."""


class UnsupportedMessageError(ModelError):
    """Raised when a message (role, image) cannot be expressed for a backend."""


class RetryExhaustedError(ModelError):
    """
    Raised by the Retry decorator when every attempt failed.

    The last attempt's error is attached as __cause__; usage is the sum of
    every attempt.
    """

    def __init__(self, attempts: int, usage: Usage):
        super().__init__(
            f"could not get model response after {attempts} attempts",
            details={"attempts": attempts},
            usage=usage,
        )
        self.attempts = attempts


class FallbackExhaustedError(ModelError):
    """
    Raised by the FallbackChain decorator when every candidate failed.

    Attributes:
        errors: One error per candidate, in the order they were tried
    """

    def __init__(self, errors: list[BaseException], usage: Usage):
        super().__init__(
            f"all {len(errors)} models in fallback chain failed",
            details={"candidates": len(errors)},
            usage=usage,
        )
        self.errors = errors

    def __str__(self) -> str:
        lines = [self.message]
        lines.extend(f"model {i} failed: {err}" for i, err in enumerate(self.errors))
        return "\n".join(lines)


class ReasoningError(ModelError):
    """Raised by TwoStageReasoning when either stage fails."""


class RateLimitError(ModelError):
    """Raised when waiting for a rate limiter slot fails."""


class CacheReadError(ModelError):
    """Raised when the cache backing store fails on lookup (not a miss)."""


class CacheWriteError(ModelError):
    """
    Raised when storing a successful response fails and the Cache decorator
    is configured to surface write errors.

    Attributes:
        response: The successful model response that could not be cached
    """

    def __init__(self, message: str, response: ModelResponse):
        super().__init__(message, usage=response.usage)
        self.response = response


def usage_of(error: BaseException) -> Usage:
    """Usage carried by an error raised through the Model contract."""
    usage = getattr(error, "usage", None)
    if isinstance(usage, Usage):
        return usage
    return Usage()
