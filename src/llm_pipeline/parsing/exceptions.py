"""
Response classification for the pipeline layer.

Parsers and validators signal a reply the model could fix (malformed JSON,
schema violation, missing section) by raising InvalidResponseError, or by
chaining one as the __cause__ of whatever they raise. Pipelines answer such
failures with corrective feedback and try again. Every other exception is
fatal and ends the call.
"""

from enum import Enum
from typing import Any


class InvalidResponseError(Exception):
    """
    The model's reply could not be turned into a valid output.

    Recoverable: the feedback pipeline shows this error's text to the model
    and asks again.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """
        Initialize invalid response error.

        Args:
            message: Human-readable description, shown to the model as feedback
            details: Structured error data for logging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class SchemaViolationError(InvalidResponseError):
    """
    Parsed output does not conform to the expected JSON Schema.
    """

    def __init__(self, message: str, validation_errors: list[str] | None = None):
        """
        Initialize schema violation error.

        Args:
            message: Error description
            validation_errors: Formatted jsonschema errors ("path: message")
        """
        details = {}
        if validation_errors:
            details["validation_errors"] = validation_errors
        super().__init__(message, details)
        self.validation_errors = validation_errors or []


class FailureKind(str, Enum):
    RECOVERABLE = "recoverable"
    FATAL = "fatal"


def is_invalid_response(error: BaseException) -> bool:
    """
    True if error is, or explicitly wraps, an InvalidResponseError.

    Follows the __cause__ chain (raise ... from ...) and the members of
    exception groups. Implicit __context__ is not followed: an error raised
    while handling an invalid response is not itself recoverable.
    """
    seen: set[int] = set()
    pending: list[BaseException | None] = [error]
    while pending:
        current = pending.pop()
        if current is None or id(current) in seen:
            continue
        seen.add(id(current))
        if isinstance(current, InvalidResponseError):
            return True
        if isinstance(current, BaseExceptionGroup):
            pending.extend(current.exceptions)
        pending.append(current.__cause__)
    return False


def classify_failure(error: BaseException) -> FailureKind:
    if is_invalid_response(error):
        return FailureKind.RECOVERABLE
    return FailureKind.FATAL
