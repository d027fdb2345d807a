"""
JSON object parser.

Extracts the JSON object embedded in a reply (models like to wrap answers in
prose or code fences) and validates it into a typed value with pydantic.
"""

import dataclasses
import re
from typing import Any, Generic, TypeVar, get_args, get_origin

import structlog
from pydantic import BaseModel, TypeAdapter, ValidationError
from typing_extensions import is_typeddict

from llm_pipeline.parsing.exceptions import InvalidResponseError

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# Greedy: first "{" through last "}", across newlines
_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


def _is_object_type(target_type: Any) -> bool:
    if isinstance(target_type, type) and issubclass(target_type, BaseModel):
        return True
    if isinstance(target_type, type) and dataclasses.is_dataclass(target_type):
        return True
    if is_typeddict(target_type):
        return True
    if target_type is dict:
        return True
    if get_origin(target_type) is dict:
        args = get_args(target_type)
        return not args or args[0] is str
    return False


def format_validation_errors(error: ValidationError, limit: int = 10) -> list[str]:
    """Render pydantic errors as "path: message" lines."""
    messages = []
    for item in error.errors()[:limit]:
        path = ".".join(str(p) for p in item["loc"]) if item["loc"] else "root"
        messages.append(f"{path}: {item['msg']}")
    return messages


class JsonParser(Generic[T]):
    """
    Parser producing a pydantic model, dataclass, TypedDict or str-keyed dict.

    Only JSON objects are supported at the top level; constructing a parser
    for any other type (list, int, ...) raises TypeError immediately.
    """

    def __init__(self, target_type: type[T]):
        if not _is_object_type(target_type):
            raise TypeError(
                f"JsonParser target must be a pydantic model, dataclass, TypedDict "
                f"or dict with str keys, got {target_type!r}"
            )
        self.target_type = target_type
        self._adapter = TypeAdapter(target_type)

    def parse(self, text: str) -> T:
        """
        Parse the JSON object contained in text.

        Raises:
            InvalidResponseError: No object found, malformed JSON, or the
                object does not match the target type
        """
        match = _JSON_OBJECT.search(text)
        if match is None:
            raise InvalidResponseError(
                "response did not contain a json object",
                details={"content_snippet": text[:500]},
            )

        try:
            return self._adapter.validate_json(match.group(0))
        except ValidationError as e:
            errors = format_validation_errors(e)
            logger.debug("Reply did not match target type", errors=errors)
            raise InvalidResponseError(
                "llm returned an invalid json object: " + "; ".join(errors),
                details={"validation_errors": errors},
            ) from e
