"""
Reply parsing, output validation and feedback generation.
"""

from llm_pipeline.parsing.exceptions import (
    FailureKind,
    InvalidResponseError,
    SchemaViolationError,
    classify_failure,
    is_invalid_response,
)
from llm_pipeline.parsing.feedback import ErrorStringFeedback, TemplateFeedback
from llm_pipeline.parsing.json_parse import JsonParser
from llm_pipeline.parsing.raw import RawParser
from llm_pipeline.parsing.schema import JSONSchemaValidator
from llm_pipeline.parsing.substring import (
    SubstringParser,
    substring_after,
    substring_json_object,
)

__all__ = [
    "InvalidResponseError",
    "SchemaViolationError",
    "FailureKind",
    "is_invalid_response",
    "classify_failure",
    "RawParser",
    "JsonParser",
    "SubstringParser",
    "substring_after",
    "substring_json_object",
    "JSONSchemaValidator",
    "ErrorStringFeedback",
    "TemplateFeedback",
]
