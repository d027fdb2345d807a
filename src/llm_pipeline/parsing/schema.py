"""
JSON Schema validation of parsed outputs.

Runs after parsing: a typed value that parsed fine can still violate
constraints the type does not express (ranges, enums, patterns).
"""

import dataclasses
from typing import Any

import structlog
from jsonschema import Draft7Validator
from pydantic import BaseModel

from llm_pipeline.parsing.exceptions import SchemaViolationError

logger = structlog.get_logger(__name__)


def _as_json_data(output: Any) -> Any:
    if isinstance(output, BaseModel):
        return output.model_dump(mode="json")
    if dataclasses.is_dataclass(output) and not isinstance(output, type):
        return dataclasses.asdict(output)
    return output


class JSONSchemaValidator:
    """
    Validator checking outputs against a Draft 7 JSON Schema.

    Raises SchemaViolationError (recoverable) on violations.
    """

    def __init__(self, schema: dict):
        """
        Args:
            schema: JSON Schema document. An Ollama-style wrapper
                ({"name": ..., "schema": {...}}) is unwrapped.
        """
        if "schema" in schema and isinstance(schema["schema"], dict):
            schema = schema["schema"]
        Draft7Validator.check_schema(schema)
        self.schema = schema
        self._validator = Draft7Validator(schema)

    def validate(self, input: Any, output: Any) -> None:
        """
        Validate output against the schema. input is not inspected.

        Raises:
            SchemaViolationError: If output does not conform
        """
        errors = list(self._validator.iter_errors(_as_json_data(output)))
        if not errors:
            return

        error_messages = []
        for error in errors[:10]:  # Limit to first 10 errors
            path = ".".join(str(p) for p in error.path) if error.path else "root"
            error_messages.append(f"{path}: {error.message}")

        logger.debug("Output violates JSON Schema", error_count=len(errors))
        raise SchemaViolationError(
            f"JSON Schema validation failed with {len(errors)} error(s): "
            + "; ".join(error_messages),
            validation_errors=error_messages,
        )
