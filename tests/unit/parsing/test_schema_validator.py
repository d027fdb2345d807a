"""
Unit tests for JSON Schema validation of parsed outputs.
"""

import pytest
from jsonschema.exceptions import SchemaError
from pydantic import BaseModel

from llm_pipeline.parsing.exceptions import InvalidResponseError, SchemaViolationError
from llm_pipeline.parsing.schema import JSONSchemaValidator


SCHEMA = {
    "type": "object",
    "properties": {
        "score": {"type": "integer", "minimum": 0, "maximum": 10},
        "label": {"enum": ["good", "bad"]},
    },
    "required": ["score", "label"],
}


class Rating(BaseModel):
    score: int
    label: str


def test_valid_output_passes():
    """Test that a conforming dict raises nothing."""
    JSONSchemaValidator(SCHEMA).validate(None, {"score": 3, "label": "good"})


def test_pydantic_output_is_dumped_first():
    """Test that pydantic outputs are validated as dicts."""
    validator = JSONSchemaValidator(SCHEMA)

    validator.validate(None, Rating(score=3, label="good"))
    with pytest.raises(SchemaViolationError):
        validator.validate(None, Rating(score=11, label="good"))


def test_violations_are_recoverable_and_listed():
    """Test error message and validation_errors list."""
    validator = JSONSchemaValidator(SCHEMA)

    with pytest.raises(SchemaViolationError) as exc_info:
        validator.validate(None, {"score": -1, "label": "meh"})

    err = exc_info.value
    assert isinstance(err, InvalidResponseError)
    assert str(err).startswith("JSON Schema validation failed with 2 error(s): ")
    assert len(err.validation_errors) == 2
    assert any(e.startswith("score: ") for e in err.validation_errors)


def test_wrapped_schema_is_unwrapped():
    """Test that a {"name", "schema"} wrapper is accepted."""
    validator = JSONSchemaValidator({"name": "rating", "schema": SCHEMA})

    assert validator.schema == SCHEMA


def test_invalid_schema_rejected():
    """Test that a malformed schema fails at construction."""
    with pytest.raises(SchemaError):
        JSONSchemaValidator({"type": "not-a-type"})
