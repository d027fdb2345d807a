"""
Unit tests for the JSON-lines model logger and the call record format.
"""

import io
import json

from llm_pipeline.llm.exceptions import ModelAPIError
from llm_pipeline.loggers.base import ModelCallRecord
from llm_pipeline.loggers.json_logger import JsonModelLogger
from llm_pipeline.models.enums import Role
from llm_pipeline.models.llm_models import Usage
from llm_pipeline.models.messages import Message, assistant, user


def test_record_format():
    """Test the logged fields and the duration rendering."""
    record = ModelCallRecord(
        messages=(user("ping"),),
        auxiliary_messages=(Message(role=Role.REASONING, content="r"),),
        final_message=assistant("pong"),
        usage=Usage(input_tokens=3, output_tokens=1, successful_calls=1),
        duration_seconds=0.012345,
    )

    assert record.to_log_dict() == {
        "messages": [{"role": "user", "content": "ping", "num_images": 0}],
        "aux_responses": [{"role": "reasoning", "content": "r", "num_images": 0}],
        "final_response": {"role": "assistant", "content": "pong", "num_images": 0},
        "usage": {"input_tokens": 3, "output_tokens": 1},
        "duration": "0.012345s",
    }


def test_record_with_error_and_no_reply():
    """Test that failed calls carry the error text and an empty final response."""
    record = ModelCallRecord(messages=(user("ping"),), error=ModelAPIError("boom"))

    data = record.to_log_dict()

    assert data["error"] == "boom"
    assert data["final_response"] == {"role": "", "content": "", "num_images": 0}


def test_json_logger_writes_one_line_per_call():
    """Test that each call becomes one parseable JSON line."""
    stream = io.StringIO()
    model_logger = JsonModelLogger(stream)

    model_logger.log_call(ModelCallRecord(messages=(user("one"),), final_message=assistant("1")))
    model_logger.log_call(ModelCallRecord(messages=(user("two"),), final_message=assistant("2")))

    lines = stream.getvalue().splitlines()
    assert len(lines) == 2
    assert json.loads(lines[1])["final_response"]["content"] == "2"
