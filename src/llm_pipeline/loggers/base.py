"""
Model logger contract.

A ModelLogger receives one ModelCallRecord per model call made through the
LoggingModel decorator.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Optional, Protocol

from llm_pipeline.models.llm_models import Usage
from llm_pipeline.models.messages import Message


@dataclass(frozen=True)
class ModelCallRecord:
    """Everything observed about one model call."""

    messages: Sequence[Message]
    auxiliary_messages: Sequence[Message] = ()
    final_message: Optional[Message] = None
    usage: Usage = field(default_factory=Usage)
    duration_seconds: float = 0.0
    error: Optional[BaseException] = None

    def to_log_dict(self) -> dict:
        """Record in the JSON log format (messages rendered as role/content/num_images)."""
        record = {
            "messages": [m.to_log_dict() for m in self.messages],
            "aux_responses": [m.to_log_dict() for m in self.auxiliary_messages],
            "final_response": (
                self.final_message.to_log_dict()
                if self.final_message is not None
                else {"role": "", "content": "", "num_images": 0}
            ),
            "usage": {
                "input_tokens": self.usage.input_tokens,
                "output_tokens": self.usage.output_tokens,
            },
            "duration": f"{self.duration_seconds:.6f}s",
        }
        if self.error is not None:
            record["error"] = str(self.error)
        return record


class ModelLogger(Protocol):
    def log_call(self, record: ModelCallRecord) -> None:
        ...
