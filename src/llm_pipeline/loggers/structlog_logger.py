"""Model logger emitting structlog events."""

import structlog

from llm_pipeline.loggers.base import ModelCallRecord


class StructlogModelLogger:
    """
    Emits a "model_call" event per call: token counts, time taken and the
    error if any. Messages are included only when log_messages is set, since
    they can be large and may contain sensitive content.
    """

    def __init__(self, logger=None, log_messages: bool = False):
        self.logger = logger or structlog.get_logger(__name__)
        self.log_messages = log_messages

    def log_call(self, record: ModelCallRecord) -> None:
        fields = {
            "input_tokens": record.usage.input_tokens,
            "output_tokens": record.usage.output_tokens,
            "time_taken": record.duration_seconds,
        }
        if self.log_messages:
            fields["messages"] = [m.to_log_dict() for m in record.messages]
            if record.final_message is not None:
                fields["final_response"] = record.final_message.to_log_dict()
        if record.error is not None:
            self.logger.error("model_call", error=str(record.error), **fields)
        else:
            self.logger.info("model_call", **fields)
