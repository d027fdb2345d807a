"""Decorator reporting every call to a ModelLogger."""

import time
from collections.abc import Sequence

import structlog

from llm_pipeline.llm.base_model import Model, ModelDecorator
from llm_pipeline.llm.exceptions import usage_of
from llm_pipeline.loggers.base import ModelCallRecord, ModelLogger
from llm_pipeline.models.llm_models import ModelResponse
from llm_pipeline.models.messages import Message


logger = structlog.get_logger(__name__)


class LoggingModel(ModelDecorator):
    """
    Times each call and hands a ModelCallRecord to the model logger.

    A failing model logger never changes the outcome of the call: its error
    is logged and the model's response (or error) is passed through as is.
    """

    def __init__(self, model: Model, model_logger: ModelLogger):
        super().__init__(model)
        self.model_logger = model_logger

    async def respond(self, messages: Sequence[Message]) -> ModelResponse:
        start_time = time.perf_counter()
        try:
            response = await self.model.respond(messages)
        except Exception as e:
            self._log(
                ModelCallRecord(
                    messages=tuple(messages),
                    usage=usage_of(e),
                    duration_seconds=time.perf_counter() - start_time,
                    error=e,
                )
            )
            raise

        self._log(
            ModelCallRecord(
                messages=tuple(messages),
                auxiliary_messages=response.auxiliary_messages,
                final_message=response.primary_message,
                usage=response.usage,
                duration_seconds=time.perf_counter() - start_time,
            )
        )
        return response

    def _log(self, record: ModelCallRecord) -> None:
        try:
            self.model_logger.log_call(record)
        except Exception as e:
            logger.error(
                "Model logger failed",
                logger_class=type(self.model_logger).__name__,
                error=str(e),
            )
