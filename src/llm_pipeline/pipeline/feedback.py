"""
Parse-feedback retry pipeline.

The conversation only grows: each rejected reply is appended together with
a feedback message explaining what was wrong, and the model is asked again.
Only invalid responses are retried here; model failures are final at this
layer (wrap the model in RetryModel for transient backend errors).
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

import structlog

from llm_pipeline.llm.base_model import Model
from llm_pipeline.llm.exceptions import usage_of
from llm_pipeline.models.enums import Role
from llm_pipeline.models.llm_models import Usage
from llm_pipeline.models.messages import Message
from llm_pipeline.monitoring.metrics import pipeline_attempts_total
from llm_pipeline.parsing.exceptions import FailureKind, classify_failure
from llm_pipeline.pipeline.base import (
    Encoder,
    FeedbackGenerator,
    Parser,
    Pipeline,
    Validator,
    encode_input,
    parse_reply,
)
from llm_pipeline.pipeline.exceptions import FeedbackExhaustedError, PipelineError

logger = structlog.get_logger(__name__)

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class FeedbackPipelineConfig:
    """
    Attributes:
        feedback_role: Role of the injected feedback messages
        max_retries: Feedback rounds after the first attempt
    """

    feedback_role: Role = Role.USER
    max_retries: int = 2

    def __post_init__(self):
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {self.max_retries}")


class FeedbackPipeline(Pipeline[T, U], Generic[T, U]):
    """
    Pipeline that corrects invalid replies by talking back to the model.

    Makes at most max_retries + 1 model calls. If none yields a valid
    output, FeedbackExhaustedError carries the whole conversation and
    chains the last invalid-response error.
    """

    def __init__(
        self,
        encoder: Encoder,
        parser: Parser,
        feedback_generator: FeedbackGenerator,
        model: Model,
        validator: Optional[Validator] = None,
        config: Optional[FeedbackPipelineConfig] = None,
    ):
        self.encoder = encoder
        self.parser = parser
        self.feedback_generator = feedback_generator
        self.model = model
        self.validator = validator
        self.config = config or FeedbackPipelineConfig()

    async def call(self, input: T) -> tuple[U, Usage]:
        history = encode_input(self.encoder, input)
        max_attempts = self.config.max_retries + 1
        usage = Usage()
        last_error: Optional[Exception] = None

        for attempt in range(1, max_attempts + 1):
            try:
                response = await self.model.respond(history)
            except Exception as e:
                pipeline_attempts_total.labels(pipeline="feedback", outcome="error").inc()
                raise PipelineError(
                    "failed to get model response",
                    usage=usage + usage_of(e),
                    attempts=attempt,
                ) from e
            usage = usage + response.usage

            try:
                output = parse_reply(self.parser, self.validator, input, response.content)
            except Exception as e:
                if classify_failure(e) is FailureKind.FATAL:
                    pipeline_attempts_total.labels(pipeline="feedback", outcome="error").inc()
                    raise PipelineError(
                        "failed to parse model response", usage=usage, attempts=attempt
                    ) from e

                pipeline_attempts_total.labels(pipeline="feedback", outcome="invalid").inc()
                last_error = e
                reply = response.primary_message or Message(role=Role.ASSISTANT)
                feedback = self.feedback_generator.format_feedback(reply, e)
                history = [
                    *history,
                    reply,
                    Message(role=self.config.feedback_role, content=feedback),
                ]
                logger.info(
                    "Invalid reply, sending feedback",
                    attempt=attempt,
                    max_attempts=max_attempts,
                    error=str(e),
                )
                continue

            pipeline_attempts_total.labels(pipeline="feedback", outcome="valid").inc()
            return output, usage

        raise FeedbackExhaustedError(max_attempts, history, usage) from last_error
