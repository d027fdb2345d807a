"""
Model-fallback pipeline.

Each candidate model gets a fresh conversation. The next candidate is only
tried when the previous one produced an invalid response; a model or
encoder failure ends the call immediately.
"""

from collections.abc import Sequence
from typing import Generic, Optional, TypeVar

import structlog

from llm_pipeline.llm.base_model import Model
from llm_pipeline.llm.exceptions import usage_of
from llm_pipeline.models.llm_models import Usage
from llm_pipeline.monitoring.metrics import pipeline_attempts_total
from llm_pipeline.parsing.exceptions import FailureKind, classify_failure
from llm_pipeline.pipeline.base import (
    Encoder,
    Parser,
    Pipeline,
    Validator,
    encode_input,
    parse_reply,
)
from llm_pipeline.pipeline.exceptions import FallbackPipelineExhaustedError, PipelineError

logger = structlog.get_logger(__name__)

T = TypeVar("T")
U = TypeVar("U")


class ModelFallbackPipeline(Pipeline[T, U], Generic[T, U]):
    """
    Tries each model in order until one produces a valid output.

    Useful to escalate to a stronger model, or to a second instance of the
    same model that bypasses the cache, after an invalid reply.
    """

    def __init__(
        self,
        encoder: Encoder,
        parser: Parser,
        models: Sequence[Model],
        validator: Optional[Validator] = None,
    ):
        if not models:
            raise ValueError("model fallback pipeline requires at least one model")
        self.encoder = encoder
        self.parser = parser
        self.models = list(models)
        self.validator = validator

    async def call(self, input: T) -> tuple[U, Usage]:
        usage = Usage()
        errors: list[Exception] = []

        for index, model in enumerate(self.models):
            attempts = index + 1
            messages = encode_input(self.encoder, input)

            try:
                response = await model.respond(messages)
            except Exception as e:
                pipeline_attempts_total.labels(pipeline="model_fallback", outcome="error").inc()
                raise PipelineError(
                    "failed to get model response",
                    usage=usage + usage_of(e),
                    attempts=attempts,
                ) from e
            usage = usage + response.usage

            try:
                output = parse_reply(self.parser, self.validator, input, response.content)
            except Exception as e:
                if classify_failure(e) is FailureKind.FATAL:
                    pipeline_attempts_total.labels(pipeline="model_fallback", outcome="error").inc()
                    raise PipelineError(
                        "failed to parse model response", usage=usage, attempts=attempts
                    ) from e
                pipeline_attempts_total.labels(pipeline="model_fallback", outcome="invalid").inc()
                errors.append(e)
                logger.info(
                    "Invalid reply, trying next model",
                    index=index,
                    candidates=len(self.models),
                    error=str(e),
                )
                continue

            pipeline_attempts_total.labels(pipeline="model_fallback", outcome="valid").inc()
            return output, usage

        raise FallbackPipelineExhaustedError(errors, usage) from ExceptionGroup(
            "model fallback pipeline failures", errors
        )
