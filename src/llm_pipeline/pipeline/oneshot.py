"""Single-attempt pipeline."""

from typing import Generic, Optional, TypeVar

import structlog

from llm_pipeline.llm.base_model import Model
from llm_pipeline.llm.exceptions import usage_of
from llm_pipeline.models.llm_models import Usage
from llm_pipeline.monitoring.metrics import pipeline_attempts_total
from llm_pipeline.parsing.exceptions import is_invalid_response
from llm_pipeline.pipeline.base import (
    Encoder,
    Parser,
    Pipeline,
    Validator,
    encode_input,
    parse_reply,
)
from llm_pipeline.pipeline.exceptions import PipelineError

logger = structlog.get_logger(__name__)

T = TypeVar("T")
U = TypeVar("U")


class OneShotPipeline(Pipeline[T, U], Generic[T, U]):
    """
    Encode, call the model once, parse. No retries and no feedback: an
    invalid response is as final as any other error here.
    """

    def __init__(
        self,
        encoder: Encoder,
        parser: Parser,
        model: Model,
        validator: Optional[Validator] = None,
    ):
        self.encoder = encoder
        self.parser = parser
        self.model = model
        self.validator = validator

    async def call(self, input: T) -> tuple[U, Usage]:
        messages = encode_input(self.encoder, input)

        try:
            response = await self.model.respond(messages)
        except Exception as e:
            pipeline_attempts_total.labels(pipeline="oneshot", outcome="error").inc()
            raise PipelineError(
                "failed to get model response", usage=usage_of(e), attempts=1
            ) from e

        try:
            output = parse_reply(self.parser, self.validator, input, response.content)
        except Exception as e:
            outcome = "invalid" if is_invalid_response(e) else "error"
            pipeline_attempts_total.labels(pipeline="oneshot", outcome=outcome).inc()
            logger.info("One-shot reply rejected", outcome=outcome, error=str(e))
            raise PipelineError(
                "failed to parse model response", usage=response.usage, attempts=1
            ) from e

        pipeline_attempts_total.labels(pipeline="oneshot", outcome="valid").inc()
        return output, response.usage
