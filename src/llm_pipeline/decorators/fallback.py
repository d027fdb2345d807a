"""
Fallback chain across distinct models.

Unlike RetryModel, each attempt goes to a different model (another
provider, a smaller model, a different region). The first success wins.
"""

from collections.abc import Sequence

import structlog

from llm_pipeline.llm.base_model import Model
from llm_pipeline.llm.exceptions import FallbackExhaustedError, usage_of
from llm_pipeline.models.llm_models import ModelResponse, Usage
from llm_pipeline.models.messages import Message
from llm_pipeline.monitoring.metrics import fallback_exhausted_total


logger = structlog.get_logger(__name__)


class FallbackChain(Model):
    """
    Tries each model in order and returns the first successful response.

    Usage spent on failed candidates is folded into the returned response.
    If every candidate fails, FallbackExhaustedError lists all of them and
    its __cause__ is an ExceptionGroup of the individual errors.
    """

    def __init__(self, models: Sequence[Model]):
        if not models:
            raise ValueError("fallback chain requires at least one model")
        self.models = list(models)

    async def respond(self, messages: Sequence[Message]) -> ModelResponse:
        usage = Usage()
        errors: list[Exception] = []

        for index, model in enumerate(self.models):
            try:
                response = await model.respond(messages)
            except Exception as e:
                usage = usage + usage_of(e)
                errors.append(e)
                logger.warning(
                    "Fallback candidate failed",
                    index=index,
                    candidates=len(self.models),
                    model=repr(model),
                    error=str(e),
                )
                continue

            if errors:
                logger.info("Fallback candidate succeeded", index=index, failed_before=len(errors))
            return response.including_usage(usage)

        fallback_exhausted_total.inc()
        raise FallbackExhaustedError(errors, usage) from ExceptionGroup(
            "fallback chain failures", errors
        )

    async def close(self) -> None:
        for model in self.models:
            await model.close()

    def __repr__(self) -> str:
        return f"FallbackChain({self.models!r})"
