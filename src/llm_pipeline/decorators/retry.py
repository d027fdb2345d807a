"""
Retry decorator.

Re-invokes the inner model after any failure, up to tries + 1 attempts in
total, with a fixed delay between attempts (never after the last one). Usage
from every attempt is folded into the result, successful or not.
"""

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

import structlog

from llm_pipeline.llm.base_model import Model, ModelDecorator
from llm_pipeline.llm.exceptions import RetryExhaustedError, usage_of
from llm_pipeline.models.llm_models import ModelResponse, Usage
from llm_pipeline.models.messages import Message
from llm_pipeline.monitoring.metrics import retry_attempts_total


logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RetryConfig:
    """
    Attributes:
        tries: Retries after the first attempt (0 still makes one attempt)
        delay: Seconds to sleep between attempts, no jitter
    """

    tries: int = 2
    delay: float = 0.0

    def __post_init__(self):
        if self.tries < 0:
            raise ValueError(f"tries must be >= 0, got {self.tries}")
        if self.delay < 0:
            raise ValueError(f"delay must be >= 0, got {self.delay}")


class RetryModel(ModelDecorator):
    """
    Model decorator that repeats the same call until it succeeds.

    Any failure is retried: classification of model errors is not this
    layer's concern. Cancellation is not caught and stops the loop, including
    during the delay.
    """

    def __init__(self, model: Model, config: Optional[RetryConfig] = None):
        super().__init__(model)
        self.config = config or RetryConfig()

    async def respond(self, messages: Sequence[Message]) -> ModelResponse:
        max_attempts = self.config.tries + 1
        usage = Usage()
        last_error: Optional[Exception] = None

        for attempt in range(1, max_attempts + 1):
            try:
                response = await self.model.respond(messages)
            except Exception as e:
                usage = usage + usage_of(e)
                last_error = e
                retry_attempts_total.labels(outcome="failure").inc()
                logger.warning(
                    "Model call failed",
                    attempt=attempt,
                    max_attempts=max_attempts,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                if attempt < max_attempts and self.config.delay > 0:
                    await asyncio.sleep(self.config.delay)
                continue

            retry_attempts_total.labels(outcome="success").inc()
            if attempt > 1:
                logger.info("Model call succeeded after retry", attempt=attempt)
            return response.including_usage(usage)

        retry_attempts_total.labels(outcome="exhausted").inc()
        raise RetryExhaustedError(max_attempts, usage) from last_error
