"""Token-bucket rate limiting decorator."""

import time
from collections.abc import Sequence

import structlog
from aiolimiter import AsyncLimiter

from llm_pipeline.llm.base_model import Model, ModelDecorator
from llm_pipeline.llm.exceptions import RateLimitError
from llm_pipeline.models.llm_models import ModelResponse
from llm_pipeline.models.messages import Message
from llm_pipeline.monitoring.metrics import rate_limit_wait_seconds


logger = structlog.get_logger(__name__)


class RateLimitedModel(ModelDecorator):
    """
    Waits for a limiter slot before every call into the inner model.

    The limiter is an aiolimiter.AsyncLimiter (max_rate calls per
    time_period seconds). Share one limiter between several decorators to
    put them under one provider quota. The wait is cancellable and counts
    against any enclosing deadline. A wait that fails raises RateLimitError
    with zero usage, since no backend call was made.
    """

    def __init__(self, model: Model, limiter: AsyncLimiter):
        super().__init__(model)
        self.limiter = limiter

    async def respond(self, messages: Sequence[Message]) -> ModelResponse:
        start_time = time.perf_counter()
        try:
            await self.limiter.acquire()
        except Exception as e:
            raise RateLimitError("failed to wait for rate limiter") from e

        waited = time.perf_counter() - start_time
        rate_limit_wait_seconds.observe(waited)
        if waited > 0.1:
            logger.debug("Rate limiter delayed model call", waited_ms=int(waited * 1000))
        return await self.model.respond(messages)
