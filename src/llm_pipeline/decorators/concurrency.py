"""Bounded-concurrency decorator."""

import asyncio
from collections.abc import Sequence

from llm_pipeline.llm.base_model import Model, ModelDecorator
from llm_pipeline.models.llm_models import ModelResponse
from llm_pipeline.models.messages import Message
from llm_pipeline.monitoring.metrics import concurrency_in_flight


class ConcurrencyLimiter(ModelDecorator):
    """
    Allows at most N concurrent calls into the inner model.

    Pass the same asyncio.Semaphore to several limiters to share one budget
    between them. Waiters are not served in FIFO order, and a cancelled
    waiter leaves the queue without taking a slot.
    """

    def __init__(self, model: Model, limit: int | asyncio.Semaphore):
        super().__init__(model)
        if isinstance(limit, asyncio.Semaphore):
            self.semaphore = limit
        else:
            if limit < 1:
                raise ValueError(f"concurrency limit must be >= 1, got {limit}")
            self.semaphore = asyncio.Semaphore(limit)

    async def respond(self, messages: Sequence[Message]) -> ModelResponse:
        async with self.semaphore:
            concurrency_in_flight.inc()
            try:
                return await self.model.respond(messages)
            finally:
                concurrency_in_flight.dec()
