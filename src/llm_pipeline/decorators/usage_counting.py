"""Usage accumulation across many calls."""

import threading
from collections.abc import Sequence

from llm_pipeline.llm.base_model import Model, ModelDecorator
from llm_pipeline.llm.exceptions import usage_of
from llm_pipeline.models.llm_models import ModelResponse, Usage
from llm_pipeline.models.messages import Message


class UsageCounter:
    """Running usage total. Safe to share between threads and tasks."""

    def __init__(self):
        self._lock = threading.Lock()
        self._usage = Usage()

    def add(self, usage: Usage) -> None:
        with self._lock:
            self._usage = self._usage + usage

    def get(self) -> Usage:
        with self._lock:
            return self._usage

    def reset(self) -> Usage:
        """Zero the counter and return the total it held."""
        with self._lock:
            usage, self._usage = self._usage, Usage()
            return usage


class UsageCountingModel(ModelDecorator):
    """Reports the usage of every call, successful or not, into a counter."""

    def __init__(self, model: Model, counter: UsageCounter):
        super().__init__(model)
        self.counter = counter

    async def respond(self, messages: Sequence[Message]) -> ModelResponse:
        try:
            response = await self.model.respond(messages)
        except Exception as e:
            self.counter.add(usage_of(e))
            raise
        self.counter.add(response.usage)
        return response
