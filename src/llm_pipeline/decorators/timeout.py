"""Per-call deadline decorator."""

import asyncio
from collections.abc import Sequence

from llm_pipeline.llm.base_model import Model, ModelDecorator
from llm_pipeline.llm.exceptions import ModelTimeoutError
from llm_pipeline.models.llm_models import ModelResponse, Usage
from llm_pipeline.models.messages import Message


class TimeoutModel(ModelDecorator):
    """
    Cancels the inner call if it runs longer than timeout seconds.

    Deadlines compose: an enclosing asyncio.timeout that expires first wins
    and surfaces as that scope's own error. Only this decorator's deadline is
    converted into ModelTimeoutError. Token counts of the interrupted call are
    unknown, so the error reports one failed call and no tokens.
    """

    def __init__(self, model: Model, timeout: float):
        if timeout <= 0:
            raise ValueError(f"timeout must be positive, got {timeout}")
        super().__init__(model)
        self.timeout = timeout

    async def respond(self, messages: Sequence[Message]) -> ModelResponse:
        deadline = asyncio.timeout(self.timeout)
        try:
            async with deadline:
                return await self.model.respond(messages)
        except TimeoutError as e:
            if not deadline.expired():
                raise
            raise ModelTimeoutError(
                f"model call exceeded {self.timeout}s timeout",
                details={"timeout": self.timeout},
                usage=Usage(failed_calls=1),
            ) from e
