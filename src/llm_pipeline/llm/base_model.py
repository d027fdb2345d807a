"""
Abstract model contract.

Every backend adapter and every decorator implements the same single
operation, respond(messages) -> ModelResponse, so decorators can be stacked in
any order and pipelines never know whether they talk to a raw adapter or a
fully-wrapped stack.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

import structlog

from llm_pipeline.models.llm_models import ModelResponse
from llm_pipeline.models.messages import Message


logger = structlog.get_logger(__name__)


class Model(ABC):
    """
    Abstract base class for anything that answers a conversation.

    Responsibilities:
    - Send the conversation to a backend (adapters) or to an inner model
      (decorators)
    - Return a ModelResponse whose usage covers every backend call made
    - Raise a ModelError subclass carrying usage on failure

    Does NOT handle:
    - Turning inputs into messages (that's the Encoder's job)
    - Interpreting the reply (that's the Parser's job)

    Cancellation of the calling task must propagate: implementations never
    catch asyncio.CancelledError.
    """

    @abstractmethod
    async def respond(self, messages: Sequence[Message]) -> ModelResponse:
        """
        Answer the conversation.

        Args:
            messages: Ordered conversation history (not mutated)

        Returns:
            ModelResponse with the reply, auxiliary messages and usage

        Raises:
            ModelError: Any failure, with .usage set to what was spent
        """

    async def close(self) -> None:
        """
        Release connections held by this model.

        Default implementation does nothing. Adapters holding an HTTP client
        and decorators wrapping other models override this.
        """
        logger.debug("Closing model", model_class=self.__class__.__name__)

    async def __aenter__(self) -> "Model":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class ModelDecorator(Model):
    """
    Base class for models that wrap exactly one inner model.

    Holds the inner model as an explicit field and forwards close() to it.
    """

    def __init__(self, model: Model):
        self.model = model

    async def close(self) -> None:
        await self.model.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.model!r})"
