"""Message rewriting decorators."""

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Optional

from llm_pipeline.llm.base_model import Model, ModelDecorator
from llm_pipeline.models.enums import Role
from llm_pipeline.models.llm_models import ModelResponse
from llm_pipeline.models.messages import Message


DEFAULT_REASONING_PREFIX = (
    "The following information outlines some reasoning about the conversation "
    "up to this point:\n\n"
)


class MessageMappingModel(ModelDecorator):
    """Applies a pure Message -> Message function to every input message."""

    def __init__(self, model: Model, mapping: Callable[[Message], Message]):
        super().__init__(model)
        self.mapping = mapping

    async def respond(self, messages: Sequence[Message]) -> ModelResponse:
        return await self.model.respond([self.mapping(m) for m in messages])


@dataclass(frozen=True)
class RoleRemapConfig:
    """
    Attributes:
        target_role: Role reasoning messages are rewritten to
        prefix: Text prepended to the reasoning content
    """

    target_role: Role = Role.SYSTEM
    prefix: str = DEFAULT_REASONING_PREFIX


class RoleRemapper(MessageMappingModel):
    """
    Rewrites reasoning messages into a role the backend understands.

    Other messages pass through untouched.
    """

    def __init__(self, model: Model, config: Optional[RoleRemapConfig] = None):
        self.config = config or RoleRemapConfig()
        super().__init__(model, self._remap)

    def _remap(self, message: Message) -> Message:
        if message.role != Role.REASONING:
            return message
        return message.model_copy(
            update={
                "role": self.config.target_role,
                "content": self.config.prefix + message.content,
            }
        )
