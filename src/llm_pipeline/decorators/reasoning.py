"""
Two-stage reasoning decorator.

Simulates a reasoning model with two ordinary ones: a reasoner is asked to
think about the conversation, its reply is relabelled as a reasoning message
and appended to the conversation, and an answerer produces the final reply.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

from llm_pipeline.llm.base_model import Model
from llm_pipeline.llm.exceptions import ReasoningError, usage_of
from llm_pipeline.models.enums import Role
from llm_pipeline.models.llm_models import ModelResponse
from llm_pipeline.models.messages import Message, system


DEFAULT_REASONING_PROMPT = """
- You are a specialised reasoning AI, tasked with reasoning about another AIs task.
- Your job is to provide prior reasoning another AI model, to assist it in answering its question accurately.
- You should look at the messages up to then end of the conversation, along with the following system prompt (for the other model), and reason.
	- Following system prompts will be designed for the other model - this system prompt will always be valid.
- You should think step-by-step, breaking your answer down into small chunks.
"""


@dataclass(frozen=True)
class TwoStageReasoningConfig:
    reasoning_prompt: str = DEFAULT_REASONING_PROMPT


class TwoStageReasoning(Model):
    """
    Model composed of a reasoner and an answerer.

    The final response carries the reasoning message among its auxiliary
    messages and the usage of both calls. A reasoner failure short-circuits
    (the answerer is never called); an answerer failure still reports the
    reasoner's usage.
    """

    def __init__(
        self,
        reasoner: Model,
        answerer: Model,
        config: Optional[TwoStageReasoningConfig] = None,
    ):
        self.reasoner = reasoner
        self.answerer = answerer
        self.config = config or TwoStageReasoningConfig()

    async def respond(self, messages: Sequence[Message]) -> ModelResponse:
        try:
            reasoning = await self.reasoner.respond(
                [system(self.config.reasoning_prompt), *messages]
            )
        except Exception as e:
            raise ReasoningError("failed to call reasoning model", usage=usage_of(e)) from e

        reasoning_message = Message(role=Role.REASONING, content=reasoning.content)
        if reasoning.primary_message is not None:
            reasoning_message = reasoning.primary_message.with_role(Role.REASONING)

        try:
            answer = await self.answerer.respond([*messages, reasoning_message])
        except Exception as e:
            raise ReasoningError(
                "failed to call final response model",
                usage=reasoning.usage + usage_of(e),
            ) from e

        return answer.including_usage(reasoning.usage).with_auxiliary(reasoning_message)

    async def close(self) -> None:
        await self.reasoner.close()
        await self.answerer.close()

    def __repr__(self) -> str:
        return f"TwoStageReasoning(reasoner={self.reasoner!r}, answerer={self.answerer!r})"
