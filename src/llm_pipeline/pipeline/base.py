"""
Pipeline contract and its collaborators.

A pipeline turns a typed input into a typed output through a model:

    encoder.encode(input) -> messages
    model.respond(messages) -> reply
    parser.parse(reply.content) -> output
    validator.validate(input, output)          (optional)

Parsers and validators raise InvalidResponseError (or chain one) for
replies the model could fix; feedback generators turn such errors into the
corrective message sent back to the model.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any, Generic, Optional, Protocol, TypeVar

from llm_pipeline.models.llm_models import Usage
from llm_pipeline.models.messages import Message
from llm_pipeline.pipeline.exceptions import EncodingError

T = TypeVar("T")
U = TypeVar("U")


class Encoder(Protocol):
    def encode(self, input: Any) -> Sequence[Message]:
        ...


class Parser(Protocol):
    def parse(self, text: str) -> Any:
        ...


class Validator(Protocol):
    def validate(self, input: Any, output: Any) -> None:
        ...


class FeedbackGenerator(Protocol):
    def format_feedback(self, response: Message, error: BaseException) -> str:
        ...


class Pipeline(ABC, Generic[T, U]):
    """Typed call through a model."""

    @abstractmethod
    async def call(self, input: T) -> tuple[U, Usage]:
        """
        Run the pipeline for one input.

        Returns:
            Tuple of (output, usage of every model call made)

        Raises:
            PipelineError: Any failure, with .usage set to what was spent
        """


def encode_input(encoder: Encoder, input: Any) -> list[Message]:
    """Run the encoder, wrapping any failure as EncodingError."""
    try:
        return list(encoder.encode(input))
    except Exception as e:
        raise EncodingError("failed to build input messages") from e


def parse_reply(
    parser: Parser,
    validator: Optional[Validator],
    input: Any,
    content: str,
) -> Any:
    """Parse and (optionally) validate a reply. Errors propagate unchanged."""
    output = parser.parse(content)
    if validator is not None:
        validator.validate(input, output)
    return output
