"""Encoder composition."""

from typing import Any

from llm_pipeline.models.messages import Message


class SequentialEncoder:
    """
    Concatenates the messages of several encoders run on the same input,
    e.g. a template encoder for the instructions followed by an encoder
    replaying an agent's history.
    """

    def __init__(self, *encoders):
        self.encoders = list(encoders)

    def encode(self, input: Any) -> list[Message]:
        messages: list[Message] = []
        for encoder in self.encoders:
            messages.extend(encoder.encode(input))
        return messages
