"""Fixed system prompt encoder."""

from llm_pipeline.models.messages import Message, system, user


class FixedEncoder:
    """Encodes a string input as [system(system_prompt), user(input)]."""

    def __init__(self, system_prompt: str):
        self.system_prompt = system_prompt

    def encode(self, input: str) -> list[Message]:
        return [system(self.system_prompt), user(input)]
