"""Shared test fixtures and configuration for all tests.

This conftest.py provides common fixtures used across unit and integration tests:
settings with safe defaults and scripted in-process models that stand in for a
real backend.
"""

import asyncio
from collections.abc import Sequence
from typing import Optional

import pytest

from llm_pipeline.config import Settings
from llm_pipeline.llm.base_model import Model
from llm_pipeline.llm.exceptions import ModelAPIError
from llm_pipeline.models.enums import Role
from llm_pipeline.models.llm_models import ModelResponse, Usage
from llm_pipeline.models.messages import Message, system, user


class ScriptedModel(Model):
    """
    Fake model answering from a script keyed on the last message's content.

    Each key holds a queue of replies consumed in order. A request with no
    reply left raises ModelAPIError. Every call is recorded in .calls.
    """

    def __init__(
        self,
        responses: dict[str, list[str]],
        n_fails: int = 0,
        input_tokens: int = 10,
        output_tokens: int = 5,
    ):
        self.responses = {key: list(values) for key, values in responses.items()}
        self.n_fails = n_fails
        self.input_tokens = input_tokens
        self.output_tokens = output_tokens
        self.calls: list[list[Message]] = []
        self.closed = False

    async def respond(self, messages: Sequence[Message]) -> ModelResponse:
        self.calls.append(list(messages))
        if self.n_fails > 0:
            self.n_fails -= 1
            raise ModelAPIError("deliberate fail", usage=Usage(failed_calls=1))

        request = messages[-1].content if messages else ""
        replies = self.responses.get(request)
        if not replies:
            raise ModelAPIError(
                f"no responses left for request '{request}'", usage=Usage(failed_calls=1)
            )
        return ModelResponse(
            primary_message=Message(role=Role.ASSISTANT, content=replies.pop(0)),
            usage=Usage(
                input_tokens=self.input_tokens,
                output_tokens=self.output_tokens,
                successful_calls=1,
            ),
        )

    async def close(self) -> None:
        self.closed = True


class SlowModel(Model):
    """Fake model that sleeps before replying (cancellable)."""

    def __init__(self, delay: float, reply: str = "slow reply"):
        self.delay = delay
        self.reply = reply
        self.started = 0
        self.finished = 0

    async def respond(self, messages: Sequence[Message]) -> ModelResponse:
        self.started += 1
        await asyncio.sleep(self.delay)
        self.finished += 1
        return ModelResponse(
            primary_message=Message(role=Role.ASSISTANT, content=self.reply),
            usage=Usage(successful_calls=1),
        )


@pytest.fixture
def test_settings() -> Settings:
    """Test settings with safe defaults for local testing.

    Override specific settings in individual tests with model_copy:
        settings = test_settings.model_copy(update={"CACHE_BACKEND": "memory"})
    """
    return Settings(
        _env_file=None,
        # === Application ===
        APP_NAME="LLM Pipeline (Test)",
        APP_VERSION="0.1.0",
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",
        # === Provider ===
        PROVIDER="openai",
        FALLBACK_MODELS=[],
        OPENAI_API_KEY="test-key",
        OPENAI_BASE_URL="http://openai.test/v1/chat/completions",
        OPENAI_MODEL="gpt-test",
        OLLAMA_BASE_URL="http://localhost:11434",
        OLLAMA_MODEL="qwen2.5:7b",
        # === Resilience ===
        MODEL_TIMEOUT_SECONDS=5.0,
        MAX_RETRIES=1,
        RETRY_DELAY_SECONDS=0.0,  # No sleeping in tests
        MAX_CONCURRENT_CALLS=4,
        RATE_LIMIT_MAX_CALLS=None,
        # === Cache ===
        CACHE_BACKEND="none",
        CACHE_SALT="",
        # === Redis ===
        REDIS_URL="redis://localhost:6379/0",
        REDIS_MAX_CONNECTIONS=10,
        # === Pipelines ===
        PIPELINE_MAX_RETRIES=2,
        # === Monitoring ===
        PROMETHEUS_ENABLED=False,  # Never bind a metrics port in tests
    )


@pytest.fixture
def scripted_model():
    """Factory for ScriptedModel instances.

    Usage:
        def test_something(scripted_model):
            model = scripted_model({"ping": ["pong"]})
    """

    def _create(
        responses: Optional[dict[str, list[str]]] = None,
        n_fails: int = 0,
        input_tokens: int = 10,
        output_tokens: int = 5,
    ) -> ScriptedModel:
        return ScriptedModel(
            responses or {},
            n_fails=n_fails,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )

    return _create


@pytest.fixture
def failing_model(scripted_model):
    """Factory for a model that fails every call with ModelAPIError."""

    def _create(n_fails: int = 1_000_000) -> ScriptedModel:
        return scripted_model({}, n_fails=n_fails)

    return _create


@pytest.fixture
def slow_model():
    """Factory for SlowModel instances."""

    def _create(delay: float, reply: str = "slow reply") -> SlowModel:
        return SlowModel(delay, reply)

    return _create


@pytest.fixture
def make_messages():
    """Build a [system, user] conversation."""

    def _create(user_content: str, system_content: str = "You are a test model.") -> list[Message]:
        return [system(system_content), user(user_content)]

    return _create
