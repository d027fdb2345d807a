"""
Model contract, provider adapters and model-layer exceptions.
"""

from llm_pipeline.llm.base_model import Model, ModelDecorator
from llm_pipeline.llm.exceptions import (
    CacheReadError,
    CacheWriteError,
    FallbackExhaustedError,
    ModelAPIError,
    ModelConnectionError,
    ModelError,
    ModelNotAvailableError,
    ModelTimeoutError,
    RateLimitError,
    ReasoningError,
    RetryExhaustedError,
    UnsupportedMessageError,
    usage_of,
)
from llm_pipeline.llm.ollama_model import OllamaConfig, OllamaModel
from llm_pipeline.llm.openai_model import OpenAIConfig, OpenAIModel, StreamCallbacks

__all__ = [
    "Model",
    "ModelDecorator",
    "OpenAIModel",
    "OpenAIConfig",
    "StreamCallbacks",
    "OllamaModel",
    "OllamaConfig",
    "ModelError",
    "ModelConnectionError",
    "ModelTimeoutError",
    "ModelAPIError",
    "ModelNotAvailableError",
    "UnsupportedMessageError",
    "RetryExhaustedError",
    "FallbackExhaustedError",
    "ReasoningError",
    "RateLimitError",
    "CacheReadError",
    "CacheWriteError",
    "usage_of",
]
