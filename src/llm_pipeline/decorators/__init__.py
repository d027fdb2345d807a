"""
Model decorators.

Each decorator implements the Model contract by wrapping another model and
adding one behavior. Stack them outer to inner, for example:

    model = LoggingModel(
        RetryModel(TimeoutModel(OpenAIModel("gpt-4.1", key), 30.0), RetryConfig(tries=2)),
        StructlogModelLogger(),
    )
"""

from llm_pipeline.decorators.cached import CacheConfig, CachedModel
from llm_pipeline.decorators.call_logging import LoggingModel
from llm_pipeline.decorators.concurrency import ConcurrencyLimiter
from llm_pipeline.decorators.fallback import FallbackChain
from llm_pipeline.decorators.rate_limit import RateLimitedModel
from llm_pipeline.decorators.reasoning import (
    DEFAULT_REASONING_PROMPT,
    TwoStageReasoning,
    TwoStageReasoningConfig,
)
from llm_pipeline.decorators.retry import RetryConfig, RetryModel
from llm_pipeline.decorators.role_remap import (
    DEFAULT_REASONING_PREFIX,
    MessageMappingModel,
    RoleRemapConfig,
    RoleRemapper,
)
from llm_pipeline.decorators.timeout import TimeoutModel
from llm_pipeline.decorators.usage_counting import UsageCounter, UsageCountingModel

__all__ = [
    "CachedModel",
    "CacheConfig",
    "RetryModel",
    "RetryConfig",
    "TimeoutModel",
    "ConcurrencyLimiter",
    "RateLimitedModel",
    "FallbackChain",
    "TwoStageReasoning",
    "TwoStageReasoningConfig",
    "DEFAULT_REASONING_PROMPT",
    "MessageMappingModel",
    "RoleRemapper",
    "RoleRemapConfig",
    "DEFAULT_REASONING_PREFIX",
    "UsageCounter",
    "UsageCountingModel",
    "LoggingModel",
]
