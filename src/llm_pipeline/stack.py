"""
Default model stack built from settings.

Provides the resources an application usually wants exactly one of (the
composed model, the response cache, the usage counter) and the factory
functions that wire decorators in the recommended order.

Stack, outer to inner:

    LoggingModel
      UsageCountingModel        (when a counter is given)
        CachedModel             (when CACHE_BACKEND != "none")
          RetryModel
            FallbackChain       (when FALLBACK_MODELS is set)
              RateLimitedModel  (when RATE_LIMIT_MAX_CALLS is set, shared limiter)
                TimeoutModel
                  ConcurrencyLimiter   (one semaphore shared by every candidate)
                    RoleRemapper
                      OpenAIModel / OllamaModel
"""

import asyncio
from typing import Optional

import httpx
import structlog
from aiolimiter import AsyncLimiter
from prometheus_client import start_http_server

from llm_pipeline.caches.base import ModelResponseCache
from llm_pipeline.caches.file import FileCache
from llm_pipeline.caches.memory import InMemoryCache
from llm_pipeline.caches.redis_cache import RedisCache
from llm_pipeline.caches.redis_client import RedisClient
from llm_pipeline.caches.sql import SQLCache
from llm_pipeline.config import Settings
from llm_pipeline.decorators.cached import CacheConfig, CachedModel
from llm_pipeline.decorators.call_logging import LoggingModel
from llm_pipeline.decorators.concurrency import ConcurrencyLimiter
from llm_pipeline.decorators.fallback import FallbackChain
from llm_pipeline.decorators.rate_limit import RateLimitedModel
from llm_pipeline.decorators.retry import RetryConfig, RetryModel
from llm_pipeline.decorators.role_remap import RoleRemapper
from llm_pipeline.decorators.timeout import TimeoutModel
from llm_pipeline.decorators.usage_counting import UsageCounter, UsageCountingModel
from llm_pipeline.llm.base_model import Model
from llm_pipeline.llm.ollama_model import OllamaConfig, OllamaModel
from llm_pipeline.llm.openai_model import OpenAIConfig, OpenAIModel
from llm_pipeline.loggers.base import ModelLogger
from llm_pipeline.loggers.structlog_logger import StructlogModelLogger
from llm_pipeline.logging_config import configure_logging
from llm_pipeline.pipeline.feedback import FeedbackPipelineConfig


logger = structlog.get_logger(__name__)


def build_provider(
    settings: Settings,
    model_name: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Model:
    """
    Create the adapter for one model name on the configured provider.

    Reasoning messages are remapped for every provider, since none of the
    supported APIs has a native reasoning role.

    Args:
        settings: Application settings
        model_name: Backend model name
        transport: Custom httpx transport (tests)

    Raises:
        ValueError: PROVIDER=openai without OPENAI_API_KEY
    """
    if settings.PROVIDER == "ollama":
        adapter: Model = OllamaModel(
            model_name,
            OllamaConfig(
                base_url=settings.OLLAMA_BASE_URL,
                timeout=settings.MODEL_TIMEOUT_SECONDS,
                transport=transport,
            ),
        )
    else:
        if not settings.OPENAI_API_KEY:
            raise ValueError("OPENAI_API_KEY must be set when PROVIDER is 'openai'")
        adapter = OpenAIModel(
            model_name,
            settings.OPENAI_API_KEY,
            OpenAIConfig(
                url=settings.OPENAI_BASE_URL,
                timeout=settings.MODEL_TIMEOUT_SECONDS,
                transport=transport,
            ),
        )
    return RoleRemapper(adapter)


def build_cache(settings: Settings) -> Optional[ModelResponseCache]:
    """
    Create the response cache selected by CACHE_BACKEND.

    Returns:
        Cache instance, or None when caching is disabled
    """
    backend = settings.CACHE_BACKEND
    if backend == "none":
        return None
    if backend == "memory":
        cache: ModelResponseCache = InMemoryCache()
    elif backend == "file":
        cache = FileCache(settings.CACHE_FILE_PATH)
    elif backend == "sql":
        cache = SQLCache(settings.CACHE_SQL_PATH)
    elif backend == "redis":
        cache = RedisCache(
            RedisClient.get_async_client(settings),
            ttl_seconds=settings.CACHE_TTL_SECONDS,
        )
    else:
        raise ValueError(f"unknown cache backend: {backend}")
    logger.info("Response cache enabled", backend=backend)
    return cache


def build_model(
    settings: Settings,
    counter: Optional[UsageCounter] = None,
    model_logger: Optional[ModelLogger] = None,
    cache: Optional[ModelResponseCache] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Model:
    """
    Compose the default model stack.

    Args:
        settings: Application settings
        counter: Usage counter to report every call into
        model_logger: Sink for per-call records (default: structlog)
        cache: Cache to use instead of the one selected by CACHE_BACKEND
        transport: Custom httpx transport for every adapter (tests)

    Returns:
        Fully decorated model
    """
    semaphore = asyncio.Semaphore(settings.MAX_CONCURRENT_CALLS)
    model_names = [settings.primary_model, *settings.FALLBACK_MODELS]

    candidates: list[Model] = [
        TimeoutModel(
            ConcurrencyLimiter(build_provider(settings, name, transport), semaphore),
            settings.MODEL_TIMEOUT_SECONDS,
        )
        for name in model_names
    ]
    if settings.RATE_LIMIT_MAX_CALLS:
        limiter = AsyncLimiter(settings.RATE_LIMIT_MAX_CALLS, settings.RATE_LIMIT_PERIOD_SECONDS)
        candidates = [RateLimitedModel(candidate, limiter) for candidate in candidates]
    model: Model = candidates[0] if len(candidates) == 1 else FallbackChain(candidates)

    model = RetryModel(
        model,
        RetryConfig(tries=settings.MAX_RETRIES, delay=settings.RETRY_DELAY_SECONDS),
    )

    if cache is None:
        cache = build_cache(settings)
    if cache is not None:
        salt = settings.CACHE_SALT or settings.primary_model
        model = CachedModel(model, cache, CacheConfig(salt=salt))

    if counter is not None:
        model = UsageCountingModel(model, counter)

    model = LoggingModel(model, model_logger or StructlogModelLogger())

    logger.info(
        "Model stack built",
        provider=settings.PROVIDER,
        models=model_names,
        max_retries=settings.MAX_RETRIES,
        timeout=settings.MODEL_TIMEOUT_SECONDS,
        max_concurrent_calls=settings.MAX_CONCURRENT_CALLS,
        rate_limit=settings.RATE_LIMIT_MAX_CALLS,
        cache_backend=settings.CACHE_BACKEND if cache is not None else "none",
    )
    return model


def feedback_pipeline_config(settings: Settings) -> FeedbackPipelineConfig:
    """Feedback pipeline options from PIPELINE_MAX_RETRIES and FEEDBACK_ROLE."""
    return FeedbackPipelineConfig(
        feedback_role=settings.FEEDBACK_ROLE,
        max_retries=settings.PIPELINE_MAX_RETRIES,
    )


def configure_observability(settings: Settings) -> None:
    """
    Configure structlog and, if enabled, expose Prometheus metrics.

    Call once at process startup, before building models.
    """
    configure_logging(settings.LOG_LEVEL, settings.ENVIRONMENT)
    if settings.PROMETHEUS_ENABLED and settings.METRICS_PORT:
        start_http_server(settings.METRICS_PORT)
        logger.info("Prometheus metrics endpoint started", port=settings.METRICS_PORT)
