"""
Response caching decorator.

On a hit the stored response is returned with zero usage (no backend call
was made). On a miss the inner model is called and, only if it succeeds, the
result is stored. Failures are never cached.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

import structlog

from llm_pipeline.caches.base import ModelResponseCache
from llm_pipeline.llm.base_model import Model, ModelDecorator
from llm_pipeline.llm.exceptions import CacheReadError, CacheWriteError
from llm_pipeline.models.llm_models import ModelResponse
from llm_pipeline.models.messages import Message
from llm_pipeline.monitoring.metrics import cache_lookups_total, cache_write_failures_total


logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CacheConfig:
    """
    Attributes:
        salt: Distinguishes otherwise identical conversations sent to
            different underlying configurations (usually the model name)
        raise_on_write_error: Raise CacheWriteError instead of logging when
            a successful response cannot be stored
    """

    salt: str = ""
    raise_on_write_error: bool = False


class CachedModel(ModelDecorator):
    """
    Model decorator that serves repeated conversations from a cache.

    Write failures never discard a successful response. By default the
    response is returned and the failure is logged and counted in
    cache_write_failures_total. last_write_error keeps the most recent write
    failure until a later write succeeds. Set
    CacheConfig(raise_on_write_error=True) to raise CacheWriteError instead;
    the error carries the successful response.
    """

    def __init__(
        self,
        model: Model,
        cache: ModelResponseCache,
        config: Optional[CacheConfig] = None,
    ):
        super().__init__(model)
        self.cache = cache
        self.config = config or CacheConfig()
        self.last_write_error: Optional[Exception] = None

    async def respond(self, messages: Sequence[Message]) -> ModelResponse:
        try:
            entry = await self.cache.get_cached_response(self.config.salt, messages)
        except Exception as e:
            cache_lookups_total.labels(result="error").inc()
            raise CacheReadError("could not read from cache") from e

        if entry is not None:
            cache_lookups_total.labels(result="hit").inc()
            logger.debug("Cache hit", salt=self.config.salt, num_messages=len(messages))
            return ModelResponse.from_cache_entry(entry)

        cache_lookups_total.labels(result="miss").inc()
        response = await self.model.respond(messages)
        if response.primary_message is None:
            return response

        try:
            await self.cache.set_cached_response(
                self.config.salt,
                messages,
                response.auxiliary_messages,
                response.primary_message,
            )
        except Exception as e:
            self.last_write_error = e
            cache_write_failures_total.inc()
            if self.config.raise_on_write_error:
                raise CacheWriteError("could not write to cache", response) from e
            logger.error(
                "Failed to store response in cache",
                salt=self.config.salt,
                error=str(e),
                error_type=type(e).__name__,
            )
            return response

        self.last_write_error = None
        return response
