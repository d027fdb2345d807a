"""
Shared plumbing for adapters that talk to an HTTP inference server.

Holds the persistent httpx AsyncClient (created lazily, pooled, closed by
close() / async with) and the Prometheus bookkeeping every adapter performs
after a backend call.
"""

from typing import Optional

import httpx
import structlog

from llm_pipeline.llm.base_model import Model
from llm_pipeline.models.llm_models import Usage
from llm_pipeline.monitoring.metrics import (
    model_calls_total,
    model_latency_seconds,
    model_tokens_total,
)


logger = structlog.get_logger(__name__)


class HTTPModel(Model):
    """
    Base class for httpx-backed adapters.

    Adapters never retry internally: a failed round-trip is reported once,
    with Usage(failed_calls=1), and retrying is left to the Retry decorator.
    """

    def __init__(
        self,
        name: str,
        timeout: float = 120.0,
        connection_limits: Optional[httpx.Limits] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            name: Backend model name (e.g., gpt-4.1, qwen2.5:7b)
            timeout: Transport-level timeout in seconds
            connection_limits: httpx connection pool limits (default: 10 max connections)
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self.name = name
        self.timeout = timeout

        if connection_limits is None:
            connection_limits = httpx.Limits(
                max_keepalive_connections=5,
                max_connections=10,
                keepalive_expiry=30.0,
            )
        self._connection_limits = connection_limits
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

        logger.info(
            "Initialized model adapter",
            model_class=self.__class__.__name__,
            model=name,
            timeout=timeout,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                limits=self._connection_limits,
                transport=self._transport,
                follow_redirects=True,
            )
            logger.debug("Created new httpx AsyncClient", model=self.name)
        return self._client

    def _record_call(self, usage: Usage, latency_seconds: float, success: bool) -> None:
        """Track call, latency and token metrics for one backend round-trip."""
        model_calls_total.labels(
            model=self.name, outcome="success" if success else "failure"
        ).inc()
        model_latency_seconds.labels(
            model=self.name, success=str(success).lower()
        ).observe(latency_seconds)
        if usage.input_tokens:
            model_tokens_total.labels(model=self.name, token_type="input").inc(
                usage.input_tokens
            )
        if usage.output_tokens:
            model_tokens_total.labels(model=self.name, token_type="output").inc(
                usage.output_tokens
            )

    async def close(self) -> None:
        """Close the HTTP client connection."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("Closed model client connection", model=self.name)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name}, timeout={self.timeout}s)"
