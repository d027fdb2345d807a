"""Monitoring and metrics instrumentation for the LLM pipeline layer.

Exports custom Prometheus metrics for operational monitoring and alerting.
"""

from llm_pipeline.monitoring.metrics import (
    cache_lookups_total,
    cache_write_failures_total,
    concurrency_in_flight,
    fallback_exhausted_total,
    model_calls_total,
    model_latency_seconds,
    model_tokens_total,
    pipeline_attempts_total,
    rate_limit_wait_seconds,
    retry_attempts_total,
)

__all__ = [
    "model_calls_total",
    "model_tokens_total",
    "model_latency_seconds",
    "cache_lookups_total",
    "cache_write_failures_total",
    "retry_attempts_total",
    "fallback_exhausted_total",
    "concurrency_in_flight",
    "rate_limit_wait_seconds",
    "pipeline_attempts_total",
]
