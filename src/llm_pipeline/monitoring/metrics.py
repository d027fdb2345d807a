"""Custom Prometheus metrics for the LLM pipeline layer.

Metrics live in the default registry; the embedding application decides
whether and where to expose them (prometheus_client.start_http_server or an
existing /metrics endpoint). Alert rules should be configured for:
- model_calls_total (high failure rate)
- cache_write_failures_total (any increase means the cache is degraded)
- fallback_exhausted_total (every backend failed)
- pipeline_attempts_total (high invalid rate indicates prompt or model drift)
"""

from prometheus_client import Counter, Gauge, Histogram

# === Backend Call Metrics ===

model_calls_total = Counter(
    "model_calls_total",
    "Total backend calls by model and outcome",
    ["model", "outcome"],
)
"""
Backend calls counter.

Labels:
- model: Model name (e.g., gpt-4.1, qwen2.5:7b)
- outcome: success, failure

Alert thresholds:
- WARN: failure rate > 5% of calls
- CRITICAL: failure rate > 20% of calls
"""

model_tokens_total = Counter(
    "model_tokens_total",
    "Total tokens consumed by model and type",
    ["model", "token_type"],
)
"""
Token consumption counter.

Labels:
- model: Model name
- token_type: input, output

Used for cost estimation and capacity planning.
"""

model_latency_seconds = Histogram(
    "model_latency_seconds",
    "Backend call latency in seconds",
    ["model", "success"],
    buckets=[0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
)
"""
Backend latency histogram.

Labels:
- model: Model name
- success: true, false

Buckets optimized for LLM inference (0.5s to 120s).
"""

# === Cache Metrics ===

cache_lookups_total = Counter(
    "cache_lookups_total",
    "Total response cache lookups by result",
    ["result"],
)
"""
Cache lookups counter.

Labels:
- result: hit, miss, error
"""

cache_write_failures_total = Counter(
    "cache_write_failures_total",
    "Successful responses that could not be stored in the cache",
)

# === Resilience Metrics ===

retry_attempts_total = Counter(
    "retry_attempts_total",
    "Total attempts made by the Retry decorator by outcome",
    ["outcome"],
)
"""
Retry attempts counter.

Labels:
- outcome: success, failure, exhausted

Alert thresholds:
- WARN: failure rate > 10% of attempts
"""

fallback_exhausted_total = Counter(
    "fallback_exhausted_total",
    "Fallback chains in which every candidate model failed",
)

concurrency_in_flight = Gauge(
    "concurrency_in_flight",
    "Calls currently holding a concurrency-limit slot",
)

rate_limit_wait_seconds = Histogram(
    "rate_limit_wait_seconds",
    "Time calls spent waiting for a rate limiter slot",
    buckets=[0.01, 0.1, 0.5, 1.0, 5.0, 15.0, 60.0],
)

# === Pipeline Metrics ===

pipeline_attempts_total = Counter(
    "pipeline_attempts_total",
    "Total pipeline attempts by pipeline type and outcome",
    ["pipeline", "outcome"],
)
"""
Pipeline attempts counter.

Labels:
- pipeline: oneshot, feedback, model_fallback
- outcome: valid, invalid, error
"""
