"""
Unit tests for the rate limiting decorator.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest
from aiolimiter import AsyncLimiter

from llm_pipeline.decorators.rate_limit import RateLimitedModel
from llm_pipeline.llm.exceptions import RateLimitError
from llm_pipeline.models.llm_models import Usage
from llm_pipeline.models.messages import user


@pytest.mark.asyncio
async def test_calls_within_rate_pass_through(scripted_model):
    """Test that calls under the limit reach the inner model unchanged."""
    inner = scripted_model({"ping": ["pong", "pong again"]})
    model = RateLimitedModel(inner, AsyncLimiter(10, 1.0))

    first = await model.respond([user("ping")])
    second = await model.respond([user("ping")])

    assert [first.content, second.content] == ["pong", "pong again"]
    assert len(inner.calls) == 2


@pytest.mark.asyncio
async def test_calls_over_rate_wait_for_capacity(scripted_model):
    """Test that the call beyond the bucket size is delayed until capacity drips back."""
    inner = scripted_model({"ping": ["a", "b", "c"]})
    model = RateLimitedModel(inner, AsyncLimiter(2, 0.2))
    loop = asyncio.get_running_loop()

    start = loop.time()
    await asyncio.gather(*(model.respond([user("ping")]) for _ in range(3)))
    elapsed = loop.time() - start

    assert len(inner.calls) == 3
    assert elapsed >= 0.05


@pytest.mark.asyncio
async def test_waiting_call_is_cancellable(scripted_model):
    """Test that cancelling a call queued on the limiter never reaches the model."""
    inner = scripted_model({"ping": ["first", "second"]})
    model = RateLimitedModel(inner, AsyncLimiter(1, 60.0))

    await model.respond([user("ping")])
    waiter = asyncio.create_task(model.respond([user("ping")]))
    await asyncio.sleep(0.01)
    waiter.cancel()

    with pytest.raises(asyncio.CancelledError):
        await waiter
    assert len(inner.calls) == 1


@pytest.mark.asyncio
async def test_limiter_failure_raises_rate_limit_error(mock_model):
    """Test that a failing wait is wrapped and the inner model is not called."""
    limiter = AsyncMock()
    limiter.acquire.side_effect = ValueError("amount exceeds capacity")
    model = RateLimitedModel(mock_model, limiter)

    with pytest.raises(RateLimitError) as exc_info:
        await model.respond([user("ping")])

    assert str(exc_info.value) == "failed to wait for rate limiter: amount exceeds capacity"
    assert exc_info.value.usage == Usage()
    mock_model.respond.assert_not_awaited()


@pytest.mark.asyncio
async def test_inner_errors_propagate(failing_model):
    """Test that model failures pass through with their usage."""
    model = RateLimitedModel(failing_model(), AsyncLimiter(10, 1.0))

    with pytest.raises(Exception) as exc_info:
        await model.respond([user("ping")])

    assert not isinstance(exc_info.value, RateLimitError)
    assert exc_info.value.usage == Usage(failed_calls=1)
