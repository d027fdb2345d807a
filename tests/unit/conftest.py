"""Unit test fixtures (mocks and stubs).

Provides mock objects for testing without external dependencies.
"""

import pytest
from unittest.mock import AsyncMock, Mock

from llm_pipeline.models.llm_models import ModelResponse, Usage
from llm_pipeline.models.messages import assistant


@pytest.fixture
def mock_async_redis():
    """Mock AsyncRedis client for unit tests (async)."""
    mock = AsyncMock()
    mock.set = AsyncMock(return_value=True)
    mock.setex = AsyncMock(return_value=True)
    mock.get = AsyncMock(return_value=None)
    mock.delete = AsyncMock(return_value=1)
    mock.exists = AsyncMock(return_value=False)
    mock.ttl = AsyncMock(return_value=-1)
    return mock


@pytest.fixture
def mock_model():
    """Mock Model whose respond() returns a fixed successful reply."""
    mock = AsyncMock()
    mock.respond = AsyncMock(
        return_value=ModelResponse(
            primary_message=assistant("mock reply"),
            usage=Usage(input_tokens=3, output_tokens=2, successful_calls=1),
        )
    )
    mock.close = AsyncMock()
    return mock


@pytest.fixture
def mock_model_logger():
    """Mock ModelLogger recording every log_call."""
    mock = Mock()
    mock.log_call = Mock(return_value=None)
    return mock
