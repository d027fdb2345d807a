"""
Unit tests for Redis client and connection pooling.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from llm_pipeline.caches.redis_client import RedisClient
from llm_pipeline.config import Settings


@pytest.fixture
def mock_settings():
    """Mock settings for testing."""
    settings = MagicMock(spec=Settings)
    settings.REDIS_URL = "redis://localhost:6379/0"
    settings.REDIS_MAX_CONNECTIONS = 50
    return settings


@pytest.fixture(autouse=True)
def reset_pools():
    """Reset connection pool before each test."""
    RedisClient._async_pool = None
    yield
    RedisClient._async_pool = None


def test_get_async_client_creates_pool_once(mock_settings):
    """Test that async client creates connection pool on first call only."""
    with patch("llm_pipeline.caches.redis_client.AsyncConnectionPool") as mock_pool:
        mock_pool.from_url.return_value = MagicMock()

        RedisClient.get_async_client(mock_settings)
        RedisClient.get_async_client(mock_settings)

        mock_pool.from_url.assert_called_once_with(
            mock_settings.REDIS_URL,
            max_connections=mock_settings.REDIS_MAX_CONNECTIONS,
            decode_responses=False,
            socket_timeout=5,
            socket_connect_timeout=5,
            retry_on_timeout=True,
        )


@pytest.mark.asyncio
async def test_close_async_pool():
    """Test that closing disconnects and forgets the pool."""
    pool = MagicMock()
    pool.disconnect = AsyncMock()
    RedisClient._async_pool = pool

    await RedisClient.close_async_pool()

    pool.disconnect.assert_awaited_once()
    assert RedisClient._async_pool is None


@pytest.mark.asyncio
async def test_close_without_pool_is_noop():
    """Test that closing twice is safe."""
    await RedisClient.close_async_pool()

    assert RedisClient._async_pool is None
