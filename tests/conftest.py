"""
Pytest configuration and fixtures for provision tracker tests.
"""

from unittest.mock import Mock

import pytest
import redis

import provision_tracker.config
from provision_tracker.tracker.manager import KeyValueTracker, MemoryTracker


class FakeRedisClient:
    """Dict-backed stand-in for the three redis commands the tracker uses."""

    def __init__(self) -> None:
        self.data: dict[str, bytes] = {}

    def get(self, key: str) -> bytes | None:
        return self.data.get(key)

    def set(self, key: str, value: object) -> bool:
        self.data[key] = str(value).encode()
        return True

    def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed


@pytest.fixture(autouse=True)
def reset_settings():
    """Drop the cached settings instance between tests."""
    provision_tracker.config._settings_instance = None
    yield
    provision_tracker.config._settings_instance = None


@pytest.fixture
def mock_redis_client() -> Mock:
    """Mock redis client for testing."""
    client = Mock(spec=redis.Redis)
    client.get.return_value = None
    client.set.return_value = True
    client.delete.return_value = 0
    return client


@pytest.fixture
def fake_redis_client() -> FakeRedisClient:
    """In-process fake of a redis server."""
    return FakeRedisClient()


@pytest.fixture(params=["memory", "redis"])
def tracker(request, fake_redis_client):
    """Each tracker backend, for behaviour shared by all of them."""
    if request.param == "memory":
        return MemoryTracker()
    return KeyValueTracker(fake_redis_client)
