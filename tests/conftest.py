"""Pytest configuration and fixtures"""
import os
import pytest
from unittest.mock import AsyncMock, Mock

# Set test environment variables
os.environ.setdefault("UPSTASH_REDIS_REST_URL", "https://test.upstash.io")
os.environ.setdefault("UPSTASH_REDIS_REST_TOKEN", "test_token")
os.environ.setdefault("CART_API_URL", "http://cart.test")

from core.cart import CartApiClient, CartRecordStore, CartStateContainer, MemoryStorage


class FakeRedis:
    """Dict-backed stand-in for the async Upstash client."""

    def __init__(self):
        self.data = {}

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value, ex=None):
        self.data[key] = value
        return True

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                removed += 1
        return removed


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def record_store(fake_redis):
    return CartRecordStore(redis=fake_redis)


@pytest.fixture
def storage():
    """Empty local storage"""
    return MemoryStorage()


@pytest.fixture
def mock_api_client():
    """Backend client whose server cart starts empty"""
    client = Mock(spec=CartApiClient)
    client.fetch_cart = AsyncMock(return_value={"items": []})
    client.push_cart = AsyncMock(return_value=None)
    client.aclose = AsyncMock()
    return client


@pytest.fixture
def container(storage, mock_api_client):
    return CartStateContainer(storage=storage, api_client=mock_api_client)


@pytest.fixture
def sample_product():
    """Sample product data"""
    return {
        "id": "product-123",
        "name": "Ceramic Mug",
        "price": 12.5,
        "image": "https://cdn.example.com/mug.png",
    }


@pytest.fixture
def other_product():
    return {
        "_id": "product-456",
        "name": "Tea Towel",
        "price": "7.25",
        "image": "https://cdn.example.com/towel.png",
    }
