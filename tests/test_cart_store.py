"""
Tests for the Redis-backed cart record store
"""

import asyncio
import json

import pytest
from unittest.mock import AsyncMock, Mock

from core.cart import CartRecordStore, CartStoreUnavailable


@pytest.mark.asyncio
async def test_get_record_missing(record_store):
    assert await record_store.get_record("user-1") is None


@pytest.mark.asyncio
async def test_replace_creates_record(record_store, fake_redis):
    record = await record_store.replace_items("user-1", [
        {"productId": "p1", "quantity": 2, "name": "Mug", "price": 5.0, "image": "mug.png"},
    ])

    assert record.user_id == "user-1"
    stored = json.loads(fake_redis.data["cart:user-1"])
    assert stored["userId"] == "user-1"
    assert stored["items"] == [
        {"productId": "p1", "name": "Mug", "price": 5.0, "image": "mug.png", "quantity": 2},
    ]
    assert stored["updatedAt"]


@pytest.mark.asyncio
async def test_replace_overwrites_items(record_store):
    await record_store.replace_items("user-1", [{"productId": "p1", "quantity": 2}])
    await record_store.replace_items("user-1", [{"productId": "p2", "quantity": 1}])

    record = await record_store.get_record("user-1")
    assert [item.product_id for item in record.items] == ["p2"]


@pytest.mark.asyncio
async def test_replace_with_empty_list(record_store):
    await record_store.replace_items("user-1", [{"productId": "p1", "quantity": 2}])
    record = await record_store.replace_items("user-1", [])

    assert record.items == []
    assert (await record_store.get_record("user-1")).items == []


@pytest.mark.asyncio
async def test_replace_keeps_display_fields(record_store):
    """Id-only pushes keep the name/price/image stored earlier."""
    await record_store.replace_items("user-1", [
        {"productId": "p1", "quantity": 1, "name": "Mug", "price": 5.0, "image": "mug.png"},
    ])

    record = await record_store.replace_items("user-1", [
        {"productId": "p1", "quantity": 4},
        {"productId": "p2", "quantity": 1},
    ])

    first, second = record.items
    assert (first.name, first.price, first.image, first.quantity) == ("Mug", 5.0, "mug.png", 4)
    assert (second.name, second.price, second.image) == (None, None, None)


@pytest.mark.asyncio
async def test_replace_merges_repeated_products(record_store):
    record = await record_store.replace_items("user-1", [
        {"productId": "p1", "quantity": 1},
        {"productId": "p2", "quantity": 1},
        {"productId": "p1", "quantity": 2},
    ])

    assert [(item.product_id, item.quantity) for item in record.items] == [("p1", 3), ("p2", 1)]


@pytest.mark.asyncio
async def test_records_are_per_user(record_store):
    await record_store.replace_items("user-1", [{"productId": "p1", "quantity": 1}])
    await record_store.replace_items("user-2", [{"productId": "p2", "quantity": 5}])

    assert (await record_store.get_record("user-1")).items[0].product_id == "p1"
    assert (await record_store.get_record("user-2")).items[0].quantity == 5


@pytest.mark.asyncio
@pytest.mark.parametrize("raw", [
    "{broken",
    "null",
    "[]",
    '"x"',
    "42",
    '{"userId": "user-1", "items": ["garbage"]}',
])
async def test_corrupted_record_is_dropped(record_store, fake_redis, raw):
    fake_redis.data["cart:user-1"] = raw

    assert await record_store.get_record("user-1") is None
    assert "cart:user-1" not in fake_redis.data


@pytest.mark.asyncio
async def test_replace_over_corrupted_record(record_store, fake_redis):
    fake_redis.data["cart:user-1"] = "[]"

    record = await record_store.replace_items("user-1", [{"productId": "p1", "quantity": 1}])

    assert [item.product_id for item in record.items] == ["p1"]
    assert json.loads(fake_redis.data["cart:user-1"])["userId"] == "user-1"


@pytest.mark.asyncio
async def test_redis_errors_raise_unavailable():
    redis = Mock()
    redis.get = AsyncMock(side_effect=ConnectionError("refused"))
    redis.set = AsyncMock(side_effect=ConnectionError("refused"))
    store = CartRecordStore(redis=redis)

    with pytest.raises(CartStoreUnavailable):
        await store.get_record("user-1")
    with pytest.raises(CartStoreUnavailable):
        await store.replace_items("user-1", [])


@pytest.mark.asyncio
async def test_concurrent_replaces_last_writer_wins(record_store):
    first = [{"productId": "p1", "quantity": 1}]
    second = [{"productId": "p2", "quantity": 2}]

    await asyncio.gather(
        record_store.replace_items("user-1", first),
        record_store.replace_items("user-1", second),
    )

    record = await record_store.get_record("user-1")
    stored = [(item.product_id, item.quantity) for item in record.items]
    assert stored in ([("p1", 1)], [("p2", 2)])
