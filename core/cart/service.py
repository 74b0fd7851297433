"""Cart record store using Redis storage."""
import json
from typing import Iterable, List, Mapping, Optional

from core.errors import ERROR_CART_UNAVAILABLE
from core.logging import get_logger, sanitize_id_for_logging
from .models import CartRecord, CartRecordItem
from .storage import RedisKeys, get_redis

logger = get_logger(__name__)


class CartStoreUnavailable(Exception):
    """Redis could not be reached or rejected the operation."""


class CartRecordStore:
    """
    Persists one cart document per user in Redis.

    Features:
    - Full replace-upsert of a user's items
    - Display fields (name, price, image) survive replaces that only send ids
    - Records never expire; only the owning user's writes replace them
    """

    def __init__(self, redis=None):
        self._redis = redis  # Lazy initialization when not injected

    @property
    def redis(self):
        """Get Redis client (lazy initialization)."""
        if self._redis is None:
            try:
                self._redis = get_redis()
            except ValueError as e:
                raise CartStoreUnavailable(f"Redis not available: {e}") from e
        return self._redis

    async def get_record(self, user_id: str) -> Optional[CartRecord]:
        """
        Get the user's cart record.

        Returns:
            CartRecord or None if the user has no cart yet

        Raises:
            CartStoreUnavailable: If Redis is unavailable
        """
        key = RedisKeys.cart_key(user_id)
        try:
            data = await self.redis.get(key)
        except CartStoreUnavailable:
            raise
        except Exception as e:
            logger.error(f"Failed to get cart from Redis: {e}")
            raise CartStoreUnavailable(f"{ERROR_CART_UNAVAILABLE}: {e!s}") from e

        if not data:
            return None

        try:
            parsed = json.loads(data)
            if not isinstance(parsed, dict):
                raise TypeError(f"expected a JSON object, got {type(parsed).__name__}")
            return CartRecord.from_dict(parsed)
        except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
            # Corrupted data - clear it and report no cart
            logger.warning(f"Corrupted cart data for user {sanitize_id_for_logging(user_id)}: {e}")
            await self._delete(key)
            return None

    async def save_record(self, record: CartRecord) -> CartRecord:
        """Write the record, stamping updatedAt."""
        record.touch()
        key = RedisKeys.cart_key(record.user_id)
        try:
            await self.redis.set(key, json.dumps(record.to_dict()))
        except CartStoreUnavailable:
            raise
        except Exception as e:
            logger.error(f"Failed to save cart to Redis: {e}")
            raise CartStoreUnavailable(f"{ERROR_CART_UNAVAILABLE}: {e!s}") from e
        return record

    async def replace_items(self, user_id: str, items: Iterable[Mapping]) -> CartRecord:
        """
        Replace the user's cart items, creating the record if needed.

        Each item needs ``productId`` and ``quantity``; ``name``, ``price``
        and ``image`` are optional and fall back to what was stored before for
        the same product. Repeated product ids are merged into one line.

        The read of the previous record and the write are separate Redis
        calls, so two concurrent replaces for one user are last-writer-wins
        and may drop display fields carried over by the other.

        Returns:
            The stored record
        """
        previous = await self.get_record(user_id)

        new_items: List[CartRecordItem] = []
        by_id = {}
        for raw in items:
            product_id = str(raw["productId"])
            quantity = int(raw["quantity"])

            existing = by_id.get(product_id)
            if existing is not None:
                existing.quantity += quantity
                continue

            stored = previous.find(product_id) if previous else None
            item = CartRecordItem(
                product_id=product_id,
                quantity=quantity,
                name=raw.get("name") if raw.get("name") is not None else (stored.name if stored else None),
                price=raw.get("price") if raw.get("price") is not None else (stored.price if stored else None),
                image=raw.get("image") if raw.get("image") is not None else (stored.image if stored else None),
            )
            by_id[product_id] = item
            new_items.append(item)

        record = CartRecord(user_id=user_id, items=new_items)
        await self.save_record(record)
        logger.info(f"Cart replaced for user {sanitize_id_for_logging(user_id)}: {len(new_items)} items")
        return record

    async def _delete(self, key: str) -> None:
        try:
            await self.redis.delete(key)
        except Exception as e:
            logger.error(f"Failed to delete corrupted cart {key}: {e}")


# Singleton instance
_cart_record_store: Optional[CartRecordStore] = None


def get_cart_record_store() -> CartRecordStore:
    """Get CartRecordStore singleton."""
    global _cart_record_store
    if _cart_record_store is None:
        _cart_record_store = CartRecordStore()
    return _cart_record_store
