"""
Client-side cart state container.

Keeps the in-memory cart, mirrors it to local durable storage after every
mutation and, for authenticated users, keeps the backend cart record in step:

- login: pushes are suspended, the server cart is fetched and adopted
  (server wins), then pushes are re-enabled;
- logout: the cart and its local copy are cleared, pushes are disabled;
- while authenticated: each mutation replaces the server cart.
"""
import asyncio
import json
from dataclasses import replace
from typing import Any, Iterable, List, Mapping, Optional, Union

from core.errors import ERROR_PRODUCT_ID_REQUIRED
from core.logging import get_logger, sanitize_id_for_logging
from .api_client import CartApiClient, CartApiError
from .local_storage import CART_STORAGE_KEY, FileStorage
from .models import LineItem

logger = get_logger(__name__)


def merge_line_items(items: Iterable[Optional[LineItem]]) -> List[LineItem]:
    """Drop empty entries and fold repeated ids into the first occurrence."""
    merged: List[LineItem] = []
    by_id = {}
    for item in items:
        if item is None:
            continue
        existing = by_id.get(item.id)
        if existing is not None:
            existing.quantity += item.quantity
            continue
        by_id[item.id] = item
        merged.append(item)
    return merged


class CartStateContainer:
    """
    Owns one session's cart.

    Mutations are synchronous. Network work (login adoption, pushes) runs in
    asyncio tasks, so ``set_token`` with a token must be called while an
    event loop is running.

    Usage:
        async with CartStateContainer(storage, CartApiClient()) as cart:
            cart.add_to_cart({"id": "p1", "name": "Mug", "price": 9.5})
            cart.set_token(token)
            await cart.wait_idle()
    """

    def __init__(
        self,
        storage=None,
        api_client: Optional[CartApiClient] = None,
        storage_key: str = CART_STORAGE_KEY,
    ):
        self._storage = storage if storage is not None else FileStorage()
        self._owns_api_client = api_client is None
        self._api = api_client if api_client is not None else CartApiClient()
        self._storage_key = storage_key

        self._token: Optional[str] = None
        self._ready_to_sync = False

        self._adoption_task: Optional[asyncio.Task] = None
        self._push_task: Optional[asyncio.Task] = None
        self._push_pending = False

        self._items: List[LineItem] = self._load_from_storage()

    # ==================== READ ACCESS ====================

    @property
    def cart(self) -> tuple:
        """Snapshot of the current line items."""
        return tuple(replace(item) for item in self._items)

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def ready_to_sync(self) -> bool:
        return self._ready_to_sync

    @property
    def is_empty(self) -> bool:
        return not self._items

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self._items)

    @property
    def subtotal(self) -> float:
        return round(sum(item.price * item.quantity for item in self._items), 2)

    # ==================== MUTATIONS ====================

    def add_to_cart(self, product: Union[Mapping[str, Any], LineItem]) -> None:
        """Add one unit of ``product``; an existing line only gets its quantity bumped."""
        if isinstance(product, LineItem):
            item = replace(product, quantity=1)
        else:
            item = LineItem.from_dict({**product, "quantity": 1})
        if item is None:
            raise ValueError(ERROR_PRODUCT_ID_REQUIRED)

        existing = self._find(item.id)
        if existing is not None:
            existing.quantity += 1
        else:
            self._items.append(item)
        logger.debug(f"Added product {sanitize_id_for_logging(item.id)} to cart")
        self._on_cart_changed()

    def remove_from_cart(self, product_id: str) -> None:
        """Remove the line for ``product_id``; unknown ids are ignored."""
        remaining = [item for item in self._items if item.id != product_id]
        if len(remaining) == len(self._items):
            return
        self._items = remaining
        self._on_cart_changed()

    def update_quantity(self, product_id: str, quantity: int) -> None:
        """
        Set the quantity of an existing line.

        Args:
            product_id: Line to update (unknown ids are ignored)
            quantity: New quantity; 0 removes the line

        Raises:
            ValueError: If quantity is not a non-negative integer
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValueError("quantity must be an integer")
        if quantity < 0:
            raise ValueError("quantity must be a non-negative integer")

        item = self._find(product_id)
        if item is None:
            return
        if quantity == 0:
            self._items.remove(item)
        else:
            item.quantity = quantity
        self._on_cart_changed()

    def clear_cart(self) -> None:
        """Empty the cart and erase the local copy."""
        self._items = []
        self._remove_local_copy()
        self._schedule_push()
        logger.info("Cart cleared")

    # ==================== AUTH TRANSITIONS ====================

    def set_token(self, token: Optional[str]) -> None:
        """
        Apply an authentication change.

        A new token starts server-cart adoption; ``None`` (logout) clears the
        cart. Re-sending the current token does nothing.
        """
        token = token or None
        if token == self._token:
            return

        self._token = token
        self._ready_to_sync = False
        self._cancel_adoption()

        if token is None:
            self._items = []
            self._remove_local_copy()
            logger.info("Logged out: cart cleared and sync paused")
            return

        self._adoption_task = asyncio.create_task(self._adopt_server_cart(token))

    async def _adopt_server_cart(self, token: str) -> None:
        try:
            data = await self._api.fetch_cart(token)
        except CartApiError as e:
            logger.warning(f"Failed to load server cart, keeping local cart: {e}")
            data = None

        if self._token != token:
            logger.info(f"Discarding server cart for stale session {sanitize_id_for_logging(token)}")
            return

        if data is not None:
            server_items = data.get("items")
            if not isinstance(server_items, list):
                server_items = []
            self._items = merge_line_items(
                LineItem.from_server_item(it) for it in server_items if isinstance(it, Mapping)
            )
            self._mirror_to_storage()
            logger.info(f"Adopted server cart with {len(self._items)} items")

        self._ready_to_sync = True

    def _cancel_adoption(self) -> None:
        if self._adoption_task is not None and not self._adoption_task.done():
            self._adoption_task.cancel()
        self._adoption_task = None

    # ==================== SYNC ====================

    def _push_payload(self) -> List[dict]:
        return [item.to_push_item() for item in self._items if item.id]

    def _schedule_push(self) -> None:
        if not self._token or not self._ready_to_sync:
            return
        self._push_pending = True
        if self._push_task is None or self._push_task.done():
            self._push_task = asyncio.create_task(self._push_loop())

    async def _push_loop(self) -> None:
        """Send the latest cart until no mutation arrived during the last push."""
        while self._push_pending:
            self._push_pending = False
            token = self._token
            if not token or not self._ready_to_sync:
                return
            try:
                await self._api.push_cart(token, self._push_payload())
            except CartApiError as e:
                logger.warning(f"Error syncing cart to backend: {e}")

    async def wait_idle(self) -> None:
        """Wait until no adoption or push is in flight."""
        while True:
            pending = [
                task for task in (self._adoption_task, self._push_task)
                if task is not None and not task.done()
            ]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    # ==================== LOCAL STORAGE ====================

    def _load_from_storage(self) -> List[LineItem]:
        raw = self._storage.get_item(self._storage_key)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Corrupted local cart, starting empty: {e}")
            return []
        if not isinstance(data, list):
            logger.warning("Local cart is not a list, starting empty")
            return []
        return merge_line_items(LineItem.from_dict(it) for it in data if isinstance(it, Mapping))

    def _mirror_to_storage(self) -> None:
        payload = json.dumps([item.to_dict() for item in self._items])
        try:
            self._storage.set_item(self._storage_key, payload)
        except OSError:
            logger.error("Failed to write cart to local storage", exc_info=True)

    def _remove_local_copy(self) -> None:
        try:
            self._storage.remove_item(self._storage_key)
        except OSError:
            logger.error("Failed to remove local cart copy", exc_info=True)

    def _on_cart_changed(self) -> None:
        self._mirror_to_storage()
        self._schedule_push()

    def _find(self, product_id: str) -> Optional[LineItem]:
        return next((item for item in self._items if item.id == product_id), None)

    # ==================== LIFECYCLE ====================

    async def aclose(self) -> None:
        """Cancel background work and close the owned HTTP client."""
        tasks = [t for t in (self._adoption_task, self._push_task) if t is not None and not t.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._adoption_task = None
        self._push_task = None
        if self._owns_api_client:
            await self._api.aclose()

    async def __aenter__(self) -> "CartStateContainer":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
