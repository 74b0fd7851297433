"""Cart models: client line items and server cart records."""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional


def coerce_price(value: Any) -> float:
    """Price as a float; missing or non-numeric values become 0."""
    if isinstance(value, bool):
        return 0.0
    try:
        price = float(value)
    except (TypeError, ValueError):
        return 0.0
    if price != price:  # NaN
        return 0.0
    return price


def coerce_quantity(value: Any) -> int:
    """Quantity as a positive integer; anything else becomes 1."""
    if isinstance(value, bool):
        return 1
    try:
        quantity = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 1
    return quantity if quantity >= 1 else 1


def resolve_product_id(value: Any) -> Optional[str]:
    """
    Resolve a product identity.

    Accepts a plain id or an expanded product reference such as
    ``{"_id": "...", "name": "..."}``. Returns None when no id is present.
    """
    if isinstance(value, Mapping):
        value = value["_id"] if value.get("_id") is not None else value.get("id")
    if value is None or isinstance(value, bool):
        return None
    pid = str(value).strip()
    return pid or None


@dataclass
class LineItem:
    """Single product entry in the client cart."""
    id: str
    name: str = ""
    price: float = 0.0
    image: str = ""
    quantity: int = 1

    def __post_init__(self):
        self.price = coerce_price(self.price)
        self.quantity = coerce_quantity(self.quantity)

    def to_dict(self) -> dict:
        """Convert to the local storage representation."""
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "image": self.image,
            "quantity": self.quantity,
        }

    def to_push_item(self) -> dict:
        """Reduce to the backend push shape."""
        return {"productId": self.id, "quantity": self.quantity}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Optional["LineItem"]:
        """Create from stored or product data; None if it carries no id."""
        raw_id = data.get("id")
        if raw_id is None:
            raw_id = data.get("_id")
        pid = resolve_product_id(raw_id)
        if pid is None:
            return None
        return cls(
            id=pid,
            name=str(data.get("name") or ""),
            price=data.get("price"),
            image=str(data.get("image") or ""),
            quantity=data.get("quantity"),
        )

    @classmethod
    def from_server_item(cls, data: Mapping[str, Any]) -> Optional["LineItem"]:
        """
        Normalize an item returned by ``GET /cart``.

        ``productId`` may be a plain id or an expanded product object; the
        item's own denormalized fields take precedence over the expanded
        product's fields.
        """
        ref = data.get("productId")
        pid = resolve_product_id(ref)
        if pid is None:
            return None
        product = ref if isinstance(ref, Mapping) else {}

        price = data.get("price")
        if price is None:
            price = product.get("price")

        return cls(
            id=pid,
            name=str(data.get("name") or product.get("name") or ""),
            price=price,
            image=str(data.get("image") or product.get("image") or ""),
            quantity=data.get("quantity"),
        )


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class CartRecordItem:
    """Stored line of a server cart record, with denormalized display fields."""
    product_id: str
    quantity: int
    name: Optional[str] = None
    price: Optional[float] = None
    image: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "productId": self.product_id,
            "name": self.name,
            "price": self.price,
            "image": self.image,
            "quantity": self.quantity,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CartRecordItem":
        price = data.get("price")
        return cls(
            product_id=str(data["productId"]),
            quantity=int(data["quantity"]),
            name=data.get("name"),
            price=float(price) if price is not None else None,
            image=data.get("image"),
        )


@dataclass
class CartRecord:
    """Durable cart document, one per user."""
    user_id: str
    items: List[CartRecordItem] = field(default_factory=list)
    updated_at: str = ""

    def __post_init__(self):
        if not self.updated_at:
            self.updated_at = _utc_now()

    def touch(self) -> None:
        self.updated_at = _utc_now()

    def find(self, product_id: str) -> Optional[CartRecordItem]:
        return next((item for item in self.items if item.product_id == product_id), None)

    def to_dict(self) -> dict:
        """Convert to dictionary for Redis storage and API responses."""
        return {
            "userId": self.user_id,
            "items": [item.to_dict() for item in self.items],
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CartRecord":
        items = [CartRecordItem.from_dict(item) for item in data.get("items", [])]
        return cls(
            user_id=str(data["userId"]),
            items=items,
            updated_at=data.get("updatedAt", ""),
        )
