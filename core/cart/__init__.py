"""Cart package: line items, local storage, backend client, state container and record store."""
from .api_client import CartApiClient, CartApiError
from .container import CartStateContainer
from .local_storage import CART_STORAGE_KEY, FileStorage, MemoryStorage
from .models import CartRecord, CartRecordItem, LineItem
from .service import CartRecordStore, CartStoreUnavailable, get_cart_record_store

__all__ = [
    "CART_STORAGE_KEY",
    "CartApiClient",
    "CartApiError",
    "CartRecord",
    "CartRecordItem",
    "CartRecordStore",
    "CartStateContainer",
    "CartStoreUnavailable",
    "FileStorage",
    "LineItem",
    "MemoryStorage",
    "get_cart_record_store",
]
